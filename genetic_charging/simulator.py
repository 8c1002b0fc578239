"""
simulator.py
============

Entry point of the optimiser.

Responsibilities
----------------
* Validate inputs and run the price-spread gate
* Evolve a population of schedules with DEAP (tournament selection,
  time-cut crossover, restriction-aware mutation, elitism)
* Materialise the best individual and the battery-less baseline for the
  report

All randomness comes from one ``random.Random`` seeded from
``GeneticParameters.seed``, so a seeded run is reproducible.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Callable, List, Optional, Sequence, Tuple

from deap import base, creator, tools
from tqdm import tqdm

from .activity import Activity
from .crossover import crossover
from .fitness import FitnessFunction
from .mutation import mutate
from .optimization_context import OptimizationContext
from .population import generate_individual
from .price_spread import price_spread_percentage, should_optimize
from .schedule import Period, Phenotype, materialize, merge_adjacent, total_cost
from .simulation_results import ScheduleResult, StrategyResult
from .system_parameters import GeneticParameters

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------#
#  DEAP types                                                                #
# ---------------------------------------------------------------------------#
if not hasattr(creator, "ScheduleFitness"):
    creator.create("ScheduleFitness", base.Fitness, weights=(1.0,))
if not hasattr(creator, "ScheduleIndividual"):
    creator.create("ScheduleIndividual", Phenotype, fitness=creator.ScheduleFitness)


def _evaluate(fitness_fn: FitnessFunction, individual: Phenotype) -> Tuple[float]:
    return (fitness_fn(individual),)


def select_tournament(
    individuals: Sequence[Phenotype], k: int, tournsize: int, rng: random.Random
) -> List[Phenotype]:
    """``tools.selTournament`` drawing its aspirants from *rng*."""
    chosen = []
    for _ in range(k):
        aspirants = [individuals[int(rng.random() * len(individuals))] for _ in range(tournsize)]
        chosen.append(tools.selBest(aspirants, 1)[0])
    return chosen


# ---------------------------------------------------------------------------#
#  GA toolbox setup                                                          #
# ---------------------------------------------------------------------------#
def _setup_deap(
    context: OptimizationContext,
    genetic: GeneticParameters,
    rng: random.Random,
    map_fn: Callable = map,
) -> base.Toolbox:
    toolbox = base.Toolbox()
    toolbox.register(
        "individual",
        generate_individual,
        context,
        genetic.number_of_price_periods,
        rng,
        creator.ScheduleIndividual,
    )
    toolbox.register("population", tools.initRepeat, list, toolbox.individual)
    toolbox.register("evaluate", _evaluate, FitnessFunction(context))
    toolbox.register("mate", crossover, total_duration=context.total_duration, rng=rng)
    toolbox.register(
        "mutate", mutate, context=context, mutation_rate=genetic.mutation_rate, rng=rng
    )
    toolbox.register("select", select_tournament, tournsize=genetic.tournament_size, rng=rng)
    toolbox.register("map", map_fn)
    return toolbox


def _evaluate_invalid(toolbox: base.Toolbox, individuals: Sequence[Phenotype]) -> None:
    invalid = [ind for ind in individuals if not ind.fitness.valid]
    fitnesses = list(toolbox.map(toolbox.evaluate, invalid))
    for ind, fit in zip(invalid, fitnesses):
        ind.fitness.values = fit


def evolve(
    context: OptimizationContext,
    genetic: GeneticParameters,
    rng: random.Random,
    *,
    map_fn: Callable = map,
    cancel: Optional[threading.Event] = None,
    progress: bool = False,
) -> Tuple[Phenotype, List[float]]:
    """Run the GA loop and return the best individual plus its fitness per generation."""
    toolbox = _setup_deap(context, genetic, rng, map_fn)

    population = toolbox.population(n=genetic.population_size)
    _evaluate_invalid(toolbox, population)
    hall_of_fame = tools.HallOfFame(1)
    hall_of_fame.update(population)
    history = [hall_of_fame[0].fitness.values[0]]

    for generation in tqdm(range(genetic.generations), desc="generations", disable=not progress):
        if cancel is not None and cancel.is_set():
            logger.info("optimisation cancelled after %d generations", generation)
            break

        offspring = toolbox.select(population, len(population))
        offspring = list(map(toolbox.clone, offspring))

        # crossover + mutation
        for i in range(1, len(offspring), 2):
            if rng.random() < genetic.crossover_rate:
                offspring[i - 1], offspring[i] = toolbox.mate(offspring[i - 1], offspring[i])
        for i, ind in enumerate(offspring):
            mutant = toolbox.mutate(ind)
            if mutant.periods != ind.periods:
                offspring[i] = mutant

        _evaluate_invalid(toolbox, offspring)

        # elitism: the best so far replaces the weakest child
        if len(offspring) > 1:
            offspring = tools.selBest(offspring, len(offspring) - 1)
            offspring.append(toolbox.clone(hall_of_fame[0]))
        population[:] = offspring

        hall_of_fame.update(population)
        history.append(hall_of_fame[0].fitness.values[0])
        logger.debug("generation %d best fitness %.4f", generation, history[-1])

    return hall_of_fame[0], history


# ---------------------------------------------------------------------------#
#  Reporting helpers                                                         #
# ---------------------------------------------------------------------------#
def _idle(context: OptimizationContext) -> Phenotype:
    return Phenotype([Period(0, Activity.IDLE)], context.excess_pv_energy_use)


def _schedule_result(phenotype: Phenotype, context: OptimizationContext) -> ScheduleResult:
    periods = materialize(phenotype, context)
    return ScheduleResult(
        schedule=merge_adjacent(periods),
        excess_pv_energy_use=phenotype.excess_pv_energy_use,
        cost=total_cost(periods),
        horizon_start=context.start,
    )


# ---------------------------------------------------------------------------#
#  Main entry point                                                          #
# ---------------------------------------------------------------------------#
def calculate_battery_charging_strategy(
    context: OptimizationContext,
    genetic: Optional[GeneticParameters] = None,
    *,
    map_fn: Callable = map,
    cancel: Optional[threading.Event] = None,
    progress: bool = False,
) -> StrategyResult:
    """
    Optimise one horizon and return the best schedule, the no-battery
    baseline and the price-spread verdict.

    ``map_fn`` replaces DEAP's ``toolbox.map`` (e.g. ``Pool().map``) for
    parallel fitness evaluation.  Setting *cancel* stops after the current
    generation, keeping the best schedule found so far.

    Raises :class:`~genetic_charging.exceptions.ConfigurationError` before
    any generation runs when the inputs are unusable.
    """
    genetic = genetic or GeneticParameters()
    context.validate()
    genetic.validate()

    spread = price_spread_percentage(context.samples)
    no_battery = _schedule_result(_idle(context), context.without_battery())

    if not should_optimize(context.samples, genetic.min_price_spread_percent):
        return StrategyResult(
            best=_schedule_result(_idle(context), context),
            no_battery=no_battery,
            skipped_due_to_low_price_spread=True,
            price_spread_percentage=spread,
        )

    rng = random.Random(genetic.seed)
    best, history = evolve(
        context, genetic, rng, map_fn=map_fn, cancel=cancel, progress=progress
    )
    best_result = _schedule_result(best, context)
    logger.info(
        "best cost %.4f vs %.4f without battery (spread %.1f%%)",
        best_result.cost,
        no_battery.cost,
        spread,
    )

    return StrategyResult(
        best=best_result,
        no_battery=no_battery,
        skipped_due_to_low_price_spread=False,
        price_spread_percentage=spread,
        generations_run=len(history) - 1,
        fitness_history=history,
    )
