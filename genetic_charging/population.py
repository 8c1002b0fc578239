"""
population.py
=============

Random initial population.

Each individual gets a sequence of activities, every one different from
its predecessor, until ``number_of_price_periods`` non-idle activities have
been drawn.  The activities are then zipped with unique, sorted random
start minutes (always including minute 0).
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, List, Optional

from .activity import Activity
from .charging_restrictions import ChargingRestrictions, is_charging_allowed
from .optimization_context import OptimizationContext
from .schedule import Period, Phenotype
from .system_parameters import GeneticParameters

# minutes between the projected timestamps used for restriction checks
PROJECTION_STEP_MINUTES = 30

PhenotypeFactory = Callable[..., Phenotype]


def _pick(values: List[Activity], rng: random.Random) -> Activity:
    return values[int(rng.random() * len(values))]


def generate_random_activity(
    excluded: Optional[Activity],
    rng: random.Random,
    timestamp: Optional[datetime] = None,
    restrictions: Optional[ChargingRestrictions] = None,
    allow_ev: bool = False,
) -> Activity:
    """
    Draw an activity different from *excluded*.

    Inside a restricted window only DISCHARGE and IDLE are drawn.
    """
    if (
        timestamp is not None
        and restrictions is not None
        and not is_charging_allowed(timestamp, restrictions)
    ):
        allowed = [a for a in (Activity.DISCHARGE, Activity.IDLE) if a != excluded]
        if len(allowed) == 1:
            return allowed[0]
        return _pick(allowed, rng)

    candidates = [Activity.DISCHARGE, Activity.IDLE, Activity.CHARGE]
    if allow_ev:
        candidates.append(Activity.EV_CHARGE)
    return _pick([a for a in candidates if a != excluded], rng)


def _random_activities(
    context: OptimizationContext, number_of_price_periods: int, rng: random.Random
) -> List[Activity]:
    activities: List[Activity] = []
    previous: Optional[Activity] = None
    non_idle = 0
    ev_drawn = False
    while non_idle < number_of_price_periods:
        activity = generate_random_activity(
            previous,
            rng,
            timestamp=context.timestamp_at(non_idle * PROJECTION_STEP_MINUTES),
            restrictions=context.charging_restrictions,
            allow_ev=context.ev_enabled and not ev_drawn,
        )
        ev_drawn = ev_drawn or activity == Activity.EV_CHARGE
        non_idle += activity != Activity.IDLE
        activities.append(activity)
        previous = activity
    return activities


def _random_starts(count: int, total_duration: int, rng: random.Random) -> List[int]:
    starts = {0}
    while len(starts) < count:
        starts.add(int(rng.random() * total_duration))
    return sorted(starts)


def generate_individual(
    context: OptimizationContext,
    number_of_price_periods: int,
    rng: random.Random,
    individual_factory: PhenotypeFactory = Phenotype,
) -> Phenotype:
    # one start per minute at most
    activities = _random_activities(context, number_of_price_periods, rng)[
        : context.total_duration
    ]
    starts = _random_starts(len(activities), context.total_duration, rng)
    return individual_factory(
        periods=[Period(start, activity) for start, activity in zip(starts, activities)],
        excess_pv_energy_use=context.excess_pv_energy_use,
    )


def generate_population(
    context: OptimizationContext,
    genetic: GeneticParameters,
    rng: random.Random,
    individual_factory: PhenotypeFactory = Phenotype,
) -> List[Phenotype]:
    return [
        generate_individual(
            context, genetic.number_of_price_periods, rng, individual_factory
        )
        for _ in range(genetic.population_size)
    ]
