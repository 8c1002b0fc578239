"""
Mutation operator.

Per period, each with probability ``mutation_rate``:

* resample the activity (never the current one, restriction aware)
* shift the start by up to 10 % of the distance to each neighbour

The first period always stays at minute 0 and a shift that would collide
with a neighbour is dropped, so the result is again a valid schedule.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from .optimization_context import OptimizationContext
from .population import PhenotypeFactory, generate_random_activity
from .schedule import Period, Phenotype

JITTER_FRACTION = 0.1


def _time_adjustment(low: int, mid: int, high: int, rng: random.Random) -> int:
    lower = JITTER_FRACTION * (low - mid)
    upper = JITTER_FRACTION * (high - mid)
    return math.floor(rng.random() * (upper - lower) + lower)


def mutate(
    phenotype: Phenotype,
    context: OptimizationContext,
    mutation_rate: float,
    rng: random.Random,
    individual_factory: Optional[PhenotypeFactory] = None,
) -> Phenotype:
    """Return a mutated copy of *phenotype*; the parent is left untouched."""
    periods = phenotype.periods
    mutated: List[Period] = []

    for i, gene in enumerate(periods):
        activity, start = gene.activity, gene.start

        if rng.random() < mutation_rate:
            activity = generate_random_activity(
                gene.activity,
                rng,
                timestamp=context.timestamp_at(gene.start),
                restrictions=context.charging_restrictions,
                allow_ev=context.ev_enabled,
            )

        if gene.start > 0 and rng.random() < mutation_rate and mutated:
            next_start = periods[i + 1].start if i + 1 < len(periods) else context.total_duration
            candidate = gene.start + _time_adjustment(
                periods[i - 1].start + 1, gene.start, next_start, rng
            )
            if mutated[-1].start < candidate < next_start:
                start = candidate

        mutated.append(Period(start, activity))

    factory = individual_factory or type(phenotype)
    return factory(periods=mutated, excess_pv_energy_use=phenotype.excess_pv_energy_use)
