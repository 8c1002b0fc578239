"""Time-cut crossover for schedules (registered as the DEAP ``mate`` operator)."""

from __future__ import annotations

import random
from typing import Optional, Tuple

from .population import PhenotypeFactory
from .schedule import Phenotype


def crossover(
    first: Phenotype,
    second: Phenotype,
    total_duration: int,
    rng: random.Random,
    individual_factory: Optional[PhenotypeFactory] = None,
) -> Tuple[Phenotype, Phenotype]:
    """
    Cut both parents at one random minute and swap the tails.

    Both parents start at minute 0 and the cut is after it, so each child
    keeps a period at 0 and stays sorted and unique.
    """
    if total_duration < 2:
        return first, second
    cut = 1 + int(rng.random() * (total_duration - 1))

    def _child(head: Phenotype, tail: Phenotype) -> Phenotype:
        periods = [p for p in head.periods if p.start < cut]
        periods += [p for p in tail.periods if p.start >= cut]
        factory = individual_factory or type(head)
        return factory(periods=periods, excess_pv_energy_use=head.excess_pv_energy_use)

    return _child(first, second), _child(second, first)
