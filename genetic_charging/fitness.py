"""
fitness.py
==========

Objective maximised by the GA driver:

    fitness = −(total cost + zero-movement penalty + restriction penalty)

* zero-movement: every non-idle period that moved no energy costs its
  length in hours times the average import price (a wasted slot)
* restriction: a CHARGE period *starting* inside a restricted window costs
  ``RESTRICTION_SAFETY_MULTIPLIER × 60 × average import price`` once,
  on top of the per-interval penalties of the scorer
"""

from __future__ import annotations

from typing import Sequence

from .activity import Activity
from .optimization_context import MINUTES_PER_SAMPLE, OptimizationContext
from .schedule import MaterializedPeriod, Phenotype, materialize

RESTRICTION_SAFETY_MULTIPLIER = 20


# ---------------------------------------------------------------------------#
#  Fitness helper                                                            #
# ---------------------------------------------------------------------------#
class FitnessAccumulator:
    __slots__ = ("cost", "zero_movement_penalty", "restriction_penalty")

    def __init__(self) -> None:
        self.cost = 0.0
        self.zero_movement_penalty = 0.0
        self.restriction_penalty = 0.0

    def add(self, period: MaterializedPeriod, average_import_price: float) -> None:
        self.cost += period.cost
        if period.activity != Activity.IDLE and period.charge == 0:
            self.zero_movement_penalty += (
                period.duration / MINUTES_PER_SAMPLE * average_import_price
            )

    # -------- numeric fitness used by GA --------------------------------
    def value(self) -> float:
        return -(self.cost + self.zero_movement_penalty + self.restriction_penalty)


def _starts_restricted_charge(
    periods: Sequence[MaterializedPeriod], context: OptimizationContext
) -> bool:
    return any(
        p.activity == Activity.CHARGE and not context.is_charging_allowed_at(p.start)
        for p in periods
    )


def evaluate(
    phenotype: Phenotype, context: OptimizationContext, average_import_price: float
) -> FitnessAccumulator:
    acc = FitnessAccumulator()
    periods = materialize(phenotype, context)
    for period in periods:
        acc.add(period, average_import_price)
    if _starts_restricted_charge(periods, context):
        acc.restriction_penalty = (
            RESTRICTION_SAFETY_MULTIPLIER * average_import_price * MINUTES_PER_SAMPLE
        )
    return acc


class FitnessFunction:
    """
    Picklable ``phenotype -> float`` closure over one context, so it can be
    handed to a process pool through DEAP's ``toolbox.map``.
    """

    def __init__(self, context: OptimizationContext) -> None:
        self.context = context
        self.average_import_price = context.average_import_price

    def __call__(self, phenotype: Phenotype) -> float:
        return evaluate(phenotype, self.context, self.average_import_price).value()


def fitness(phenotype: Phenotype, context: OptimizationContext) -> float:
    return FitnessFunction(context)(phenotype)
