"""
schedule.py
===========

Schedule representation used by the GA and the materializer that turns a
(sparse) candidate into a gapless, costed timeline.

A ``Phenotype`` only stores the starts of its periods; the duration of a
period runs to the next start, or to the end of the horizon for the last
one.  ``expand`` makes that explicit and ``materialize`` folds the scorer
over the result, carrying battery level and EV state from left to right.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from .activity import Activity, ExcessPvEnergyUse
from .energy_flow import score_sub_interval
from .intervals import SubInterval, iter_sub_intervals
from .optimization_context import MINUTES_PER_SAMPLE, OptimizationContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------#
#  Genotype / phenotype                                                      #
# ---------------------------------------------------------------------------#

@dataclass(slots=True, frozen=True)
class Period:
    start: int
    activity: Activity


@dataclass
class Phenotype:
    """One candidate: ordered periods (start[0] == 0) plus the excess-PV policy."""

    periods: List[Period] = field(default_factory=list)
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID


@dataclass(slots=True)
class MaterializedPeriod:
    start: int
    duration: int
    activity: Activity
    cost: float = 0.0
    charge: float = 0.0

    @property
    def name(self) -> str:
        return Activity(self.activity).label

    @property
    def end(self) -> int:
        return self.start + self.duration


def is_valid_schedule(periods: Sequence[Period], total_duration: int) -> bool:
    """Sorted, unique, first start 0, every start inside the horizon."""
    if not periods or periods[0].start != 0:
        return False
    starts = [p.start for p in periods]
    return all(a < b for a, b in zip(starts, starts[1:])) and starts[-1] < total_duration


# ---------------------------------------------------------------------------#
#  Sparse → dense                                                            #
# ---------------------------------------------------------------------------#

def expand(periods: Sequence[Period], total_duration: int) -> List[SubInterval]:
    """
    Resolve durations and fill gaps with IDLE.

    The result covers ``[0, total_duration)`` without gaps or overlaps.
    """
    spans: List[SubInterval] = []
    cursor = 0
    for i, period in enumerate(periods):
        if period.start > cursor:
            spans.append(SubInterval(cursor, period.start - cursor, Activity.IDLE))
        end = periods[i + 1].start if i + 1 < len(periods) else total_duration
        end = min(end, total_duration)
        start = max(period.start, cursor)
        if end > start:
            spans.append(SubInterval(start, end - start, Activity(period.activity)))
            cursor = end
    if cursor < total_duration:
        spans.append(SubInterval(cursor, total_duration - cursor, Activity.IDLE))
    return spans


# ---------------------------------------------------------------------------#
#  Materialization                                                           #
# ---------------------------------------------------------------------------#

def materialize(phenotype: Phenotype, context: OptimizationContext) -> List[MaterializedPeriod]:
    """Cost every span of *phenotype* over the horizon of *context*."""
    battery = context.battery
    ev = context.ev

    level = battery.initial_charge
    ev_soc = ev.soc if ev is not None else 0.0
    ev_minutes = 0

    result: List[MaterializedPeriod] = []
    for span in expand(phenotype.periods, context.total_duration):
        period = MaterializedPeriod(span.start, span.duration, span.activity)
        if span.activity != Activity.EV_CHARGE:
            ev_minutes = 0

        for sub in iter_sub_intervals(span, context, ev_minutes):
            sample = context.sample_at(sub.start)
            if sample is None:
                logger.debug("no sample for minute %s, skipping %s min", sub.start, sub.duration)
                continue

            hours = sub.duration / MINUTES_PER_SAMPLE
            is_ev = sub.activity == Activity.EV_CHARGE and ev is not None
            score = score_sub_interval(
                sub.activity,
                import_price=sample.import_price,
                export_price=sample.export_price,
                consumption=sample.consumption * hours,
                production=sample.production * hours,
                max_charge=max(0.0, min(battery.max_input_power * hours, battery.max_energy - level)),
                max_discharge=max(0.0, min(battery.max_output_power * hours, level)),
                excess_pv_energy_use=phenotype.excess_pv_energy_use,
                charging_allowed=(
                    context.is_charging_allowed_at(sub.start) if sub.activity.is_charging else True
                ),
                ev_eligible=context.ev_enabled and ev_soc < ev.limit,
                max_ev_charge=ev.max_charge(ev_soc, hours) if is_ev else 0.0,
                continuous_ev_minutes=ev_minutes + sub.duration if is_ev else 0,
            )
            period.cost += score.cost
            period.charge += score.charge

            if is_ev:
                ev_minutes += sub.duration
                ev_soc = ev.soc_after(ev_soc, score.charge)
            else:
                ev_minutes = 0
                level = min(max(level + score.charge, 0.0), battery.max_energy)

        result.append(period)
    return result


def total_cost(periods: Iterable[MaterializedPeriod]) -> float:
    return sum(p.cost for p in periods)


def merge_adjacent(periods: Sequence[MaterializedPeriod]) -> List[MaterializedPeriod]:
    """Join neighbouring periods that carry the same activity (for reporting)."""
    merged: List[MaterializedPeriod] = []
    for p in periods:
        if merged and merged[-1].activity == p.activity and merged[-1].end == p.start:
            last = merged[-1]
            last.duration += p.duration
            last.cost += p.cost
            last.charge += p.charge
        else:
            merged.append(MaterializedPeriod(p.start, p.duration, p.activity, p.cost, p.charge))
    return merged
