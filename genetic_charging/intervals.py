"""
intervals.py
============

Decompose one schedule span into the atomic chunks the scorer works on.

A chunk never crosses

  1) an hourly sample boundary (prices and forecasts change there),
  2) a charging-restriction transition (CHARGE / EV_CHARGE only),
  3) the EV's maximum continuous charging time (EV_CHARGE only).

Chunks are contiguous and their durations add up to the span duration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from .activity import Activity
from .optimization_context import MINUTES_PER_SAMPLE, OptimizationContext


@dataclass(slots=True, frozen=True)
class SubInterval:
    start: int
    duration: int
    activity: Activity = Activity.IDLE

    @property
    def end(self) -> int:
        return self.start + self.duration


def _hour_chunk(start: int, remaining: int) -> int:
    return min(MINUTES_PER_SAMPLE - start % MINUTES_PER_SAMPLE, remaining)


def iter_hour_intervals(interval: SubInterval) -> Iterator[SubInterval]:
    start, remaining = interval.start, interval.duration
    while remaining > 0:
        chunk = _hour_chunk(start, remaining)
        yield SubInterval(start, chunk, interval.activity)
        start += chunk
        remaining -= chunk


def split_into_hour_intervals(interval: SubInterval) -> List[SubInterval]:
    """Split at hour boundaries only: 30+120 min → 30/60/30 min."""
    return list(iter_hour_intervals(interval))


def _cut_at_restriction_change(
    start: int, chunk: int, context: OptimizationContext
) -> int:
    allowed = context.is_charging_allowed_at(start)
    for minute in range(start + 1, start + chunk):
        if context.is_charging_allowed_at(minute) != allowed:
            return minute - start
    return chunk


def iter_sub_intervals(
    interval: SubInterval,
    context: OptimizationContext,
    ev_minutes_used: int = 0,
) -> Iterator[SubInterval]:
    """
    Yield the chunks of *interval*.

    ``ev_minutes_used`` is the continuous EV charging time already spent
    right before this interval.  Once the EV budget is exhausted the rest
    of the interval is yielded as IDLE.
    """
    activity = interval.activity
    check_restrictions = activity.is_charging and context.charging_restrictions is not None

    ev_budget = None
    if (
        activity == Activity.EV_CHARGE
        and context.ev is not None
        and context.ev.max_charging_time_minutes is not None
    ):
        ev_budget = max(0, context.ev.max_charging_time_minutes - ev_minutes_used)

    start, remaining = interval.start, interval.duration
    while remaining > 0:
        if ev_budget is not None and ev_budget <= 0:
            yield from iter_hour_intervals(SubInterval(start, remaining, Activity.IDLE))
            return

        chunk = _hour_chunk(start, remaining)
        if ev_budget is not None:
            chunk = min(chunk, ev_budget)
        if check_restrictions:
            chunk = _cut_at_restriction_change(start, chunk, context)
        if ev_budget is not None:
            ev_budget -= chunk

        yield SubInterval(start, chunk, activity)
        start += chunk
        remaining -= chunk
