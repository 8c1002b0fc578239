"""
charging_restrictions.py
========================

Seasonal / daily / weekend windows during which charging is not allowed
(typically grid power-fee hours in winter).

A restriction is described by a month-day range that may wrap the year
boundary (``"11-01"`` → ``"03-31"``) and a half-open time-of-day range
``[start_time, end_time)``.  Charging is forbidden only when *both* match.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Optional, Tuple, Union

import pandas as pd

from .exceptions import ConfigurationError


# ---------------------------------------------------------------------------#
#  Parsing helpers                                                           #
# ---------------------------------------------------------------------------#

@lru_cache(maxsize=64)
def _parse_month_day(text: str) -> Tuple[int, int]:
    month, day = (int(part) for part in text.split("-"))
    if not (1 <= month <= 12 and 1 <= day <= 31):
        raise ValueError(f"month-day out of range: {text!r}")
    return month, day


@lru_cache(maxsize=64)
def _parse_time_of_day(text: str) -> int:
    hours, minutes = (int(part) for part in text.split(":"))
    if not (0 <= hours <= 24 and 0 <= minutes <= 59):
        raise ValueError(f"time of day out of range: {text!r}")
    return hours * 60 + minutes


# ---------------------------------------------------------------------------#
#  ChargingRestrictions                                                      #
# ---------------------------------------------------------------------------#

@dataclass(slots=True, frozen=True)
class ChargingRestrictions:
    start_date: str            # "MM-DD"
    end_date: str              # "MM-DD"
    start_time: str            # "HH:MM"
    end_time: str              # "HH:MM"
    allow_weekends: bool = True

    def __post_init__(self) -> None:
        try:
            _parse_month_day(self.start_date)
            _parse_month_day(self.end_date)
            _parse_time_of_day(self.start_time)
            _parse_time_of_day(self.end_time)
        except (ValueError, AttributeError) as err:
            raise ConfigurationError(f"invalid charging restriction: {err}") from err

    def within_date_range(self, timestamp: datetime) -> bool:
        start_month, start_day = _parse_month_day(self.start_date)
        end_month, end_day = _parse_month_day(self.end_date)
        month, day = timestamp.month, timestamp.day

        # range crossing the year boundary (e.g. Nov → Mar)
        if start_month > end_month:
            if end_month < month < start_month:
                return False
            if month == start_month:
                return day >= start_day
            if month == end_month:
                return day <= end_day
            return True

        if month < start_month or month > end_month:
            return False
        if month == start_month and day < start_day:
            return False
        if month == end_month and day > end_day:
            return False
        return True

    def within_time_range(self, timestamp: datetime) -> bool:
        minute_of_day = timestamp.hour * 60 + timestamp.minute
        return (
            _parse_time_of_day(self.start_time)
            <= minute_of_day
            < _parse_time_of_day(self.end_time)
        )


# ---------------------------------------------------------------------------#
#  Predicate                                                                 #
# ---------------------------------------------------------------------------#

def _as_timestamp(value: Union[datetime, str, None]) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = pd.Timestamp(value)
        except ValueError:
            return None
    if not isinstance(value, datetime) or pd.isna(value):
        return None
    return value


def is_charging_allowed(
    timestamp: Union[datetime, str, None],
    restrictions: Optional[ChargingRestrictions] = None,
) -> bool:
    """
    Return ``False`` only when *timestamp* falls inside both the restricted
    date range and the restricted time-of-day range.

    Unparseable timestamps and values that are not dates are treated as
    allowed.
    """
    if restrictions is None:
        return True

    ts = _as_timestamp(timestamp)
    if ts is None:
        return True

    # Saturday / Sunday
    if restrictions.allow_weekends and ts.weekday() >= 5:
        return True

    if restrictions.within_date_range(ts) and restrictions.within_time_range(ts):
        return False
    return True
