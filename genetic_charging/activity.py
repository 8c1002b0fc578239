"""
activity.py
===========

Closed set of operating modes a schedule period can carry, plus the policy
for surplus PV production.

    • DISCHARGE  → -1
    • IDLE       →  0
    • CHARGE     →  1
    • EV_CHARGE  →  2   (only drawn when EV charging is enabled)
"""

from enum import IntEnum


class Activity(IntEnum):
    DISCHARGE = -1
    IDLE = 0
    CHARGE = 1
    EV_CHARGE = 2

    # --------------------------------------------------------------------- #
    # Convenience helpers
    # --------------------------------------------------------------------- #

    @property
    def label(self) -> str:
        """Human readable name used in the reported schedule."""
        return _LABELS[self]

    @property
    def is_charging(self) -> bool:
        """True for the activities that are subject to charging restrictions."""
        return self in (Activity.CHARGE, Activity.EV_CHARGE)


_LABELS = {
    Activity.DISCHARGE: "discharging",
    Activity.IDLE: "idle",
    Activity.CHARGE: "charging_battery",
    Activity.EV_CHARGE: "charging_ev",
}


class ExcessPvEnergyUse(IntEnum):
    """What happens to production left over once consumption is met."""

    FEED_TO_GRID = 0
    CHARGE = 1
