"""
simulation_results.py
=====================

Outcome of one strategy calculation: the optimised schedule, the
battery-less baseline for comparison, and the price-spread gate verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pandas as pd

from .activity import ExcessPvEnergyUse
from .schedule import MaterializedPeriod


@dataclass(slots=True)
class ScheduleResult:
    schedule: List[MaterializedPeriod]
    excess_pv_energy_use: ExcessPvEnergyUse
    cost: float
    horizon_start: Optional[datetime] = None

    def _timestamp(self, minute: int) -> Optional[datetime]:
        if self.horizon_start is None:
            return None
        return self.horizon_start + timedelta(minutes=minute)

    def as_dataframe(self) -> pd.DataFrame:
        """Return the schedule as a DataFrame (one row per period)."""
        return pd.DataFrame(
            {
                "start": [p.start for p in self.schedule],
                "timestamp": [self._timestamp(p.start) for p in self.schedule],
                "duration": [p.duration for p in self.schedule],
                "activity": [int(p.activity) for p in self.schedule],
                "name": [p.name for p in self.schedule],
                "cost": [p.cost for p in self.schedule],
                "charge": [p.charge for p in self.schedule],
            }
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "schedule": [
                {
                    "start": (
                        self._timestamp(p.start).isoformat()
                        if self.horizon_start is not None
                        else p.start
                    ),
                    "duration": p.duration,
                    "activity": int(p.activity),
                    "name": p.name,
                    "cost": p.cost,
                    "charge": p.charge,
                }
                for p in self.schedule
            ],
            "excessPvEnergyUse": int(self.excess_pv_energy_use),
            "cost": self.cost,
        }


@dataclass(slots=True)
class StrategyResult:
    """Outcome of :func:`genetic_charging.simulator.calculate_battery_charging_strategy`."""

    best: ScheduleResult
    no_battery: ScheduleResult
    skipped_due_to_low_price_spread: bool = False
    price_spread_percentage: float = 0.0
    generations_run: int = 0
    fitness_history: List[float] = field(default_factory=list)

    @property
    def savings(self) -> float:
        return self.no_battery.cost - self.best.cost

    def as_dict(self) -> Dict[str, Any]:
        return {
            "best": self.best.as_dict(),
            "noBattery": self.no_battery.as_dict(),
            "skippedDueToLowPriceSpread": self.skipped_due_to_low_price_spread,
            "priceSpreadPercentage": self.price_spread_percentage,
        }
