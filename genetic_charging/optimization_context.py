"""
optimization_context.py
=======================

Everything the GA operators need to know about one planning horizon:

* the hourly forecast samples (price, consumption, production)
* the battery and – optionally – the EV charger
* the charging restrictions and the excess-PV policy

All minute offsets used by the schedule operators are relative to
``samples[0].start``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .activity import ExcessPvEnergyUse
from .charging_restrictions import ChargingRestrictions, is_charging_allowed
from .exceptions import ConfigurationError

MINUTES_PER_SAMPLE = 60


# ---------------------------------------------------------------------------#
#  InputSample                                                               #
# ---------------------------------------------------------------------------#

@dataclass(slots=True)
class InputSample:
    start: datetime
    import_price: float
    export_price: float
    consumption: float    # kW
    production: float     # kW


# ---------------------------------------------------------------------------#
#  Battery + Ev                                                              #
# ---------------------------------------------------------------------------#

@dataclass(slots=True)
class Battery:
    max_energy: float = 5.0          # kWh
    max_input_power: float = 2.5     # kW
    max_output_power: float = 2.5    # kW
    soc: float = 0.0                 # fraction 0..1

    @property
    def initial_charge(self) -> float:
        return self.soc * self.max_energy

    def validate(self) -> None:
        if self.max_energy < 0 or self.max_input_power < 0 or self.max_output_power < 0:
            raise ConfigurationError("battery energy and power figures must be >= 0")
        if not 0.0 <= self.soc <= 1.0:
            raise ConfigurationError(f"battery soc must be within [0, 1], got {self.soc}")


@dataclass(slots=True)
class Ev:
    charging_enabled: bool = False
    max_charging_power: float = 11.0     # kW
    soc: float = 0.0                     # percent
    limit: float = 80.0                  # percent
    capacity_kwh: float = 60.0
    max_charging_time_minutes: Optional[int] = None

    def max_charge(self, soc_percent: float, hours: float) -> float:
        """Energy [kWh] the EV can still take within *hours*."""
        room = max(0.0, (self.limit - soc_percent) * self.capacity_kwh / 100)
        return min(self.max_charging_power * hours, room)

    def soc_after(self, soc_percent: float, energy_kwh: float) -> float:
        if self.capacity_kwh <= 0:
            return soc_percent
        return soc_percent + energy_kwh * 100 / self.capacity_kwh

    def validate(self) -> None:
        if self.capacity_kwh < 0 or self.max_charging_power < 0:
            raise ConfigurationError("EV capacity and charging power must be >= 0")
        if (
            self.max_charging_time_minutes is not None
            and self.max_charging_time_minutes <= 0
        ):
            raise ConfigurationError("EV max charging time must be positive")


# ---------------------------------------------------------------------------#
#  OptimizationContext                                                       #
# ---------------------------------------------------------------------------#

@dataclass(slots=True)
class OptimizationContext:
    samples: Sequence[InputSample]
    battery: Battery
    ev: Optional[Ev] = None
    charging_restrictions: Optional[ChargingRestrictions] = None
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID

    # ------------------------------------------------------------------ #
    # Convenience properties                                             #
    # ------------------------------------------------------------------ #

    @property
    def total_duration(self) -> int:
        """Horizon length in minutes."""
        return len(self.samples) * MINUTES_PER_SAMPLE

    @property
    def start(self) -> datetime:
        return self.samples[0].start

    @property
    def ev_enabled(self) -> bool:
        return self.ev is not None and self.ev.charging_enabled

    @property
    def import_prices(self) -> np.ndarray:
        return np.array([s.import_price for s in self.samples], dtype=float)

    @property
    def average_import_price(self) -> float:
        return float(self.import_prices.mean())

    def timestamp_at(self, minute: float) -> datetime:
        return self.start + timedelta(minutes=minute)

    def sample_at(self, minute: int) -> Optional[InputSample]:
        """Sample covering *minute*, or ``None`` past either horizon edge."""
        index = int(minute // MINUTES_PER_SAMPLE)
        if index < 0 or index >= len(self.samples):
            return None
        return self.samples[index]

    def is_charging_allowed_at(self, minute: float) -> bool:
        if self.charging_restrictions is None:
            return True
        return is_charging_allowed(self.timestamp_at(minute), self.charging_restrictions)

    def without_battery(self) -> "OptimizationContext":
        """Same horizon with a zero-capacity battery (baseline for comparison)."""
        return replace(self, battery=Battery(0.0, 0.0, 0.0, 0.0))

    def validate(self) -> None:
        if not self.samples:
            raise ConfigurationError("at least one input sample is required")
        if self.total_duration <= 0:
            raise ConfigurationError("horizon must be positive")
        for previous, current in zip(self.samples, self.samples[1:]):
            if current.start - previous.start != timedelta(minutes=MINUTES_PER_SAMPLE):
                raise ConfigurationError(
                    f"input samples must be contiguous hours: {previous.start} -> {current.start}"
                )
        for sample in self.samples:
            values = (sample.import_price, sample.export_price, sample.consumption, sample.production)
            if not np.isfinite(np.asarray(values, dtype=float)).all():
                raise ConfigurationError(f"input sample at {sample.start} has non-finite values: {values}")
        self.battery.validate()
        if self.ev is not None:
            self.ev.validate()

    # ------------------------------------------------------------------ #
    # pandas interop                                                     #
    # ------------------------------------------------------------------ #

    def as_dataframe(self) -> pd.DataFrame:
        """Return the samples as a tidy DataFrame indexed by start time."""
        return pd.DataFrame(
            {
                "start": [s.start for s in self.samples],
                "import_price": [s.import_price for s in self.samples],
                "export_price": [s.export_price for s in self.samples],
                "consumption": [s.consumption for s in self.samples],
                "production": [s.production for s in self.samples],
            }
        ).set_index("start")

    @staticmethod
    def from_dataframe(
        df: pd.DataFrame,
        battery: Battery,
        ev: Optional[Ev] = None,
        charging_restrictions: Optional[ChargingRestrictions] = None,
        excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID,
    ) -> "OptimizationContext":
        """
        Build a context from hourly rows with columns
        ``start, import_price, export_price, consumption, production``.
        ``start`` may also be the index.  Missing production defaults to 0.
        """
        frame = df.reset_index() if "start" not in df.columns else df
        if "start" not in frame.columns:
            frame = frame.rename(columns={frame.columns[0]: "start"})
        starts = pd.to_datetime(frame["start"])

        samples: List[InputSample] = []
        for start, row in zip(starts, frame.itertuples(index=False)):
            samples.append(
                InputSample(
                    start=start.to_pydatetime(),
                    import_price=float(row.import_price),
                    export_price=float(getattr(row, "export_price", row.import_price)),
                    consumption=float(getattr(row, "consumption", 0.0)),
                    production=float(getattr(row, "production", 0.0)),
                )
            )

        return OptimizationContext(
            samples=samples,
            battery=battery,
            ev=ev,
            charging_restrictions=charging_restrictions,
            excess_pv_energy_use=ExcessPvEnergyUse(excess_pv_energy_use),
        )
