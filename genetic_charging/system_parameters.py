"""
System parameters used by the optimiser.

``SystemParameters`` collects the battery and EV figures in one flat
dataclass; ``GeneticParameters`` holds the knobs of the GA run itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError
from .optimization_context import Battery, Ev

DEFAULT_MIN_PRICE_SPREAD_PERCENT = 10.0


@dataclass(slots=True)
class SystemParameters:
    """Container for battery and EV parameters."""

    # Battery parameters
    battery_max_energy: float = 5.0
    battery_max_input_power: float = 2.5
    battery_max_output_power: float = 2.5
    soc: float = 0.0

    # EV parameters
    ev_charging_enabled: bool = False
    ev_max_charging_power: float = 11.0
    ev_soc: float = 0.0
    ev_limit: float = 80.0
    ev_capacity_kwh: float = 60.0
    ev_max_charging_time_minutes: Optional[int] = None

    # ---------------------------------------------------------------
    # Convenience helpers
    # ---------------------------------------------------------------
    def as_battery(self) -> Battery:
        """Return a :class:`Battery` instance with these parameters."""
        return Battery(
            max_energy=self.battery_max_energy,
            max_input_power=self.battery_max_input_power,
            max_output_power=self.battery_max_output_power,
            soc=self.soc,
        )

    def as_ev(self) -> Optional[Ev]:
        """Return an :class:`Ev` instance, or ``None`` when EV charging is off."""
        if not self.ev_charging_enabled:
            return None
        return Ev(
            charging_enabled=True,
            max_charging_power=self.ev_max_charging_power,
            soc=self.ev_soc,
            limit=self.ev_limit,
            capacity_kwh=self.ev_capacity_kwh,
            max_charging_time_minutes=self.ev_max_charging_time_minutes,
        )


@dataclass(slots=True)
class GeneticParameters:
    """Knobs of one GA run.  ``generations`` and ``population_size`` bound the cost."""

    population_size: int = 100
    number_of_price_periods: int = 4
    generations: int = 100
    mutation_rate: float = 0.03
    min_price_spread_percent: float = DEFAULT_MIN_PRICE_SPREAD_PERCENT
    crossover_rate: float = 0.7
    tournament_size: int = 3
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.population_size <= 0:
            raise ConfigurationError(f"population_size must be > 0, got {self.population_size}")
        if self.number_of_price_periods <= 0:
            raise ConfigurationError(
                f"number_of_price_periods must be > 0, got {self.number_of_price_periods}"
            )
        if self.generations < 0:
            raise ConfigurationError(f"generations must be >= 0, got {self.generations}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be within [0, 1], got {self.mutation_rate}")
        if not 0.0 <= self.crossover_rate <= 1.0:
            raise ConfigurationError(f"crossover_rate must be within [0, 1], got {self.crossover_rate}")
        if self.tournament_size <= 0:
            raise ConfigurationError(f"tournament_size must be > 0, got {self.tournament_size}")
