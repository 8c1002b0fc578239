"""Pytest configuration and shared fixtures."""
import random
from datetime import datetime, timedelta

import pytest

from genetic_charging.charging_restrictions import ChargingRestrictions
from genetic_charging.optimization_context import (
    Battery,
    Ev,
    InputSample,
    OptimizationContext,
)


class FixedRandom(random.Random):
    """Random source that always returns the same value from random()."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def build_samples(prices, start, consumption=1.0, production=0.0, export_prices=None):
    export_prices = export_prices if export_prices is not None else prices
    return [
        InputSample(
            start=start + timedelta(hours=i),
            import_price=price,
            export_price=export_prices[i],
            consumption=consumption,
            production=production,
        )
        for i, price in enumerate(prices)
    ]


@pytest.fixture
def fixed_random():
    """Factory for a constant-valued random source."""
    return FixedRandom


@pytest.fixture
def winter_restrictions():
    """Power-fee hours: Nov–Mar, 07:00–20:00, weekends allowed."""
    return ChargingRestrictions(
        start_date="11-01", end_date="03-31", start_time="07:00", end_time="20:00"
    )


@pytest.fixture
def make_context():
    """
    Factory for an OptimizationContext.

    Defaults to five flat-priced hours with 1 kW consumption and a 1 kWh /
    1 kW battery, starting on a summer Monday evening.
    """

    def _make(
        prices=(1, 1, 1, 1, 1),
        start=datetime(2024, 7, 1, 21, 0),
        consumption=1.0,
        production=0.0,
        export_prices=None,
        battery=None,
        ev=None,
        restrictions=None,
        excess_pv_energy_use=0,
    ):
        return OptimizationContext(
            samples=build_samples(list(prices), start, consumption, production, export_prices),
            battery=battery or Battery(max_energy=1, max_input_power=1, max_output_power=1, soc=1),
            ev=ev,
            charging_restrictions=restrictions,
            excess_pv_energy_use=excess_pv_energy_use,
        )

    return _make


@pytest.fixture
def ev_config():
    return Ev(
        charging_enabled=True,
        max_charging_power=2.0,
        soc=70.0,
        limit=80.0,
        capacity_kwh=20.0,
    )
