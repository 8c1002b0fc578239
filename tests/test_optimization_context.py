"""Tests for OptimizationContext, Battery, Ev and the parameter containers."""
from datetime import datetime, timedelta

import pandas as pd
import pytest

from genetic_charging.exceptions import ConfigurationError
from genetic_charging.optimization_context import Battery, Ev, OptimizationContext
from genetic_charging.system_parameters import GeneticParameters, SystemParameters

from conftest import build_samples


class TestOptimizationContext:

    def test_horizon(self, make_context):
        context = make_context()
        assert context.total_duration == 300
        assert context.start == datetime(2024, 7, 1, 21, 0)
        assert context.timestamp_at(90) == datetime(2024, 7, 1, 22, 30)

    def test_sample_at(self, make_context):
        context = make_context(prices=(1, 2, 3, 4, 5))
        assert context.sample_at(0).import_price == 1
        assert context.sample_at(59).import_price == 1
        assert context.sample_at(60).import_price == 2
        assert context.sample_at(299).import_price == 5
        assert context.sample_at(300) is None
        assert context.sample_at(-1) is None

    def test_average_import_price(self, make_context):
        assert make_context(prices=(1, 2, 3)).average_import_price == pytest.approx(2)

    def test_without_battery(self, make_context):
        context = make_context()
        bare = context.without_battery()
        assert bare.battery.max_energy == 0
        assert bare.samples is context.samples
        assert context.battery.max_energy == 1

    def test_charging_allowed_at(self, make_context, winter_restrictions):
        context = make_context(start=datetime(2024, 1, 15, 6, 0), restrictions=winter_restrictions)
        assert context.is_charging_allowed_at(59) is True
        assert context.is_charging_allowed_at(60) is False
        assert make_context().is_charging_allowed_at(0) is True

    def test_ev_enabled(self, make_context, ev_config):
        assert make_context().ev_enabled is False
        assert make_context(ev=ev_config).ev_enabled is True
        assert make_context(ev=Ev(charging_enabled=False)).ev_enabled is False

    def test_validate_empty(self):
        with pytest.raises(ConfigurationError):
            OptimizationContext(samples=[], battery=Battery()).validate()

    def test_validate_gap(self):
        start = datetime(2024, 7, 1)
        samples = build_samples([1, 2], start)
        samples[1].start = start + timedelta(hours=2)
        with pytest.raises(ConfigurationError):
            OptimizationContext(samples=samples, battery=Battery()).validate()

    @pytest.mark.parametrize(
        "field", ["import_price", "export_price", "consumption", "production"]
    )
    def test_validate_non_finite_sample(self, field):
        samples = build_samples([1, 2, 3], datetime(2024, 7, 1))
        setattr(samples[1], field, float("nan"))
        with pytest.raises(ConfigurationError):
            OptimizationContext(samples=samples, battery=Battery()).validate()

    def test_validate_infinite_price(self):
        samples = build_samples([1, float("inf")], datetime(2024, 7, 1))
        with pytest.raises(ConfigurationError):
            OptimizationContext(samples=samples, battery=Battery()).validate()

    @pytest.mark.parametrize(
        "battery",
        [Battery(soc=1.5), Battery(soc=-0.1), Battery(max_energy=-1), Battery(max_input_power=-1)],
    )
    def test_validate_battery(self, make_context, battery):
        with pytest.raises(ConfigurationError):
            make_context(battery=battery).validate()

    def test_validate_ev(self, make_context):
        with pytest.raises(ConfigurationError):
            make_context(ev=Ev(charging_enabled=True, max_charging_time_minutes=0)).validate()

    def test_dataframe_round_trip(self, make_context):
        context = make_context(prices=(1, 2, 3), production=0.5)
        df = context.as_dataframe()
        assert list(df.columns) == ["import_price", "export_price", "consumption", "production"]
        rebuilt = OptimizationContext.from_dataframe(df, battery=context.battery)
        assert [s.start for s in rebuilt.samples] == [s.start for s in context.samples]
        assert [s.import_price for s in rebuilt.samples] == [1, 2, 3]
        assert rebuilt.samples[0].production == 0.5

    def test_from_dataframe_defaults(self):
        df = pd.DataFrame(
            {"start": ["2024-07-01 00:00", "2024-07-01 01:00"], "import_price": [1.0, 2.0]}
        )
        context = OptimizationContext.from_dataframe(df, battery=Battery())
        assert context.samples[1].export_price == 2.0
        assert context.samples[0].consumption == 0.0
        assert context.samples[0].production == 0.0
        context.validate()


class TestEv:

    def test_max_charge_bounded_by_power(self, ev_config):
        assert ev_config.max_charge(50, 0.5) == pytest.approx(1.0)

    def test_max_charge_bounded_by_limit(self, ev_config):
        assert ev_config.max_charge(75, 1.0) == pytest.approx(1.0)
        assert ev_config.max_charge(80, 1.0) == 0
        assert ev_config.max_charge(90, 1.0) == 0

    def test_soc_after(self, ev_config):
        assert ev_config.soc_after(70, 2.0) == pytest.approx(80)


class TestParameters:

    def test_system_parameters(self):
        system = SystemParameters(battery_max_energy=10, soc=0.5)
        assert system.as_battery().initial_charge == 5
        assert system.as_ev() is None
        system.ev_charging_enabled = True
        ev = system.as_ev()
        assert ev.charging_enabled and ev.limit == 80

    def test_genetic_defaults(self):
        genetic = GeneticParameters()
        assert genetic.population_size == 100
        assert genetic.number_of_price_periods == 4
        assert genetic.generations == 100
        assert genetic.mutation_rate == 0.03
        assert genetic.min_price_spread_percent == 10.0
        genetic.validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"population_size": 0},
            {"number_of_price_periods": 0},
            {"generations": -1},
            {"mutation_rate": 1.5},
            {"crossover_rate": -0.1},
            {"tournament_size": 0},
        ],
    )
    def test_genetic_validation(self, kwargs):
        with pytest.raises(ConfigurationError):
            GeneticParameters(**kwargs).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            GeneticParameters(population_size=0).validate()
