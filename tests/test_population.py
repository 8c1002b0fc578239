"""Tests for the initial population."""
import random
from datetime import datetime

import pytest

from genetic_charging.activity import Activity
from genetic_charging.population import (
    generate_individual,
    generate_population,
    generate_random_activity,
)
from genetic_charging.schedule import Phenotype, is_valid_schedule
from genetic_charging.system_parameters import GeneticParameters


class TestGenerateRandomActivity:

    def test_never_returns_excluded(self):
        rng = random.Random(1)
        for excluded in (Activity.DISCHARGE, Activity.IDLE, Activity.CHARGE):
            for _ in range(100):
                assert generate_random_activity(excluded, rng) != excluded

    def test_ev_only_when_allowed(self):
        rng = random.Random(2)
        drawn = {generate_random_activity(None, rng) for _ in range(200)}
        assert Activity.EV_CHARGE not in drawn
        drawn = {generate_random_activity(None, rng, allow_ev=True) for _ in range(200)}
        assert Activity.EV_CHARGE in drawn

    def test_deterministic_pick(self, fixed_random):
        # candidates without CHARGE: [DISCHARGE, IDLE], 0.4 * 2 -> index 0
        assert generate_random_activity(Activity.CHARGE, fixed_random(0.4)) == Activity.DISCHARGE
        assert generate_random_activity(Activity.CHARGE, fixed_random(0.6)) == Activity.IDLE

    def test_restricted_window_only_discharge_or_idle(self, winter_restrictions):
        rng = random.Random(3)
        timestamp = datetime(2024, 1, 15, 12, 0)
        for _ in range(100):
            activity = generate_random_activity(
                None, rng, timestamp=timestamp, restrictions=winter_restrictions, allow_ev=True
            )
            assert activity in (Activity.DISCHARGE, Activity.IDLE)

    def test_restricted_window_with_single_option(self, winter_restrictions, fixed_random):
        timestamp = datetime(2024, 1, 15, 12, 0)
        assert (
            generate_random_activity(
                Activity.DISCHARGE, fixed_random(0.9), timestamp, winter_restrictions
            )
            == Activity.IDLE
        )


class TestGenerateIndividual:

    def test_valid_and_alternating(self, make_context):
        context = make_context(prices=[1, 3, 2, 5, 4, 1, 2, 8])
        rng = random.Random(11)
        for _ in range(100):
            phenotype = generate_individual(context, 4, rng)
            assert is_valid_schedule(phenotype.periods, context.total_duration)
            activities = [p.activity for p in phenotype.periods]
            assert sum(a != Activity.IDLE for a in activities) == 4
            assert all(a != b for a, b in zip(activities, activities[1:]))

    def test_excess_pv_policy_is_copied(self, make_context):
        context = make_context(excess_pv_energy_use=1)
        phenotype = generate_individual(context, 2, random.Random(0))
        assert phenotype.excess_pv_energy_use == 1

    def test_restricted_horizon_never_charges(self, make_context, winter_restrictions):
        context = make_context(start=datetime(2024, 1, 15, 12, 0), restrictions=winter_restrictions)
        rng = random.Random(5)
        for _ in range(100):
            phenotype = generate_individual(context, 3, rng)
            assert Activity.CHARGE not in {p.activity for p in phenotype.periods}

    def test_at_most_one_ev_period(self, make_context, ev_config):
        context = make_context(ev=ev_config)
        rng = random.Random(9)
        seen_ev = False
        for _ in range(200):
            phenotype = generate_individual(context, 4, rng)
            count = sum(p.activity == Activity.EV_CHARGE for p in phenotype.periods)
            assert count <= 1
            seen_ev = seen_ev or count == 1
        assert seen_ev

    def test_custom_factory(self, make_context):
        class Tagged(Phenotype):
            pass

        phenotype = generate_individual(make_context(), 2, random.Random(0), Tagged)
        assert isinstance(phenotype, Tagged)


class TestGeneratePopulation:

    def test_size_and_seeded_reproducibility(self, make_context):
        context = make_context()
        genetic = GeneticParameters(population_size=15, number_of_price_periods=3)
        first = generate_population(context, genetic, random.Random(42))
        second = generate_population(context, genetic, random.Random(42))
        assert len(first) == 15
        assert [p.periods for p in first] == [p.periods for p in second]

    @pytest.mark.parametrize("periods", [1, 2, 6])
    def test_all_individuals_valid(self, make_context, periods):
        context = make_context()
        genetic = GeneticParameters(population_size=30, number_of_price_periods=periods)
        for phenotype in generate_population(context, genetic, random.Random(periods)):
            assert is_valid_schedule(phenotype.periods, context.total_duration)
