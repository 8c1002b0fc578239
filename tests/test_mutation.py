"""Tests for the mutation operator."""
import random
from datetime import datetime

from genetic_charging.activity import Activity
from genetic_charging.mutation import mutate
from genetic_charging.population import generate_individual
from genetic_charging.schedule import Period, Phenotype, is_valid_schedule


def test_mutation(make_context, fixed_random):
    context = make_context(prices=(1, 1), start=datetime(2024, 2, 22, 0, 0))
    phenotype = Phenotype([Period(0, Activity.CHARGE), Period(90, Activity.DISCHARGE)])

    mutated = mutate(phenotype, context, 1.0, fixed_random(0.4))

    assert mutated.periods == [Period(0, Activity.DISCHARGE), Period(85, Activity.IDLE)]
    assert mutated.excess_pv_energy_use == phenotype.excess_pv_energy_use
    # parent untouched
    assert phenotype.periods == [Period(0, Activity.CHARGE), Period(90, Activity.DISCHARGE)]


def test_zero_rate_keeps_schedule(make_context):
    context = make_context()
    phenotype = Phenotype(
        [Period(0, Activity.CHARGE), Period(100, Activity.IDLE), Period(200, Activity.DISCHARGE)]
    )
    assert mutate(phenotype, context, 0.0, random.Random(0)).periods == phenotype.periods


def test_first_period_stays_at_zero(make_context):
    context = make_context()
    rng = random.Random(4)
    phenotype = Phenotype([Period(0, Activity.CHARGE), Period(150, Activity.DISCHARGE)])
    for _ in range(100):
        assert mutate(phenotype, context, 1.0, rng).periods[0].start == 0


def test_result_is_always_valid(make_context):
    context = make_context(prices=[1, 3, 2, 5, 4, 1, 2, 8])
    rng = random.Random(21)
    for _ in range(200):
        phenotype = generate_individual(context, 5, rng)
        mutated = mutate(phenotype, context, rng.random(), rng)
        assert is_valid_schedule(mutated.periods, context.total_duration)
        assert len(mutated.periods) == len(phenotype.periods)


def test_tightly_packed_starts_stay_unique(make_context):
    context = make_context(prices=(1,))
    phenotype = Phenotype(
        [Period(0, Activity.CHARGE), Period(1, Activity.IDLE), Period(2, Activity.DISCHARGE)]
    )
    rng = random.Random(8)
    for _ in range(100):
        mutated = mutate(phenotype, context, 1.0, rng)
        assert is_valid_schedule(mutated.periods, context.total_duration)


def test_restricted_window_never_mutates_into_charge(make_context, winter_restrictions):
    context = make_context(start=datetime(2024, 1, 15, 12, 0), restrictions=winter_restrictions)
    phenotype = Phenotype(
        [Period(0, Activity.DISCHARGE), Period(60, Activity.IDLE), Period(120, Activity.DISCHARGE)]
    )
    rng = random.Random(6)
    for _ in range(100):
        mutated = mutate(phenotype, context, 1.0, rng)
        assert Activity.CHARGE not in {p.activity for p in mutated.periods}


def test_keeps_individual_type(make_context):
    class Tagged(Phenotype):
        pass

    phenotype = Tagged([Period(0, Activity.CHARGE)])
    assert isinstance(mutate(phenotype, make_context(), 1.0, random.Random(0)), Tagged)
