"""
energy_flow.py
==============

Per-interval economics of one activity.

Every scorer receives energies that are already scaled to the duration of
the sub-interval (kWh, not kW) together with the battery bounds for that
sub-interval and returns a :class:`FlowScore`:

    cost    – money paid to the grid minus money received from it
    charge  – energy entering (+) or leaving (−) the storage

Production always offsets consumption first.  What happens with surplus
production and with the residual consumption depends on the activity:

    IDLE       surplus sold, or (policy CHARGE) stored first, rest sold
    CHARGE     storage filled up to ``max_charge``; grid covers the gap
    DISCHARGE  storage supplies unmet consumption up to ``max_discharge``
    EV_CHARGE  surplus-first into the EV, grid part price-weighted

Hard constraints are *soft* here: an infeasible choice costs
``INFEASIBLE_COST`` and moves no energy, so the GA landscape stays
continuous.
"""

from __future__ import annotations

from typing import NamedTuple

from .activity import Activity, ExcessPvEnergyUse

# Cost of an infeasible sub-interval (restricted charging, ineligible EV).
# Large enough to dominate any realistic horizon cost.
INFEASIBLE_COST = 1_000_000.0

# EV charging: grid energy is weighted by these factors around CHEAP_PRICE.
CHEAP_PRICE = 1.0
CHEAP_PRICE_FACTOR = 0.5
EXPENSIVE_PRICE_FACTOR = 2.0

# EV charging sessions longer than this get a growing per-minute penalty.
EV_LONG_SESSION_MINUTES = 120
EV_DURATION_PENALTY_PER_MINUTE = 0.01


class FlowScore(NamedTuple):
    cost: float
    charge: float


INFEASIBLE = FlowScore(INFEASIBLE_COST, 0.0)


# ---------------------------------------------------------------------------#
#  Activity scorers                                                          #
# ---------------------------------------------------------------------------#

def calculate_normal_score(
    *,
    import_price: float,
    export_price: float,
    consumption: float,
    production: float,
    max_charge: float = 0.0,
    max_discharge: float = 0.0,
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID,
) -> FlowScore:
    consumed_from_production = min(consumption, production)
    battery_charge_from_production = (
        min(production - consumed_from_production, max_charge)
        if excess_pv_energy_use == ExcessPvEnergyUse.CHARGE
        else 0.0
    )
    sold_from_production = (
        production - consumed_from_production - battery_charge_from_production
    )
    consumed_from_grid = consumption - consumed_from_production

    cost = import_price * consumed_from_grid - export_price * sold_from_production
    return FlowScore(cost, battery_charge_from_production)


def calculate_charge_score(
    *,
    import_price: float,
    export_price: float,
    consumption: float,
    production: float,
    max_charge: float = 0.0,
    max_discharge: float = 0.0,
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID,
) -> FlowScore:
    # surplus goes into the battery regardless of the policy
    consumed_from_production = min(consumption, production)
    battery_charge_from_production = min(
        production - consumed_from_production, max_charge
    )
    sold_from_production = (
        production - consumed_from_production - battery_charge_from_production
    )
    consumed_from_grid = consumption - consumed_from_production
    charged_from_grid = max_charge - battery_charge_from_production

    cost = (
        consumed_from_grid + charged_from_grid
    ) * import_price - sold_from_production * export_price
    return FlowScore(cost, battery_charge_from_production + charged_from_grid)


def calculate_discharge_score(
    *,
    import_price: float,
    export_price: float,
    consumption: float,
    production: float,
    max_charge: float = 0.0,
    max_discharge: float = 0.0,
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID,
) -> FlowScore:
    consumed_from_production = min(consumption, production)
    battery_charge_from_production = (
        min(production - consumed_from_production, max_charge)
        if excess_pv_energy_use == ExcessPvEnergyUse.CHARGE
        else 0.0
    )
    consumed_from_battery = min(consumption - consumed_from_production, max_discharge)
    sold_from_production = (
        production - consumed_from_production - battery_charge_from_production
    )
    consumed_from_grid = consumption - consumed_from_production - consumed_from_battery

    cost = consumed_from_grid * import_price - sold_from_production * export_price
    return FlowScore(cost, battery_charge_from_production - consumed_from_battery)


def ev_price_factor(import_price: float) -> float:
    if import_price < CHEAP_PRICE:
        return CHEAP_PRICE_FACTOR
    if import_price > CHEAP_PRICE:
        return EXPENSIVE_PRICE_FACTOR
    return 1.0


def ev_duration_penalty(continuous_minutes: float) -> float:
    """Zero up to ``EV_LONG_SESSION_MINUTES``, then linear in the overrun."""
    return max(0.0, continuous_minutes - EV_LONG_SESSION_MINUTES) * EV_DURATION_PENALTY_PER_MINUTE


def calculate_ev_charge_score(
    *,
    import_price: float,
    export_price: float,
    consumption: float,
    production: float,
    max_ev_charge: float,
    continuous_minutes: float = 0.0,
) -> FlowScore:
    """
    Charge the EV by ``max_ev_charge`` (already bounded by the EV's
    ``limit - soc`` room).  The returned charge is EV energy; the home
    battery does not move.
    """
    consumed_from_production = min(consumption, production)
    ev_charge_from_production = min(production - consumed_from_production, max_ev_charge)
    ev_charge_from_grid = max_ev_charge - ev_charge_from_production
    sold_from_production = production - consumed_from_production - ev_charge_from_production
    consumed_from_grid = consumption - consumed_from_production

    cost = (
        consumed_from_grid * import_price
        + ev_charge_from_grid * import_price * ev_price_factor(import_price)
        - sold_from_production * export_price
        + ev_duration_penalty(continuous_minutes)
    )
    return FlowScore(cost, ev_charge_from_production + ev_charge_from_grid)


# ---------------------------------------------------------------------------#
#  Dispatch                                                                  #
# ---------------------------------------------------------------------------#

_BATTERY_SCORERS = {
    Activity.DISCHARGE: calculate_discharge_score,
    Activity.IDLE: calculate_normal_score,
    Activity.CHARGE: calculate_charge_score,
}


def calculate_period_score(activity: Activity, **props) -> FlowScore:
    """Battery activities only; EV charging goes through :func:`score_sub_interval`."""
    try:
        scorer = _BATTERY_SCORERS[Activity(activity)]
    except (KeyError, ValueError) as err:
        raise ValueError(f"no battery scorer for activity {activity!r}") from err
    return scorer(**props)


def score_sub_interval(
    activity: Activity,
    *,
    import_price: float,
    export_price: float,
    consumption: float,
    production: float,
    max_charge: float,
    max_discharge: float,
    excess_pv_energy_use: ExcessPvEnergyUse,
    charging_allowed: bool = True,
    ev_eligible: bool = False,
    max_ev_charge: float = 0.0,
    continuous_ev_minutes: float = 0.0,
) -> FlowScore:
    """
    Score one sub-interval, applying the infeasibility penalties first.

    ``ev_eligible`` is False when EV charging is disabled or the EV is
    already at or above its limit.
    """
    if activity.is_charging and not charging_allowed:
        return INFEASIBLE

    if activity == Activity.EV_CHARGE:
        if not ev_eligible:
            return INFEASIBLE
        return calculate_ev_charge_score(
            import_price=import_price,
            export_price=export_price,
            consumption=consumption,
            production=production,
            max_ev_charge=max_ev_charge,
            continuous_minutes=continuous_ev_minutes,
        )

    return calculate_period_score(
        activity,
        import_price=import_price,
        export_price=export_price,
        consumption=consumption,
        production=production,
        max_charge=max_charge,
        max_discharge=max_discharge,
        excess_pv_energy_use=excess_pv_energy_use,
    )
