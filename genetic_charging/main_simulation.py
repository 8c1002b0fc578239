# ----------------------------------------------------------------------
#  main_simulation.py  – forecast CSV → strategy → KPI summary
# ----------------------------------------------------------------------
"""
Command-line entry point:
    load → build OptimizationContext → calculate strategy → KPIs

    python -m genetic_charging.main_simulation forecast.csv --soc 0.4

The CSV needs one row per hour with the columns
``start, import_price, export_price, consumption, production``.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from .activity import ExcessPvEnergyUse
from .charging_restrictions import ChargingRestrictions
from .exceptions import ConfigurationError
from .optimization_context import OptimizationContext
from .simulation_results import StrategyResult
from .simulator import calculate_battery_charging_strategy
from .system_parameters import GeneticParameters, SystemParameters

REQUIRED_COLUMNS = ("start", "import_price")


# ----------------------------------------------------------------------
# 1)  DATA LOADING                                                     #
# ----------------------------------------------------------------------
def load_input_dataframe(
    path: Path, average_consumption: float = 0.0, average_production: float = 0.0
) -> pd.DataFrame:
    """
    Read the forecast CSV.  Hours without a consumption or production
    forecast use *average_consumption* / *average_production*.
    """
    df = pd.read_csv(path)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{path}: missing columns {missing}")
    df["start"] = pd.to_datetime(df["start"])
    if "export_price" not in df.columns:
        df["export_price"] = df["import_price"]
    if "production" not in df.columns:
        df["production"] = average_production
    if "consumption" not in df.columns:
        df["consumption"] = average_consumption
    df["consumption"] = df["consumption"].fillna(average_consumption)
    df["production"] = df["production"].fillna(average_production)
    df["export_price"] = df["export_price"].fillna(df["import_price"])
    return df.sort_values("start").reset_index(drop=True)


# ----------------------------------------------------------------------
# 2)  OPTIMISATION                                                     #
# ----------------------------------------------------------------------
def run_optimization(
    df_input: pd.DataFrame,
    system: SystemParameters,
    genetic: GeneticParameters,
    restrictions: Optional[ChargingRestrictions] = None,
    excess_pv_energy_use: ExcessPvEnergyUse = ExcessPvEnergyUse.FEED_TO_GRID,
    progress: bool = False,
) -> StrategyResult:
    ctx = OptimizationContext.from_dataframe(
        df_input,
        battery=system.as_battery(),
        ev=system.as_ev(),
        charging_restrictions=restrictions,
        excess_pv_energy_use=excess_pv_energy_use,
    )
    return calculate_battery_charging_strategy(ctx, genetic, progress=progress)


# ----------------------------------------------------------------------
# 3)  KPI PRINT                                                        #
# ----------------------------------------------------------------------
def kpi_summary(result: StrategyResult) -> None:
    print("\n--- KPI ----------------------------------------------------")
    print(f"Price spread                : {result.price_spread_percentage:10.1f} %")
    if result.skipped_due_to_low_price_spread:
        print("Optimisation skipped (price spread too low)")
    print(f"Baseline (no battery) cost  : {result.no_battery.cost:10.2f}")
    print(f"Optimised battery cost      : {result.best.cost:10.2f}")
    print(f"→ Savings                   : {result.savings:10.2f}")
    print("Schedule:")
    print(result.best.as_dataframe()[["timestamp", "duration", "name", "cost", "charge"]]
          .to_string(index=False))
    print("-----------------------------------------------------------")


# ----------------------------------------------------------------------
# 4)  MAIN                                                             #
# ----------------------------------------------------------------------
def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Genetic battery charging schedule")
    parser.add_argument("forecast", type=Path, help="hourly forecast CSV")
    parser.add_argument("--battery-max-energy", type=float, default=5.0)
    parser.add_argument("--battery-max-power", type=float, default=2.5)
    parser.add_argument("--soc", type=float, default=0.0, help="state of charge 0..1")
    parser.add_argument("--average-consumption", type=float, default=0.0,
                        help="kW assumed for hours without a consumption forecast")
    parser.add_argument("--average-production", type=float, default=0.0,
                        help="kW assumed for hours without a production forecast")
    parser.add_argument("--population-size", type=int, default=100)
    parser.add_argument("--price-periods", type=int, default=4)
    parser.add_argument("--generations", type=int, default=100)
    parser.add_argument("--mutation-rate", type=float, default=0.03)
    parser.add_argument("--min-price-spread", type=float, default=None)
    parser.add_argument("--excess-pv-charge", action="store_true",
                        help="store surplus PV instead of feeding it to the grid")
    parser.add_argument("--restrictions", type=str, default=None,
                        help='JSON, e.g. {"start_date": "11-01", "end_date": "03-31", '
                             '"start_time": "07:00", "end_time": "20:00"}')
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--json", action="store_true", help="print the result as JSON")
    parser.add_argument("--progress", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    system = SystemParameters(
        battery_max_energy=args.battery_max_energy,
        battery_max_input_power=args.battery_max_power,
        battery_max_output_power=args.battery_max_power,
        soc=args.soc,
    )
    genetic = GeneticParameters(
        population_size=args.population_size,
        number_of_price_periods=args.price_periods,
        generations=args.generations,
        mutation_rate=args.mutation_rate,
        seed=args.seed,
    )
    if args.min_price_spread is not None:
        genetic.min_price_spread_percent = args.min_price_spread
    restrictions = (
        ChargingRestrictions(**json.loads(args.restrictions)) if args.restrictions else None
    )

    result = run_optimization(
        load_input_dataframe(args.forecast, args.average_consumption, args.average_production),
        system,
        genetic,
        restrictions=restrictions,
        excess_pv_energy_use=(
            ExcessPvEnergyUse.CHARGE if args.excess_pv_charge else ExcessPvEnergyUse.FEED_TO_GRID
        ),
        progress=args.progress,
    )
    if args.json:
        print(json.dumps(result.as_dict(), indent=2))
    else:
        kpi_summary(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
