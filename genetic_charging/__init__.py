"""Genetic-algorithm battery (and EV) charging scheduler."""

from .activity import Activity, ExcessPvEnergyUse
from .charging_restrictions import ChargingRestrictions, is_charging_allowed
from .exceptions import ConfigurationError, GeneticChargingError
from .optimization_context import Battery, Ev, InputSample, OptimizationContext
from .schedule import MaterializedPeriod, Period, Phenotype, expand, materialize
from .simulation_results import ScheduleResult, StrategyResult
from .simulator import calculate_battery_charging_strategy
from .system_parameters import GeneticParameters, SystemParameters

__version__ = "0.1.0"

__all__ = [
    "Activity",
    "Battery",
    "ChargingRestrictions",
    "ConfigurationError",
    "Ev",
    "ExcessPvEnergyUse",
    "GeneticChargingError",
    "GeneticParameters",
    "InputSample",
    "MaterializedPeriod",
    "OptimizationContext",
    "Period",
    "Phenotype",
    "ScheduleResult",
    "StrategyResult",
    "SystemParameters",
    "calculate_battery_charging_strategy",
    "expand",
    "is_charging_allowed",
    "materialize",
]
