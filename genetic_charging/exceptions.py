"""Custom exceptions for the genetic charging scheduler."""


class GeneticChargingError(Exception):
    """Base exception for scheduler errors."""
    pass


class ConfigurationError(GeneticChargingError, ValueError):
    """Raised for inputs or parameters that must be rejected before a run."""
    pass
