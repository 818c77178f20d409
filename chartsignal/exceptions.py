"""
Exception hierarchy for the chartsignal engine.

Insufficient data is never an error in this package (indicators yield NaN,
detectors yield empty lists, backtests yield zeroed results). The exceptions
below signal caller-side contract violations only.
"""


class ChartSignalError(Exception):
    """Base exception for chartsignal errors"""
    pass


class PriceDataError(ChartSignalError):
    """Raised when a price series is malformed (missing columns, unsorted dates)"""
    pass


class UnknownStrategyError(ChartSignalError, KeyError):
    """Raised when a strategy identifier is not registered"""
    pass


class InvalidParameterError(ChartSignalError, ValueError):
    """Raised when strategy parameters contain keys outside the strategy schema"""
    pass


class PresetValidationError(ChartSignalError):
    """Raised when the optimized preset table fails validation"""
    pass
