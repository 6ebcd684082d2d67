"""Custom exceptions for the options lab."""


class FXLabError(Exception):
    """Base exception for options lab errors."""
    pass


class InvalidInputError(FXLabError, ValueError):
    """Raised when pricing inputs are non-positive, non-finite or malformed."""
    pass


class IncompleteParametersError(FXLabError, ValueError):
    """Raised when scenario generation is missing spot, strike, premium or notional."""
    pass


class DataError(FXLabError):
    """Raised when market data is missing, invalid, or insufficient."""
    pass


class CacheError(FXLabError):
    """Raised when caching operations fail."""
    pass


class ConfigError(FXLabError):
    """Raised when a configuration file cannot be read or has bad values."""
    pass
