"""
Custom exception hierarchy for the trade replay engine.

This module defines domain-specific exceptions for better error handling.
Degenerate trading inputs (zero capital, zero shares) are not errors: the engine
skips those entries silently. These exceptions cover malformed construction input.
"""


class EngineException(Exception):
    """Base exception for all engine-related errors."""

    pass


class ValidationError(EngineException):
    """Raised when bar, signal or position data fails validation."""

    pass


class ConfigurationError(EngineException):
    """Raised when engine configuration is invalid."""

    pass


class InvalidPriceError(ValidationError):
    """Raised when a price is non-finite or non-positive."""

    def __init__(self, field_name: str, value: float):
        self.field_name = field_name
        self.value = value
        super().__init__(f"{field_name} must be a finite positive price, got {value}")


class InvalidBarRangeError(ValidationError):
    """Raised when a bar's high is below its low."""

    def __init__(self, high: float, low: float):
        self.high = high
        self.low = low
        super().__init__(f"Bar high {high} is below bar low {low}")
