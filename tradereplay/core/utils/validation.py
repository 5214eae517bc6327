"""
Validation utilities for core domain models.

Provides consistent validation across the application.
"""

import math

from tradereplay.core.exceptions.engine import ConfigurationError, InvalidPriceError


def validate_price(value: float, param_name: str = "price") -> float:
    """Validate that a value is a finite positive price.

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated price as float

    Raises:
        InvalidPriceError: If the price is non-finite or not positive
    """
    if not isinstance(value, int | float) or not math.isfinite(value) or value <= 0:
        raise InvalidPriceError(param_name, value)
    return float(value)


def validate_non_negative(value: float, param_name: str) -> float:
    """Validate that a numeric config value is finite and not negative.

    Zero is accepted; most risk settings use zero to mean "disabled".

    Raises:
        ConfigurationError: If value is negative or non-finite
    """
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{param_name} must be non-negative, got {value}")
    return value


def validate_percentage(value: float, param_name: str = "percentage") -> float:
    """Validate that a value is a valid percentage (0-100).

    Args:
        value: Value to validate
        param_name: Parameter name for error messages

    Returns:
        The validated percentage

    Raises:
        ConfigurationError: If value is not between 0 and 100
    """
    if not math.isfinite(value) or value < 0 or value > 100:
        raise ConfigurationError(f"{param_name} must be between 0 and 100, got {value}")
    return value


def coerce_number(value: object, fallback: float) -> float:
    """Read a loose setting as a finite float, falling back when it is not one.

    Booleans, strings and None all fall back; numeric strings are not parsed.
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        return fallback
    return float(value) if math.isfinite(value) else fallback


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value into the closed range [lower, upper]."""
    return max(lower, min(upper, value))
