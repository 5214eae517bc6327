"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    HUNDRED,
    ONE,
    ZERO,
    apply_slippage,
    bps_to_rate,
    calculate_pnl,
    calculate_pnl_percent,
    is_finite_positive,
    optional_value,
    percent_to_rate,
)

__all__ = [
    # Utility functions
    "apply_slippage",
    "bps_to_rate",
    "percent_to_rate",
    "calculate_pnl",
    "calculate_pnl_percent",
    "is_finite_positive",
    "optional_value",
    # Constants
    "ZERO",
    "ONE",
    "HUNDRED",
]
