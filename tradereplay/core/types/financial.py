"""
Financial helpers for bar-by-bar trade simulation.

This module provides the float arithmetic shared by the sizing calculator, the
trade ledger and mark-to-market updates.

PRECISION CONSIDERATIONS:
- Float64 provides ~15-16 significant decimal digits
- Values are NOT rounded: equity identities are checked to 1e-9 and rounding
  prices to display precision would break them
"""

import math

import pandas as pd

from tradereplay.core.constants import BPS_DIVISOR, PERCENT_DIVISOR
from tradereplay.core.enums import OrderSide, PositionType

# Common financial values as float constants
ZERO = 0.0
ONE = 1.0
HUNDRED = 100.0


def is_finite_positive(value: float | None) -> bool:
    """Check that a value is a finite number strictly greater than zero.

    Args:
        value: Value to check (None is never positive)

    Returns:
        True if the value can be used as a price, size or capital amount
    """
    return value is not None and math.isfinite(value) and value > ZERO


def optional_value(value: float | None) -> float | None:
    """Normalize an optional indicator value.

    NaN, pd.NA, NaT and infinities are treated as "no value", the way a pandas
    series marks warm-up bars.

    Args:
        value: Raw indicator value

    Returns:
        The value, or None if it is missing or non-finite
    """
    if value is None or pd.isna(value):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def bps_to_rate(bps: float) -> float:
    """Convert basis points into a fractional rate (25 bps -> 0.0025)."""
    return bps / BPS_DIVISOR


def percent_to_rate(percent: float) -> float:
    """Convert a percentage into a fractional rate (0.1% -> 0.001)."""
    return percent / PERCENT_DIVISOR


def apply_slippage(price: float, side: OrderSide, slippage_rate: float) -> float:
    """Move a fill price against the trader.

    Buys fill higher and sells fill lower. A zero, negative or non-finite rate
    leaves the price unchanged.

    Args:
        price: Requested price
        side: Side of the fill
        slippage_rate: Fractional slippage (bps / 10000)

    Returns:
        Slipped fill price

    Examples:
        >>> apply_slippage(200.0, OrderSide.SELL, 0.25)
        150.0
    """
    if not math.isfinite(slippage_rate) or slippage_rate <= ZERO:
        return price
    if side == OrderSide.BUY:
        return price * (ONE + slippage_rate)
    return price * (ONE - slippage_rate)


def calculate_pnl(
    entry_price: float,
    exit_price: float,
    amount: float,
    position_type: PositionType,
) -> float:
    """Calculate raw (pre-commission) PnL.

    Args:
        entry_price: Entry price of position
        exit_price: Exit or mark price
        amount: Position amount (absolute value)
        position_type: Direction of the position

    Returns:
        PnL as float
    """
    return (exit_price - entry_price) * abs(amount) * position_type.factor


def calculate_pnl_percent(pnl: float, entry_value: float) -> float:
    """Express a PnL amount as a percentage of the entry value.

    Returns zero when the entry value is zero so an emptied position never
    produces a division error.
    """
    if entry_value <= ZERO:
        return ZERO
    return pnl / entry_value * HUNDRED

