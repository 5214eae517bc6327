"""
Position, signal and order side enumerations.

This module defines trade directions and the buy/sell vocabulary used by signals
and fills.
"""

from enum import StrEnum


class OrderSide(StrEnum):
    """Side of a fill, used to decide which way slippage moves the price."""

    BUY = "buy"
    SELL = "sell"


class PositionType(StrEnum):
    """
    Allowed position types.

    Defines whether a position is long or short.
    """

    LONG = "long"
    SHORT = "short"

    @property
    def is_long(self) -> bool:
        """Check if position type is long."""
        return self == self.LONG

    @property
    def is_short(self) -> bool:
        """Check if position type is short."""
        return self == self.SHORT

    @property
    def factor(self) -> float:
        """Sign applied to price differences: +1 for long, -1 for short."""
        return -1.0 if self.is_short else 1.0

    @property
    def entry_side(self) -> OrderSide:
        """Side of the fill that opens this position."""
        return OrderSide.SELL if self.is_short else OrderSide.BUY

    @property
    def exit_side(self) -> OrderSide:
        """Side of the fill that closes this position."""
        return OrderSide.BUY if self.is_short else OrderSide.SELL


class SignalType(StrEnum):
    """
    Allowed signal types.

    A buy signal opens a long or exits a short; a sell signal does the reverse.
    """

    BUY = "buy"
    SELL = "sell"

    def to_position_type(self) -> PositionType:
        """Get the position direction this signal asks for."""
        return PositionType.LONG if self == self.BUY else PositionType.SHORT
