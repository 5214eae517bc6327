"""
Engine mode enumerations.

This module defines how stops are derived, when signals are filled and which
directions the engine may trade.
"""

from enum import StrEnum

from .position_types import SignalType


class RiskMode(StrEnum):
    """
    Allowed risk modes.

    PERCENTAGE derives stop/target levels from a percentage of the fill price,
    ATR derives them from multiples of the Average True Range.
    """

    PERCENTAGE = "percentage"
    ATR = "atr"

    @classmethod
    def parse(cls, value: object, default: "RiskMode | None" = None) -> "RiskMode":
        """
        Resolve a loose setting value into a risk mode.

        The legacy names "simple" and "advanced" both select ATR mode.

        Args:
            value: Raw setting value
            default: Mode used when the value is not recognised

        Returns:
            Resolved RiskMode
        """
        if isinstance(value, cls):
            return value
        if value == cls.PERCENTAGE.value:
            return cls.PERCENTAGE
        if value in ("atr", "simple", "advanced"):
            return cls.ATR
        return default if default is not None else cls.ATR


class ExecutionModel(StrEnum):
    """
    Allowed execution models.

    Controls on which bar, and at which price, an incoming signal is filled.
    """

    SIGNAL_CLOSE = "signal_close"  # Same bar, at the signal price
    NEXT_OPEN = "next_open"  # Following bar, at its open
    NEXT_CLOSE = "next_close"  # Following bar, at its close

    @property
    def is_deferred(self) -> bool:
        """Check if signals wait for the following bar."""
        return self != self.SIGNAL_CLOSE


class TradeDirection(StrEnum):
    """
    Allowed trade directions.

    Restricts which signals may open positions.
    """

    LONG = "long"
    SHORT = "short"
    BOTH = "both"

    def allows_entry(self, signal_type: SignalType) -> bool:
        """Check if a signal of the given type may open a position."""
        if self == self.BOTH:
            return True
        if self == self.SHORT:
            return signal_type == SignalType.SELL
        return signal_type == SignalType.BUY
