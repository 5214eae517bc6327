"""
Open position domain model.
Optimized for bar-by-bar simulation with float operations.
"""

import copy
from dataclasses import dataclass

from tradereplay.core.enums import PositionType
from tradereplay.core.exceptions.engine import ValidationError
from tradereplay.core.models.bar import Bar, BarTime
from tradereplay.core.types.financial import ZERO, calculate_pnl, calculate_pnl_percent


@dataclass
class Position:
    """Represents the single open position of a simulation run.

    Stop, target and partial levels are optional: ``None`` means "not
    configured", which is different from a level at price 0.
    """

    direction: PositionType
    entry_time: BarTime
    entry_price: float
    size: float
    risk_per_share: float = ZERO
    stop_loss_price: float | None = None
    take_profit_price: float | None = None
    partial_target_price: float | None = None
    partial_taken: bool = False
    break_even_applied: bool = False
    extreme_price: float | None = None
    bars_in_trade: int = 0
    unrealized_pnl: float = ZERO
    unrealized_pnl_percent: float = ZERO

    def __post_init__(self) -> None:
        """Validate position data after initialization."""
        if self.entry_price <= ZERO:
            raise ValidationError(f"Entry price must be positive, got {self.entry_price}")
        if self.size <= ZERO:
            raise ValidationError(f"Position size must be positive, got {self.size}")
        if self.risk_per_share < ZERO:
            raise ValidationError(f"Risk per share must be non-negative, got {self.risk_per_share}")
        if self.extreme_price is None:
            self.extreme_price = self.entry_price

    @property
    def entry_value(self) -> float:
        """Notional value of the remaining size at the entry price."""
        return self.size * self.entry_price

    def unrealized_pnl_at(self, current_price: float) -> float:
        """Calculate unrealized PnL based on position direction.

        Args:
            current_price: Current market price

        Returns:
            Unrealized PnL as float
        """
        return calculate_pnl(self.entry_price, current_price, self.size, self.direction)

    def mark_to_market(self, close: float) -> float:
        """Revalue the position at a closing price and store the result.

        Returns:
            The new unrealized PnL
        """
        self.unrealized_pnl = self.unrealized_pnl_at(close)
        self.unrealized_pnl_percent = calculate_pnl_percent(self.unrealized_pnl, self.entry_value)
        return self.unrealized_pnl

    def touches(self, level: float | None, bar: Bar, favorable: bool) -> bool:
        """Check if a bar's range reaches a price level.

        Args:
            level: Price level, or None when not configured
            bar: Bar to test
            favorable: True for targets (price moving in the position's favor),
                False for stops

        Returns:
            True if the level was touched
        """
        if level is None:
            return False
        moves_up = self.direction.is_long == favorable
        return bar.high >= level if moves_up else bar.low <= level

    def is_losing_at(self, price: float) -> bool:
        """Check if the position is flat-or-worse at a price (time-stop test)."""
        if self.direction.is_short:
            return price >= self.entry_price
        return price <= self.entry_price

    def tightens_stop(self, candidate: float) -> bool:
        """Check if moving the stop to ``candidate`` would reduce risk."""
        if self.stop_loss_price is None:
            return True
        if self.direction.is_short:
            return candidate < self.stop_loss_price
        return candidate > self.stop_loss_price

    def update_extreme(self, bar: Bar) -> None:
        """Track the best price reached since entry."""
        if self.direction.is_short:
            self.extreme_price = min(self.extreme_price, bar.low)
        else:
            self.extreme_price = max(self.extreme_price, bar.high)

    def copy(self) -> "Position":
        """Return an independent snapshot of this position."""
        return copy.copy(self)
