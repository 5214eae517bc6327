"""
Trade domain model.
Optimized for bar-by-bar simulation with float operations.
"""

from dataclasses import dataclass
from typing import Any

from tradereplay.core.enums import ExitReason, PositionType
from tradereplay.core.exceptions.engine import ValidationError
from tradereplay.core.models.bar import BarTime


@dataclass(frozen=True)
class Trade:
    """Represents a completed (possibly partial) round trip.

    ``pnl`` is net of the exit commission only; the entry commission was
    charged to equity when the position opened. ``closes_position`` is False
    for a slice that left the rest of the position open.
    """

    id: int
    direction: PositionType
    entry_time: BarTime
    entry_price: float
    exit_time: BarTime
    exit_price: float
    size: float
    pnl: float
    pnl_percent: float
    fees: float
    exit_reason: ExitReason
    bar_index: int
    closes_position: bool = True

    def __post_init__(self) -> None:
        """Validate trade data after initialization."""
        if self.id <= 0:
            raise ValidationError(f"Trade id must be positive, got {self.id}")
        if self.size <= 0:
            raise ValidationError(f"Size must be positive, got {self.size}")
        if self.fees < 0:
            raise ValidationError(f"Fees must be non-negative, got {self.fees}")

    @property
    def is_partial(self) -> bool:
        """Check if this trade closed only a slice of its position."""
        return not self.closes_position

    @property
    def is_winner(self) -> bool:
        """Check if the trade made money after its exit commission."""
        return self.pnl > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert trade to dictionary."""
        return {
            "id": self.id,
            "direction": self.direction.value,
            "entry_time": self.entry_time,
            "entry_price": self.entry_price,
            "exit_time": self.exit_time,
            "exit_price": self.exit_price,
            "size": self.size,
            "pnl": self.pnl,
            "pnl_percent": self.pnl_percent,
            "fees": self.fees,
            "exit_reason": self.exit_reason.value,
            "bar_index": self.bar_index,
            "closes_position": self.closes_position,
        }
