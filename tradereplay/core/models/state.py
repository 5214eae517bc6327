"""
Engine state model.

One owned, mutable record per engine instance, living for one simulation run.
Never shared between engines, so no locking is needed.
"""

from dataclasses import dataclass, field
from typing import Any

from tradereplay.core.models.bar import Signal
from tradereplay.core.models.position import Position
from tradereplay.core.models.trade import Trade
from tradereplay.core.types.financial import ZERO


@dataclass
class EngineState:
    """Complete bar-by-bar trade state of one simulation run."""

    equity: float
    position: Position | None = None
    realized_pnl: float = ZERO
    unrealized_pnl: float = ZERO
    trades: list[Trade] = field(default_factory=list)
    pending_signals: list[Signal] = field(default_factory=list)
    current_bar_index: int = 0
    current_price: float = ZERO
    total_fees: float = ZERO

    @classmethod
    def initial(cls, initial_capital: float) -> "EngineState":
        """Create an initial flat state."""
        return cls(equity=initial_capital)

    @property
    def is_flat(self) -> bool:
        """Check if no position is open."""
        return self.position is None

    def snapshot(self) -> "EngineState":
        """Return a copy safe to hand to callers.

        Trades and signals are immutable, so copying the lists is enough.
        """
        return EngineState(
            equity=self.equity,
            position=self.position.copy() if self.position is not None else None,
            realized_pnl=self.realized_pnl,
            unrealized_pnl=self.unrealized_pnl,
            trades=list(self.trades),
            pending_signals=list(self.pending_signals),
            current_bar_index=self.current_bar_index,
            current_price=self.current_price,
            total_fees=self.total_fees,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert state to dictionary."""
        return {
            "equity": self.equity,
            "realized_pnl": self.realized_pnl,
            "unrealized_pnl": self.unrealized_pnl,
            "position": self.position.direction.value if self.position is not None else None,
            "trade_count": len(self.trades),
            "pending_signals": len(self.pending_signals),
            "current_bar_index": self.current_bar_index,
            "current_price": self.current_price,
            "total_fees": self.total_fees,
        }
