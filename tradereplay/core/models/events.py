"""
Lifecycle event models.
"""

from dataclasses import dataclass

from tradereplay.core.enums import ExitReason, TradeEventType
from tradereplay.core.models.position import Position
from tradereplay.core.models.trade import Trade


@dataclass(frozen=True)
class TradeEvent:
    """Snapshot of a position lifecycle transition.

    ``position`` is a copy taken at emit time; later bars never mutate it.
    """

    type: TradeEventType
    position: Position
    bar_index: int
    trade: Trade | None = None
    exit_reason: ExitReason | None = None

    def __repr__(self) -> str:
        reason = f", reason={self.exit_reason.value}" if self.exit_reason else ""
        return f"TradeEvent(type={self.type.value}, bar={self.bar_index}{reason})"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of delivering one event to one listener."""

    listener_name: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Check if the listener handled the event without raising."""
        return self.error is None
