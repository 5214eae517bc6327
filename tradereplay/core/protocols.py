"""
Core type definitions and protocols.

This module defines the listener protocol and shared type aliases so the
engine modules can depend on shapes rather than on each other.
"""

from collections.abc import Callable, Sequence
from typing import Protocol

from tradereplay.core.models.events import TradeEvent


class TradeEventListener(Protocol):
    """Protocol for lifecycle event subscribers.

    Any callable taking a TradeEvent qualifies, including plain functions and
    bound methods.
    """

    def __call__(self, event: TradeEvent) -> None:
        """Handle a lifecycle event."""
        ...


# Index-aligned indicator values; None (or NaN) marks warm-up bars.
AtrSeries = Sequence[float | None]

# Returned by subscribe(); calling it removes the listener.
Unsubscribe = Callable[[], None]
