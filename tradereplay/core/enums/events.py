"""
Lifecycle event enumerations.

This module defines the events the engine emits and the reasons a position
(or part of it) can be closed.
"""

from enum import StrEnum


class TradeEventType(StrEnum):
    """Types of lifecycle events for subscriber notifications."""

    POSITION_OPENED = "position-opened"
    POSITION_CLOSED = "position-closed"
    PARTIAL_CLOSED = "partial-closed"
    STOP_UPDATED = "stop-updated"


class ExitReason(StrEnum):
    """
    Allowed exit reasons.

    Every closed trade carries exactly one of these.
    """

    SIGNAL = "signal"
    STOP_LOSS = "stop-loss"
    TAKE_PROFIT = "take-profit"
    PARTIAL = "partial"
    TIME_STOP = "time-stop"
    END_OF_DATA = "end-of-data"

