"""
Core enumerations for the trade replay engine.

This module provides centralized enumerations for domain concepts
like position directions, signal types, risk modes and lifecycle events.
"""

from .engine_modes import ExecutionModel, RiskMode, TradeDirection
from .events import ExitReason, TradeEventType
from .position_types import OrderSide, PositionType, SignalType

__all__ = [
    "OrderSide",
    "PositionType",
    "SignalType",
    "RiskMode",
    "ExecutionModel",
    "TradeDirection",
    "ExitReason",
    "TradeEventType",
]
