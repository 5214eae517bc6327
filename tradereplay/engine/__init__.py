"""
Trade simulation engine.

This module provides the bar-by-bar position state machine, its sizing and
ledger collaborators, and a runner that drives a full simulation.
"""

from .events import EventEmitter
from .ledger import TradeLedger
from .processor import ReplayTradeEngine
from .runner import SimulationResult, group_signals_by_bar, run_simulation
from .sizing import EntryPlan, RiskLevels, RiskSizingCalculator

__all__ = [
    "ReplayTradeEngine",
    "EventEmitter",
    "TradeLedger",
    "RiskSizingCalculator",
    "EntryPlan",
    "RiskLevels",
    "SimulationResult",
    "group_signals_by_bar",
    "run_simulation",
]
