"""
Simulation runner.

Drives one fresh engine over a complete bar sequence, the way both the replay
driver and each strategy-finder variant use it: one bar at a time, signals
grouped per bar, forced close on the final bar.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd
from loguru import logger

from tradereplay.core.models.bar import Bar, Signal, bars_from_frame
from tradereplay.core.models.config import EngineConfig
from tradereplay.core.models.events import TradeEvent
from tradereplay.core.models.state import EngineState
from tradereplay.core.models.trade import Trade
from tradereplay.core.protocols import AtrSeries, TradeEventListener
from tradereplay.core.types.financial import HUNDRED, ZERO

from .ledger import TradeLedger
from .processor import ReplayTradeEngine

SignalsByBar = Mapping[int, Sequence[Signal]]


@dataclass
class SimulationResult:
    """Results from one simulation run."""

    config: EngineConfig
    trades: list[Trade]
    final_state: EngineState
    events: list[TradeEvent] = field(default_factory=list)
    bars_processed: int = 0

    @property
    def net_pnl(self) -> float:
        """Realized PnL including every commission paid."""
        return self.final_state.realized_pnl

    @property
    def total_fees(self) -> float:
        """Entry and exit commissions paid over the run."""
        return self.final_state.total_fees

    @property
    def win_rate(self) -> float:
        """Percentage of position-closing trades with positive pnl."""
        full_trades = [trade for trade in self.trades if not trade.is_partial]
        if not full_trades:
            return ZERO
        winners = sum(1 for trade in full_trades if trade.is_winner)
        return winners / len(full_trades) * HUNDRED

    def summary(self) -> dict[str, float | int]:
        """Get a summary of key performance metrics."""
        initial = self.config.initial_capital
        final_equity = self.final_state.equity
        return {
            "bars_processed": self.bars_processed,
            "trade_count": len(self.trades),
            "partial_count": sum(1 for trade in self.trades if trade.is_partial),
            "win_rate": self.win_rate,
            "net_pnl": self.net_pnl,
            "total_fees": self.total_fees,
            "final_equity": final_equity,
            "total_return": (final_equity - initial) / initial * HUNDRED if initial > 0 else ZERO,
        }

    def is_profitable(self) -> bool:
        """Check if the run ended above its initial capital."""
        return self.net_pnl > ZERO

    def trades_frame(self) -> pd.DataFrame:
        """Get the trade ledger as a DataFrame."""
        return TradeLedger.to_frame(self.trades)

    def to_dict(self) -> dict[str, Any]:
        """Convert results to dictionary."""
        return {
            "config": self.config.to_dict(),
            "summary": self.summary(),
            "final_state": self.final_state.to_dict(),
            "trades": [trade.to_dict() for trade in self.trades],
            "events": [
                {
                    "type": event.type.value,
                    "bar_index": event.bar_index,
                    "trade_id": event.trade.id if event.trade is not None else None,
                    "exit_reason": event.exit_reason.value if event.exit_reason else None,
                }
                for event in self.events
            ],
        }


def group_signals_by_bar(bars: Sequence[Bar], signals: Iterable[Signal]) -> dict[int, list[Signal]]:
    """Assign signals to bar indexes by matching their time.

    Signals whose time matches no bar are dropped with a warning.

    Args:
        bars: Bars of the run
        signals: Signals in strategy order

    Returns:
        Mapping of bar index to that bar's signals, order preserved
    """
    index_by_time = {bar.time: index for index, bar in enumerate(bars)}
    grouped: dict[int, list[Signal]] = defaultdict(list)
    unmatched = 0

    for signal in signals:
        index = index_by_time.get(signal.time)
        if index is None:
            unmatched += 1
            continue
        grouped[index].append(signal)

    if unmatched:
        logger.warning(f"Dropped {unmatched} signals with no matching bar time")
    return dict(grouped)


def run_simulation(
    bars: Sequence[Bar] | pd.DataFrame,
    signals: SignalsByBar | Iterable[Signal],
    config: EngineConfig,
    atr: AtrSeries | pd.Series | None = None,
    listeners: Iterable[TradeEventListener] = (),
) -> SimulationResult:
    """Run a complete simulation with a fresh engine.

    Args:
        bars: Bars in time order, or an OHLCV DataFrame
        signals: Signals keyed by bar index, or a flat iterable matched by time
        config: Engine configuration for this run
        atr: Precomputed ATR values aligned with the bars
        listeners: Extra lifecycle listeners to subscribe

    Returns:
        SimulationResult with the ledger, final state and every event
    """
    bar_list = bars_from_frame(bars) if isinstance(bars, pd.DataFrame) else list(bars)
    by_bar = signals if isinstance(signals, Mapping) else group_signals_by_bar(bar_list, signals)

    atr_values = list(atr) if atr is not None else None
    if atr_values is not None and len(atr_values) < len(bar_list):
        logger.warning(f"ATR series has {len(atr_values)} values for {len(bar_list)} bars")
    if atr_values is None and config.needs_atr:
        logger.warning("Config uses ATR-based rules but no ATR series was supplied")

    engine = ReplayTradeEngine(config, atr_values)
    events: list[TradeEvent] = []
    engine.subscribe(events.append)
    for listener in listeners:
        engine.subscribe(listener)

    for index, bar in enumerate(bar_list):
        engine.process_bar(bar, index, by_bar.get(index, ()))

    if bar_list:
        engine.close_position_at_market(bar_list[-1], len(bar_list) - 1)

    final_state = engine.get_state()
    logger.info(
        f"Simulation finished: {len(bar_list)} bars, {len(final_state.trades)} trades, "
        f"equity {final_state.equity:.2f}"
    )
    return SimulationResult(
        config=config,
        trades=list(final_state.trades),
        final_state=final_state,
        events=events,
        bars_processed=len(bar_list),
    )
