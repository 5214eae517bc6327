"""
Bar-by-bar trade simulation engine.

``ReplayTradeEngine`` tracks at most one open position, applies exits in a
fixed priority order, consumes entry/exit signals and marks the position to
market once per bar. The same engine backs interactive replay and the batch
strategy finder; each run owns its own instance.

Exit priority within a bar:

1. stop-loss        (returns)
2. take-profit      (returns; a same-bar stop/target tie goes to the stop)
3. partial target   (continues with the reduced position)
4. time-stop        (returns)
5. break-even ratchet
6. trailing-stop ratchet
7. extreme price update
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from tradereplay.core.enums import ExecutionModel, ExitReason, TradeDirection, TradeEventType
from tradereplay.core.models.bar import Bar, Signal
from tradereplay.core.models.config import EngineConfig
from tradereplay.core.models.events import DispatchResult, TradeEvent
from tradereplay.core.models.position import Position
from tradereplay.core.models.state import EngineState
from tradereplay.core.models.trade import Trade
from tradereplay.core.protocols import AtrSeries, TradeEventListener, Unsubscribe
from tradereplay.core.types.financial import ZERO, apply_slippage, is_finite_positive, optional_value

from .events import EventEmitter
from .ledger import TradeLedger
from .sizing import RiskSizingCalculator


class ReplayTradeEngine:
    """Deterministic single-position trade simulator.

    Not thread-safe: call ``process_bar`` once per bar, in increasing bar
    index order, from a single caller.
    """

    def __init__(self, config: EngineConfig, atr_series: AtrSeries | None = None) -> None:
        """Initialize a flat engine holding the initial capital.

        Args:
            config: Risk and cost configuration for this run
            atr_series: Precomputed ATR values aligned with bar indexes
        """
        self.config = config
        self.ledger = TradeLedger(config)
        self.events = EventEmitter()
        self._state = EngineState.initial(config.initial_capital)
        self._atr: list[float | None] = []
        self._dispatch_failures: list[DispatchResult] = []
        if atr_series is not None:
            self.set_atr_series(atr_series)

    def set_atr_series(self, atr_series: AtrSeries) -> None:
        """Replace the ATR series read by stop, target and trailing rules.

        NaN values are treated as missing (indicator warm-up).
        """
        self._atr = [optional_value(value) for value in atr_series]

    def atr_at(self, bar_index: int) -> float | None:
        """ATR value at a bar, or None when absent."""
        if 0 <= bar_index < len(self._atr):
            return self._atr[bar_index]
        return None

    def process_bar(self, bar: Bar, bar_index: int, signals: Iterable[Signal] = ()) -> EngineState:
        """Advance the simulation by one bar.

        Args:
            bar: The bar being processed
            bar_index: Index of the bar in the run
            signals: Signals produced for this bar, in strategy order

        Returns:
            Snapshot of the engine state after the bar
        """
        state = self._state
        state.current_bar_index = bar_index
        state.current_price = bar.close

        if not state.is_flat:
            self._manage_open_position(state.position, bar, bar_index)

        for signal in self._signals_due(bar, signals):
            self._process_signal(signal, bar, bar_index)

        self._mark_to_market(bar)
        return state.snapshot()

    def close_position_at_market(self, bar: Bar, bar_index: int) -> Trade | None:
        """Force-close any open position at the bar's close (end of data).

        Deferred signals still waiting for a next bar are discarded.

        Returns:
            The closing trade, or None when already flat
        """
        state = self._state
        state.pending_signals.clear()
        position = state.position
        if position is None:
            return None

        exit_price = apply_slippage(bar.close, position.direction.exit_side, self.config.slippage_rate)
        return self._close_position(position, exit_price, bar, bar_index, ExitReason.END_OF_DATA)

    def get_state(self) -> EngineState:
        """Get a copy of the current engine state."""
        return self._state.snapshot()

    def get_position(self) -> Position | None:
        """Get a copy of the open position, or None when flat."""
        position = self._state.position
        return position.copy() if position is not None else None

    def reset(self) -> None:
        """Return to the initial flat state.

        The ATR series and the subscribed listeners are kept.
        """
        self._state = EngineState.initial(self.config.initial_capital)
        self.ledger.reset()
        self._dispatch_failures.clear()

    def subscribe(self, listener: TradeEventListener) -> Unsubscribe:
        """Subscribe to lifecycle events.

        Returns:
            Function that removes the listener
        """
        return self.events.subscribe(listener)

    @property
    def dispatch_failures(self) -> Sequence[DispatchResult]:
        """Listener failures captured since construction or the last reset."""
        return tuple(self._dispatch_failures)

    def _manage_open_position(self, position: Position, bar: Bar, bar_index: int) -> None:
        position.bars_in_trade += 1
        exit_side = position.direction.exit_side
        slippage_rate = self.config.slippage_rate

        if position.touches(position.stop_loss_price, bar, favorable=False):
            exit_price = apply_slippage(position.stop_loss_price, exit_side, slippage_rate)  # type: ignore[arg-type]
            self._close_position(position, exit_price, bar, bar_index, ExitReason.STOP_LOSS)
            return

        if position.touches(position.take_profit_price, bar, favorable=True):
            exit_price = apply_slippage(position.take_profit_price, exit_side, slippage_rate)  # type: ignore[arg-type]
            self._close_position(position, exit_price, bar, bar_index, ExitReason.TAKE_PROFIT)
            return

        if not position.partial_taken and position.touches(position.partial_target_price, bar, favorable=True):
            if not self._take_partial_profit(position, bar, bar_index):
                return

        if self._time_stop_hit(position, bar):
            exit_price = apply_slippage(bar.close, exit_side, slippage_rate)
            self._close_position(position, exit_price, bar, bar_index, ExitReason.TIME_STOP)
            return

        self._apply_break_even(position, bar, bar_index)
        self._apply_trailing_stop(position, bar_index)
        position.update_extreme(bar)

    def _take_partial_profit(self, position: Position, bar: Bar, bar_index: int) -> bool:
        """Close the configured slice at the partial target.

        Returns:
            True if a position remains open afterwards
        """
        exit_price = apply_slippage(
            position.partial_target_price,  # type: ignore[arg-type]
            position.direction.exit_side,
            self.config.slippage_rate,
        )
        percent = self.config.partial_take_profit_percent

        if percent >= 100:
            # A 100% slice would leave a zero-size position open.
            self._close_position(position, exit_price, bar, bar_index, ExitReason.PARTIAL)
            return False

        trade = self.ledger.close_partial(self._state, percent, exit_price, bar.time, bar_index)
        if trade is None:
            return True

        self._emit(
            TradeEvent(
                type=TradeEventType.PARTIAL_CLOSED,
                position=position.copy(),
                bar_index=bar_index,
                trade=trade,
                exit_reason=ExitReason.PARTIAL,
            )
        )
        return True

    def _time_stop_hit(self, position: Position, bar: Bar) -> bool:
        time_stop_bars = self.config.time_stop_bars
        if time_stop_bars <= 0 or position.bars_in_trade < time_stop_bars:
            return False
        return not position.partial_taken and position.is_losing_at(bar.close)

    def _apply_break_even(self, position: Position, bar: Bar, bar_index: int) -> None:
        break_even_at_r = self.config.break_even_at_r
        if position.break_even_applied or position.risk_per_share <= 0 or break_even_at_r <= 0:
            return

        trigger = position.entry_price + position.direction.factor * position.risk_per_share * break_even_at_r
        if not position.touches(trigger, bar, favorable=True):
            return

        if position.tightens_stop(position.entry_price):
            position.stop_loss_price = position.entry_price
        position.break_even_applied = True
        self._emit_stop_updated(position, bar_index)

    def _apply_trailing_stop(self, position: Position, bar_index: int) -> None:
        trailing_atr = self.config.trailing_atr
        atr = self.atr_at(bar_index)
        if trailing_atr <= 0 or atr is None:
            return

        candidate = position.extreme_price - position.direction.factor * atr * trailing_atr  # type: ignore[operator]
        if position.tightens_stop(candidate):
            position.stop_loss_price = candidate
            self._emit_stop_updated(position, bar_index)

    def _signals_due(self, bar: Bar, signals: Iterable[Signal]) -> list[Signal]:
        """Signals to execute on this bar under the configured execution model."""
        model = self.config.execution_model
        if not model.is_deferred:
            return list(signals)

        state = self._state
        fill_price = bar.open if model == ExecutionModel.NEXT_OPEN else bar.close
        due = [signal.retimed(bar.time, fill_price) for signal in state.pending_signals]
        state.pending_signals = list(signals)
        return due

    def _process_signal(self, signal: Signal, bar: Bar, bar_index: int) -> None:
        position = self._state.position
        direction = signal.type.to_position_type()

        if position is None:
            if self.config.trade_direction.allows_entry(signal.type):
                self._open_position(signal, bar_index)
            else:
                logger.debug(f"Ignoring {signal.type} signal at bar {bar_index}: direction filter")
            return

        if position.direction == direction:
            return

        if not self.config.allow_same_bar_exit and bar.time == position.entry_time:
            logger.debug(f"Ignoring {signal.type} signal at bar {bar_index}: same-bar exit")
            return

        if not is_finite_positive(signal.price):
            logger.debug(f"Ignoring {signal.type} signal at bar {bar_index}: price {signal.price}")
            return

        exit_price = apply_slippage(signal.price, position.direction.exit_side, self.config.slippage_rate)
        self._close_position(position, exit_price, bar, bar_index, ExitReason.SIGNAL)

        if self.config.trade_direction == TradeDirection.BOTH:
            self._open_position(signal, bar_index)

    def _open_position(self, signal: Signal, bar_index: int) -> None:
        state = self._state
        plan = RiskSizingCalculator.plan_entry(
            equity=state.equity,
            signal_price=signal.price,
            direction=signal.type.to_position_type(),
            config=self.config,
            atr=self.atr_at(bar_index),
        )
        if plan is None:
            return

        position = plan.to_position(signal.time)
        self.ledger.book_entry(state, position, plan.entry_commission)
        self._emit(
            TradeEvent(
                type=TradeEventType.POSITION_OPENED,
                position=position.copy(),
                bar_index=bar_index,
            )
        )

    def _close_position(
        self, position: Position, exit_price: float, bar: Bar, bar_index: int, exit_reason: ExitReason
    ) -> Trade:
        closed = position.copy()

        trade = self.ledger.close_position(self._state, exit_price, bar.time, bar_index, exit_reason)
        self._emit(
            TradeEvent(
                type=TradeEventType.POSITION_CLOSED,
                position=closed,
                bar_index=bar_index,
                trade=trade,
                exit_reason=exit_reason,
            )
        )
        return trade

    def _mark_to_market(self, bar: Bar) -> None:
        state = self._state
        if state.is_flat:
            state.unrealized_pnl = ZERO
            return
        state.unrealized_pnl = state.position.mark_to_market(bar.close)

    def _emit_stop_updated(self, position: Position, bar_index: int) -> None:
        self._emit(
            TradeEvent(
                type=TradeEventType.STOP_UPDATED,
                position=position.copy(),
                bar_index=bar_index,
            )
        )

    def _emit(self, event: TradeEvent) -> None:
        results = self.events.emit(event)
        self._dispatch_failures.extend(result for result in results if not result.ok)
