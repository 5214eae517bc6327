"""
Trade ledger and realized PnL accounting.

This module books entry commissions, settles full and partial closes against
the engine state and keeps the monotonic trade id sequence. Trades are
append-only and immutable once recorded.
"""

from collections.abc import Iterable

import pandas as pd
from loguru import logger

from tradereplay.core.enums import ExitReason
from tradereplay.core.exceptions.engine import ValidationError
from tradereplay.core.models.bar import BarTime
from tradereplay.core.models.config import EngineConfig
from tradereplay.core.models.position import Position
from tradereplay.core.models.state import EngineState
from tradereplay.core.models.trade import Trade
from tradereplay.core.types.financial import ZERO, calculate_pnl_percent, percent_to_rate

TRADE_COLUMNS = [
    "id",
    "direction",
    "entry_time",
    "entry_price",
    "exit_time",
    "exit_price",
    "size",
    "pnl",
    "pnl_percent",
    "fees",
    "exit_reason",
    "bar_index",
    "closes_position",
]


class TradeLedger:
    """Realized PnL accounting for one engine instance.

    Equity and realized PnL both carry every commission paid, so that
    ``equity == initial_capital + realized_pnl`` holds after every close.
    Trade.pnl only carries the exit commission of its own slice.
    """

    def __init__(self, config: EngineConfig) -> None:
        """Initialize with the run's cost configuration.

        Args:
            config: Engine configuration supplying the commission rate
        """
        self.commission_rate = config.commission_rate
        self._last_id = 0

    def reset(self) -> None:
        """Restart the trade id sequence."""
        self._last_id = 0

    def book_entry(self, state: EngineState, position: Position, entry_commission: float) -> None:
        """Open a position and charge its entry commission.

        Args:
            state: Engine state to mutate
            position: Newly sized position
            entry_commission: Commission paid on the entry fill

        Raises:
            ValidationError: If a position is already open
        """
        if state.position is not None:
            raise ValidationError("Cannot open a position while another is open")

        state.equity -= entry_commission
        state.realized_pnl -= entry_commission
        state.total_fees += entry_commission
        state.position = position

    def close_position(
        self,
        state: EngineState,
        exit_price: float,
        exit_time: BarTime,
        bar_index: int,
        exit_reason: ExitReason,
    ) -> Trade:
        """Settle the whole open position and return to flat.

        Returns:
            The recorded trade

        Raises:
            ValidationError: If no position is open
        """
        position = self._require_position(state)
        trade = self._settle(
            state,
            position,
            position.size,
            exit_price,
            exit_time,
            bar_index,
            exit_reason,
            closes_position=True,
        )

        state.position = None
        state.unrealized_pnl = ZERO
        return trade

    def close_partial(
        self,
        state: EngineState,
        percent: float,
        exit_price: float,
        exit_time: BarTime,
        bar_index: int,
    ) -> Trade | None:
        """Settle a slice of the open position, leaving the rest open.

        Args:
            state: Engine state to mutate
            percent: Percentage of the current size to close
            exit_price: Slipped fill price
            exit_time: Time of the exit bar
            bar_index: Index of the exit bar

        Returns:
            The recorded partial trade, or None when the slice is empty
        """
        position = self._require_position(state)
        partial_size = position.size * percent_to_rate(percent)
        if partial_size <= ZERO:
            return None

        trade = self._settle(
            state,
            position,
            partial_size,
            exit_price,
            exit_time,
            bar_index,
            ExitReason.PARTIAL,
            closes_position=False,
        )
        position.size -= partial_size
        position.partial_taken = True
        return trade

    def _settle(
        self,
        state: EngineState,
        position: Position,
        size: float,
        exit_price: float,
        exit_time: BarTime,
        bar_index: int,
        exit_reason: ExitReason,
        closes_position: bool,
    ) -> Trade:
        exit_value = size * exit_price
        entry_value = size * position.entry_price
        commission = exit_value * self.commission_rate

        raw_pnl = (exit_value - entry_value) * position.direction.factor
        total_pnl = raw_pnl - commission

        state.equity += raw_pnl - commission
        state.realized_pnl += total_pnl
        state.total_fees += commission

        self._last_id += 1
        trade = Trade(
            id=self._last_id,
            direction=position.direction,
            entry_time=position.entry_time,
            entry_price=position.entry_price,
            exit_time=exit_time,
            exit_price=exit_price,
            size=size,
            pnl=total_pnl,
            pnl_percent=calculate_pnl_percent(raw_pnl, entry_value),
            fees=commission,
            exit_reason=exit_reason,
            bar_index=bar_index,
            closes_position=closes_position,
        )
        state.trades.append(trade)

        logger.debug(
            f"Trade #{trade.id} {trade.direction} {exit_reason}: "
            f"size={size:.6f} exit={exit_price:.6f} pnl={total_pnl:.4f}"
        )
        return trade

    @staticmethod
    def _require_position(state: EngineState) -> Position:
        if state.position is None:
            raise ValidationError("No open position to close")
        return state.position

    @staticmethod
    def to_frame(trades: Iterable[Trade]) -> pd.DataFrame:
        """Convert trades into a DataFrame, one row per trade.

        Args:
            trades: Trades in ledger order

        Returns:
            DataFrame with TRADE_COLUMNS (empty but typed when there are no trades)
        """
        rows = [trade.to_dict() for trade in trades]
        if not rows:
            return pd.DataFrame(columns=TRADE_COLUMNS)
        return pd.DataFrame(rows, columns=TRADE_COLUMNS)
