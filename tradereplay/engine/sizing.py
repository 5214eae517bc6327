"""
Risk and position sizing calculations.

This module turns account equity, a signal price and the engine configuration
into a share count, a slipped entry fill and the stop/target/partial levels of
a new position. All functions are pure; the bar processor applies the result.
"""

from dataclasses import dataclass

from loguru import logger

from tradereplay.core.enums import PositionType, RiskMode
from tradereplay.core.models.bar import BarTime
from tradereplay.core.models.config import EngineConfig
from tradereplay.core.models.position import Position
from tradereplay.core.types.financial import (
    ONE,
    ZERO,
    apply_slippage,
    is_finite_positive,
    percent_to_rate,
)


@dataclass(frozen=True)
class RiskLevels:
    """Protective levels derived for a new entry."""

    stop_loss_price: float | None = None
    take_profit_price: float | None = None
    risk_per_share: float = ZERO


@dataclass(frozen=True)
class EntryPlan:
    """A fully sized entry, ready to be opened by the bar processor."""

    direction: PositionType
    entry_price: float
    size: float
    entry_commission: float
    levels: RiskLevels
    partial_target_price: float | None

    def to_position(self, entry_time: BarTime) -> Position:
        """Build the open position described by this plan."""
        return Position(
            direction=self.direction,
            entry_time=entry_time,
            entry_price=self.entry_price,
            size=self.size,
            risk_per_share=self.levels.risk_per_share,
            stop_loss_price=self.levels.stop_loss_price,
            take_profit_price=self.levels.take_profit_price,
            partial_target_price=self.partial_target_price,
            extreme_price=self.entry_price,
        )


class RiskSizingCalculator:
    """Pure sizing helpers for new entries.

    Degenerate inputs (zero or non-finite capital, fill price or share count)
    produce no plan instead of an error: a parameter sweep can legitimately
    generate thousands of such configurations.
    """

    @staticmethod
    def plan_entry(
        equity: float,
        signal_price: float,
        direction: PositionType,
        config: EngineConfig,
        atr: float | None = None,
    ) -> EntryPlan | None:
        """Size a new entry.

        Args:
            equity: Current account equity
            signal_price: Requested (pre-slippage) price
            direction: Direction of the new position
            config: Engine configuration
            atr: ATR value at the entry bar, if available

        Returns:
            EntryPlan, or None if the entry must be skipped
        """
        allocated_capital = equity * percent_to_rate(config.position_size_percent)
        if not is_finite_positive(allocated_capital):
            logger.debug(f"Skipping {direction} entry: allocated capital {allocated_capital}")
            return None

        entry_price = apply_slippage(signal_price, direction.entry_side, config.slippage_rate)
        if not is_finite_positive(entry_price):
            logger.debug(f"Skipping {direction} entry: fill price {entry_price}")
            return None

        trade_value = allocated_capital / (ONE + config.commission_rate)
        shares = trade_value / entry_price
        if not is_finite_positive(shares):
            logger.debug(f"Skipping {direction} entry: share count {shares}")
            return None

        levels = RiskSizingCalculator.calculate_levels(entry_price, direction, config, atr)
        partial_target = RiskSizingCalculator.calculate_partial_target(
            entry_price, direction, levels.risk_per_share, config
        )

        return EntryPlan(
            direction=direction,
            entry_price=entry_price,
            size=shares,
            entry_commission=trade_value * config.commission_rate,
            levels=levels,
            partial_target_price=partial_target,
        )

    @staticmethod
    def calculate_levels(
        entry_price: float,
        direction: PositionType,
        config: EngineConfig,
        atr: float | None = None,
    ) -> RiskLevels:
        """Derive stop-loss, take-profit and risk per share for an entry."""
        if config.risk_mode == RiskMode.PERCENTAGE:
            return RiskSizingCalculator._percentage_levels(entry_price, direction, config)
        if atr is None:
            return RiskLevels()
        return RiskSizingCalculator._atr_levels(entry_price, direction, config, atr)

    @staticmethod
    def _percentage_levels(
        entry_price: float, direction: PositionType, config: EngineConfig
    ) -> RiskLevels:
        stop_loss_price = None
        take_profit_price = None
        risk_per_share = ZERO

        if config.stop_loss_enabled and config.stop_loss_percent > 0:
            stop_rate = percent_to_rate(config.stop_loss_percent)
            stop_loss_price = entry_price * (ONE - direction.factor * stop_rate)
            risk_per_share = entry_price * stop_rate
        if config.take_profit_enabled and config.take_profit_percent > 0:
            target_rate = percent_to_rate(config.take_profit_percent)
            take_profit_price = entry_price * (ONE + direction.factor * target_rate)

        return RiskLevels(stop_loss_price, take_profit_price, risk_per_share)

    @staticmethod
    def _atr_levels(
        entry_price: float, direction: PositionType, config: EngineConfig, atr: float
    ) -> RiskLevels:
        stop_loss_price = None
        take_profit_price = None
        risk_per_share = ZERO

        if config.stop_loss_atr > 0:
            risk_per_share = config.stop_loss_atr * atr
            stop_loss_price = entry_price - direction.factor * risk_per_share
        elif config.trailing_atr > 0:
            # Trailing-only setups start from the trail distance; no R is defined.
            stop_loss_price = entry_price - direction.factor * config.trailing_atr * atr
        if config.take_profit_atr > 0:
            take_profit_price = entry_price + direction.factor * config.take_profit_atr * atr

        return RiskLevels(stop_loss_price, take_profit_price, risk_per_share)

    @staticmethod
    def calculate_partial_target(
        entry_price: float,
        direction: PositionType,
        risk_per_share: float,
        config: EngineConfig,
    ) -> float | None:
        """Price at which the partial take-profit fires, if configured."""
        if risk_per_share <= 0 or config.partial_take_profit_at_r <= 0:
            return None
        return entry_price + direction.factor * risk_per_share * config.partial_take_profit_at_r
