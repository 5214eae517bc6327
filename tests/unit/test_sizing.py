"""
Unit tests for RiskSizingCalculator.
"""

import math

import pytest

from tradereplay.core.enums import PositionType, RiskMode
from tradereplay.core.models.config import EngineConfig
from tradereplay.engine.sizing import RiskSizingCalculator


def _config(**overrides: object) -> EngineConfig:
    params: dict[str, object] = {"commission_percent": 0.0}
    params.update(overrides)
    return EngineConfig(**params)  # type: ignore[arg-type]


class TestPlanEntry:
    """Test share count, fill and commission."""

    def test_should_size_entry_from_equity_and_commission(self) -> None:
        """Test shares = equity * size% / (1 + commission) / fill."""
        config = _config(position_size_percent=50.0, commission_percent=0.1)

        plan = RiskSizingCalculator.plan_entry(10000.0, 100.0, PositionType.LONG, config)

        assert plan is not None
        trade_value = 5000.0 / 1.001
        assert plan.size == pytest.approx(trade_value / 100.0)
        assert plan.entry_commission == pytest.approx(trade_value * 0.001)
        assert plan.entry_price == 100.0

    def test_should_slip_entry_against_trader(self) -> None:
        """Test long fills above and short fills below the signal."""
        config = _config(slippage_bps=20.0)

        long_plan = RiskSizingCalculator.plan_entry(1000.0, 100.0, PositionType.LONG, config)
        short_plan = RiskSizingCalculator.plan_entry(1000.0, 100.0, PositionType.SHORT, config)

        assert long_plan is not None and short_plan is not None
        assert long_plan.entry_price == pytest.approx(100.2)
        assert short_plan.entry_price == pytest.approx(99.8)

    @pytest.mark.parametrize("equity", [0.0, -5.0, math.nan, math.inf])
    def test_should_skip_degenerate_equity(self, equity: float) -> None:
        """Test unusable capital produces no plan."""
        assert RiskSizingCalculator.plan_entry(equity, 100.0, PositionType.LONG, _config()) is None

    def test_should_skip_zero_allocation(self) -> None:
        """Test zero position size produces no plan."""
        config = _config(position_size_percent=0.0)

        assert RiskSizingCalculator.plan_entry(1000.0, 100.0, PositionType.LONG, config) is None

    def test_should_build_position_from_plan(self) -> None:
        """Test the plan carries its levels into the position."""
        config = _config(stop_loss_atr=1.0, take_profit_atr=2.0, partial_take_profit_at_r=1.0)

        plan = RiskSizingCalculator.plan_entry(1000.0, 100.0, PositionType.LONG, config, atr=2.0)
        assert plan is not None
        position = plan.to_position(entry_time=42)

        assert position.entry_time == 42
        assert position.entry_price == 100.0
        assert position.stop_loss_price == pytest.approx(98.0)
        assert position.take_profit_price == pytest.approx(104.0)
        assert position.partial_target_price == pytest.approx(102.0)
        assert position.risk_per_share == pytest.approx(2.0)
        assert position.extreme_price == 100.0


class TestCalculateLevels:
    """Test ATR and percentage level derivation."""

    def test_should_derive_atr_levels_for_short(self) -> None:
        """Test short stops sit above and targets below the entry."""
        config = _config(stop_loss_atr=1.5, take_profit_atr=3.0)

        levels = RiskSizingCalculator.calculate_levels(100.0, PositionType.SHORT, config, atr=2.0)

        assert levels.stop_loss_price == pytest.approx(103.0)
        assert levels.take_profit_price == pytest.approx(94.0)
        assert levels.risk_per_share == pytest.approx(3.0)

    def test_should_leave_levels_unset_without_atr(self) -> None:
        """Test ATR mode with no ATR value sets nothing."""
        config = _config(stop_loss_atr=1.0, take_profit_atr=2.0)

        levels = RiskSizingCalculator.calculate_levels(100.0, PositionType.LONG, config, atr=None)

        assert levels.stop_loss_price is None
        assert levels.take_profit_price is None
        assert levels.risk_per_share == 0.0

    def test_should_seed_trailing_stop_without_defining_risk(self) -> None:
        """Test trailing-only setups start at the trail distance with zero R."""
        config = _config(trailing_atr=2.0)

        levels = RiskSizingCalculator.calculate_levels(100.0, PositionType.LONG, config, atr=1.5)

        assert levels.stop_loss_price == pytest.approx(97.0)
        assert levels.risk_per_share == 0.0

    def test_should_derive_percentage_levels(self) -> None:
        """Test percentage mode uses the fill price."""
        config = _config(
            risk_mode=RiskMode.PERCENTAGE,
            stop_loss_enabled=True,
            stop_loss_percent=2.0,
            take_profit_enabled=True,
            take_profit_percent=5.0,
        )

        long_levels = RiskSizingCalculator.calculate_levels(200.0, PositionType.LONG, config)
        short_levels = RiskSizingCalculator.calculate_levels(200.0, PositionType.SHORT, config)

        assert long_levels.stop_loss_price == pytest.approx(196.0)
        assert long_levels.take_profit_price == pytest.approx(210.0)
        assert long_levels.risk_per_share == pytest.approx(4.0)
        assert short_levels.stop_loss_price == pytest.approx(204.0)
        assert short_levels.take_profit_price == pytest.approx(190.0)

    def test_should_ignore_disabled_percentage_levels(self) -> None:
        """Test percentages are ignored unless enabled."""
        config = _config(risk_mode=RiskMode.PERCENTAGE, stop_loss_percent=2.0, take_profit_percent=5.0)

        levels = RiskSizingCalculator.calculate_levels(200.0, PositionType.LONG, config, atr=3.0)

        assert levels.stop_loss_price is None
        assert levels.take_profit_price is None


class TestPartialTarget:
    """Test partial take-profit target."""

    def test_should_place_target_at_r_multiple(self) -> None:
        """Test target = entry +/- risk * R."""
        config = _config(partial_take_profit_at_r=1.5)

        long_target = RiskSizingCalculator.calculate_partial_target(100.0, PositionType.LONG, 2.0, config)
        short_target = RiskSizingCalculator.calculate_partial_target(100.0, PositionType.SHORT, 2.0, config)

        assert long_target == pytest.approx(103.0)
        assert short_target == pytest.approx(97.0)

    def test_should_skip_target_without_risk_or_setting(self) -> None:
        """Test no target when R is undefined or partials are off."""
        assert RiskSizingCalculator.calculate_partial_target(
            100.0, PositionType.LONG, 0.0, _config(partial_take_profit_at_r=1.0)
        ) is None
        assert RiskSizingCalculator.calculate_partial_target(
            100.0, PositionType.LONG, 2.0, _config()
        ) is None
