"""
Unit tests for the Position model.
"""

import pytest

from tradereplay.core.enums import PositionType
from tradereplay.core.exceptions.engine import ValidationError
from tradereplay.core.models.bar import Bar
from tradereplay.core.models.position import Position


def _bar(high: float, low: float) -> Bar:
    return Bar(time=1, open=(high + low) / 2, high=high, low=low, close=(high + low) / 2)


class TestPositionCreation:
    """Test Position validation."""

    def test_should_default_extreme_to_entry_price(self) -> None:
        """Test extreme price starts at the entry fill."""
        position = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=2.0)

        assert position.extreme_price == 100.0
        assert position.bars_in_trade == 0
        assert position.stop_loss_price is None

    @pytest.mark.parametrize("extreme", [0.0, 95.0, 104.0])
    def test_should_keep_explicit_extreme_price(self, extreme: float) -> None:
        """Test a given extreme price, zero included, is not replaced by the entry price."""
        position = Position(
            direction=PositionType.SHORT,
            entry_time=0,
            entry_price=100.0,
            size=2.0,
            extreme_price=extreme,
        )

        assert position.extreme_price == extreme

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"entry_price": 0.0}, "Entry price must be positive"),
            ({"size": 0.0}, "Position size must be positive"),
            ({"risk_per_share": -1.0}, "Risk per share must be non-negative"),
        ],
    )
    def test_should_reject_invalid_values(self, kwargs: dict[str, float], message: str) -> None:
        """Test constructor validation."""
        params: dict[str, object] = {
            "direction": PositionType.LONG,
            "entry_time": 0,
            "entry_price": 100.0,
            "size": 1.0,
        }
        params.update(kwargs)

        with pytest.raises(ValidationError, match=message):
            Position(**params)  # type: ignore[arg-type]


class TestPositionPricing:
    """Test mark-to-market helpers."""

    def test_should_mark_long_to_market(self) -> None:
        """Test unrealized PnL and percent for a long."""
        position = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=10.0)

        pnl = position.mark_to_market(105.0)

        assert pnl == pytest.approx(50.0)
        assert position.unrealized_pnl == pytest.approx(50.0)
        assert position.unrealized_pnl_percent == pytest.approx(5.0)

    def test_should_mark_short_to_market(self) -> None:
        """Test short positions gain when price falls."""
        position = Position(direction=PositionType.SHORT, entry_time=0, entry_price=100.0, size=10.0)

        assert position.unrealized_pnl_at(95.0) == pytest.approx(50.0)
        assert position.unrealized_pnl_at(105.0) == pytest.approx(-50.0)

    def test_should_report_losing_or_flat_price(self) -> None:
        """Test the time-stop losing check counts break-even as losing."""
        long = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0)
        short = Position(direction=PositionType.SHORT, entry_time=0, entry_price=100.0, size=1.0)

        assert long.is_losing_at(100.0)
        assert long.is_losing_at(99.0)
        assert not long.is_losing_at(101.0)
        assert short.is_losing_at(100.0)
        assert not short.is_losing_at(99.0)


class TestPositionLevels:
    """Test level touching, stop ratchets and extremes."""

    def test_should_detect_long_stop_and_target_touches(self) -> None:
        """Test long stops use the low and targets the high."""
        position = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0)
        bar = _bar(high=103.0, low=97.0)

        assert position.touches(97.0, bar, favorable=False)
        assert not position.touches(96.9, bar, favorable=False)
        assert position.touches(103.0, bar, favorable=True)
        assert not position.touches(103.1, bar, favorable=True)
        assert not position.touches(None, bar, favorable=True)

    def test_should_detect_short_stop_and_target_touches(self) -> None:
        """Test short stops use the high and targets the low."""
        position = Position(direction=PositionType.SHORT, entry_time=0, entry_price=100.0, size=1.0)
        bar = _bar(high=103.0, low=97.0)

        assert position.touches(103.0, bar, favorable=False)
        assert not position.touches(103.5, bar, favorable=False)
        assert position.touches(97.0, bar, favorable=True)
        assert not position.touches(96.0, bar, favorable=True)

    def test_should_only_accept_tighter_stops(self) -> None:
        """Test stop ratchets never loosen."""
        long = Position(
            direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0, stop_loss_price=98.0
        )
        short = Position(
            direction=PositionType.SHORT, entry_time=0, entry_price=100.0, size=1.0, stop_loss_price=102.0
        )
        unprotected = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0)

        assert long.tightens_stop(99.0)
        assert not long.tightens_stop(98.0)
        assert not long.tightens_stop(97.0)
        assert short.tightens_stop(101.0)
        assert not short.tightens_stop(103.0)
        assert unprotected.tightens_stop(50.0)

    def test_should_track_extreme_in_trade_direction(self) -> None:
        """Test longs track highs and shorts track lows."""
        long = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0)
        short = Position(direction=PositionType.SHORT, entry_time=0, entry_price=100.0, size=1.0)

        long.update_extreme(_bar(high=104.0, low=99.0))
        long.update_extreme(_bar(high=102.0, low=98.0))
        short.update_extreme(_bar(high=101.0, low=96.0))
        short.update_extreme(_bar(high=103.0, low=97.0))

        assert long.extreme_price == 104.0
        assert short.extreme_price == 96.0

    def test_should_copy_independently(self) -> None:
        """Test copies do not share mutations."""
        position = Position(direction=PositionType.LONG, entry_time=0, entry_price=100.0, size=1.0)

        snapshot = position.copy()
        position.size = 0.5
        position.stop_loss_price = 99.0

        assert snapshot.size == 1.0
        assert snapshot.stop_loss_price is None
