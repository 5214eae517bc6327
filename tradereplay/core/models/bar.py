"""
Price bar and signal domain models.

Bars and signals come from external collaborators (data layer and strategy).
Both are immutable once built; the engine trusts their values as-is.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pandas as pd

from tradereplay.core.enums import SignalType
from tradereplay.core.exceptions.engine import InvalidBarRangeError, ValidationError
from tradereplay.core.utils.validation import validate_price

# Bar time is whatever the data layer uses: epoch seconds, ISO strings or timestamps.
BarTime = Any

OHLCV_COLUMNS = ("open", "high", "low", "close", "volume")


@dataclass(frozen=True, slots=True)
class Bar:
    """A single OHLCV price bar."""

    time: BarTime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        """Validate bar prices after initialization."""
        for field_name in ("open", "high", "low", "close"):
            validate_price(getattr(self, field_name), field_name)
        if self.high < self.low:
            raise InvalidBarRangeError(self.high, self.low)


@dataclass(frozen=True, slots=True)
class Signal:
    """A buy/sell request produced by a strategy for a given bar."""

    time: BarTime
    type: SignalType
    price: float
    reason: str | None = None

    def __post_init__(self) -> None:
        """Normalize the signal type after initialization.

        The price is kept as given; the engine skips fills at a zero or
        non-finite price.
        """
        try:
            object.__setattr__(self, "type", SignalType(self.type))
        except ValueError as e:
            raise ValidationError(f"Signal type must be 'buy' or 'sell', got {self.type!r}") from e

    def retimed(self, time: BarTime, price: float) -> "Signal":
        """Copy this signal onto another bar and price (deferred execution)."""
        return Signal(time=time, type=self.type, price=price, reason=self.reason)


def bars_from_frame(data: pd.DataFrame) -> list[Bar]:
    """Convert an OHLCV DataFrame into bars.

    The time of each bar is taken from a ``timestamp`` column when present,
    otherwise from the index.

    Args:
        data: DataFrame with open/high/low/close (and optionally volume) columns

    Returns:
        Bars in frame order

    Raises:
        ValidationError: If required columns are missing
    """
    missing = [col for col in OHLCV_COLUMNS[:4] if col not in data.columns]
    if missing:
        raise ValidationError(f"OHLCV frame is missing columns: {missing}")

    return list(_iter_frame_bars(data))


def _iter_frame_bars(data: pd.DataFrame) -> Iterator[Bar]:
    times = data["timestamp"] if "timestamp" in data.columns else data.index
    volumes = data["volume"] if "volume" in data.columns else [0.0] * len(data)

    for time, open_, high, low, close, volume in zip(
        times, data["open"], data["high"], data["low"], data["close"], volumes, strict=True
    ):
        yield Bar(
            time=time,
            open=float(open_),
            high=float(high),
            low=float(low),
            close=float(close),
            volume=float(volume),
        )
