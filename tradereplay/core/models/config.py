"""
Engine configuration model.

One immutable configuration per simulation run. Build it directly (validated,
raises ConfigurationError) or from loose UI/finder settings with
``EngineConfig.from_settings`` (normalized, never raises for bad numbers).
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, TypeVar

from tradereplay.core.constants import (
    DEFAULT_ATR_PERIOD,
    DEFAULT_COMMISSION_PERCENT,
    DEFAULT_INITIAL_CAPITAL,
    DEFAULT_PARTIAL_TAKE_PROFIT_PERCENT,
    DEFAULT_POSITION_SIZE_PERCENT,
    MAX_PERCENTAGE,
    MIN_ATR_PERIOD,
)
from tradereplay.core.enums import ExecutionModel, RiskMode, TradeDirection
from tradereplay.core.exceptions.engine import ConfigurationError
from tradereplay.core.types.financial import bps_to_rate, percent_to_rate
from tradereplay.core.utils.validation import (
    clamp,
    coerce_number,
    validate_non_negative,
    validate_percentage,
)

_E = TypeVar("_E", ExecutionModel, TradeDirection)

# Settings keys as written by the chart/finder front end.
_CAMEL_CASE_KEYS = {
    "slippage_bps": "slippageBps",
    "atr_period": "atrPeriod",
    "stop_loss_atr": "stopLossAtr",
    "take_profit_atr": "takeProfitAtr",
    "trailing_atr": "trailingAtr",
    "partial_take_profit_at_r": "partialTakeProfitAtR",
    "partial_take_profit_percent": "partialTakeProfitPercent",
    "break_even_at_r": "breakEvenAtR",
    "time_stop_bars": "timeStopBars",
    "risk_mode": "riskMode",
    "stop_loss_percent": "stopLossPercent",
    "take_profit_percent": "takeProfitPercent",
    "stop_loss_enabled": "stopLossEnabled",
    "take_profit_enabled": "takeProfitEnabled",
    "execution_model": "executionModel",
    "allow_same_bar_exit": "allowSameBarExit",
    "trade_direction": "tradeDirection",
}


@dataclass(frozen=True)
class EngineConfig:
    """Risk-management and cost configuration for one simulation run.

    Numeric multiples and percentages use 0 to mean "disabled".
    """

    initial_capital: float = DEFAULT_INITIAL_CAPITAL
    position_size_percent: float = DEFAULT_POSITION_SIZE_PERCENT
    commission_percent: float = DEFAULT_COMMISSION_PERCENT
    slippage_bps: float = 0.0
    atr_period: int = DEFAULT_ATR_PERIOD
    stop_loss_atr: float = 0.0
    take_profit_atr: float = 0.0
    trailing_atr: float = 0.0
    partial_take_profit_at_r: float = 0.0
    partial_take_profit_percent: float = DEFAULT_PARTIAL_TAKE_PROFIT_PERCENT
    break_even_at_r: float = 0.0
    time_stop_bars: int = 0
    risk_mode: RiskMode = RiskMode.ATR
    stop_loss_percent: float = 0.0
    take_profit_percent: float = 0.0
    stop_loss_enabled: bool = False
    take_profit_enabled: bool = False
    execution_model: ExecutionModel = ExecutionModel.SIGNAL_CLOSE
    allow_same_bar_exit: bool = False
    trade_direction: TradeDirection = TradeDirection.BOTH

    def __post_init__(self) -> None:
        """Validate configuration and coerce enum fields (fail-fast)."""
        self._coerce_enums()

        validate_non_negative(self.initial_capital, "initial_capital")
        validate_non_negative(self.position_size_percent, "position_size_percent")
        validate_non_negative(self.commission_percent, "commission_percent")
        validate_non_negative(self.slippage_bps, "slippage_bps")
        for name in (
            "stop_loss_atr",
            "take_profit_atr",
            "trailing_atr",
            "partial_take_profit_at_r",
            "break_even_at_r",
            "stop_loss_percent",
            "take_profit_percent",
        ):
            validate_non_negative(getattr(self, name), name)
        validate_percentage(self.partial_take_profit_percent, "partial_take_profit_percent")

        if self.atr_period < MIN_ATR_PERIOD:
            raise ConfigurationError(f"atr_period must be at least 1, got {self.atr_period}")
        if self.time_stop_bars < 0:
            raise ConfigurationError(f"time_stop_bars must be non-negative, got {self.time_stop_bars}")

    def _coerce_enums(self) -> None:
        try:
            object.__setattr__(self, "risk_mode", RiskMode(self.risk_mode))
            object.__setattr__(self, "execution_model", ExecutionModel(self.execution_model))
            object.__setattr__(self, "trade_direction", TradeDirection(self.trade_direction))
        except ValueError as e:
            raise ConfigurationError(f"Invalid engine mode: {e}") from e

    @property
    def slippage_rate(self) -> float:
        """Fractional slippage applied to every fill."""
        return bps_to_rate(self.slippage_bps)

    @property
    def commission_rate(self) -> float:
        """Fractional commission charged per side."""
        return percent_to_rate(self.commission_percent)

    @property
    def needs_atr(self) -> bool:
        """Check if any rule reads the ATR series."""
        return (
            self.stop_loss_atr > 0
            or self.take_profit_atr > 0
            or self.trailing_atr > 0
            or self.partial_take_profit_at_r > 0
            or self.break_even_at_r > 0
        )

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any] | None = None,
        capital: float = DEFAULT_INITIAL_CAPITAL,
        position_size: float = DEFAULT_POSITION_SIZE_PERCENT,
        commission: float = DEFAULT_COMMISSION_PERCENT,
    ) -> "EngineConfig":
        """Build a configuration from loose backtest settings.

        Keys may be snake_case or the front end's camelCase. Non-finite or
        non-numeric values fall back to defaults, negatives clamp to zero and
        unknown mode strings fall back to the default mode.

        Args:
            settings: Raw settings mapping
            capital: Initial account capital
            position_size: Position size as a percentage of equity
            commission: Commission percentage per side

        Returns:
            A valid EngineConfig
        """
        raw = dict(settings or {})

        def read(name: str) -> Any:
            if name in raw:
                return raw[name]
            return raw.get(_CAMEL_CASE_KEYS.get(name, name))

        def number(name: str, fallback: float) -> float:
            return max(0.0, coerce_number(read(name), fallback))

        def flag(name: str, fallback: bool) -> bool:
            value = read(name)
            return value if isinstance(value, bool) else fallback

        def choice(name: str, enum_type: type[_E], fallback: _E) -> _E:
            try:
                return enum_type(read(name))
            except ValueError:
                return fallback

        return cls(
            initial_capital=max(0.0, coerce_number(capital, DEFAULT_INITIAL_CAPITAL)),
            position_size_percent=max(0.0, coerce_number(position_size, DEFAULT_POSITION_SIZE_PERCENT)),
            commission_percent=max(0.0, coerce_number(commission, DEFAULT_COMMISSION_PERCENT)),
            slippage_bps=number("slippage_bps", 0.0),
            atr_period=max(MIN_ATR_PERIOD, int(number("atr_period", DEFAULT_ATR_PERIOD))),
            stop_loss_atr=number("stop_loss_atr", 0.0),
            take_profit_atr=number("take_profit_atr", 0.0),
            trailing_atr=number("trailing_atr", 0.0),
            partial_take_profit_at_r=number("partial_take_profit_at_r", 0.0),
            partial_take_profit_percent=clamp(
                number("partial_take_profit_percent", DEFAULT_PARTIAL_TAKE_PROFIT_PERCENT),
                0.0,
                MAX_PERCENTAGE,
            ),
            break_even_at_r=number("break_even_at_r", 0.0),
            time_stop_bars=int(number("time_stop_bars", 0)),
            risk_mode=RiskMode.parse(read("risk_mode")),
            stop_loss_percent=number("stop_loss_percent", 0.0),
            take_profit_percent=number("take_profit_percent", 0.0),
            stop_loss_enabled=flag("stop_loss_enabled", False),
            take_profit_enabled=flag("take_profit_enabled", False),
            execution_model=choice("execution_model", ExecutionModel, ExecutionModel.SIGNAL_CLOSE),
            allow_same_bar_exit=flag("allow_same_bar_exit", False),
            trade_direction=choice("trade_direction", TradeDirection, TradeDirection.BOTH),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        result: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            result[item.name] = value.value if hasattr(value, "value") else value
        return result
