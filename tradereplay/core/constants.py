"""
Core constants and defaults.

Defines engine-wide defaults used when building configurations from loose
settings, plus the unit divisors shared by the sizing and PnL calculations.
"""

# Unit divisors
BPS_DIVISOR = 10000.0  # Basis points per 1.0
PERCENT_DIVISOR = 100.0

# Account defaults
DEFAULT_INITIAL_CAPITAL = 10000.0
DEFAULT_POSITION_SIZE_PERCENT = 100.0  # Fraction of equity allocated per entry
DEFAULT_COMMISSION_PERCENT = 0.1  # 0.1% per side

# Risk management defaults (0 = disabled)
DEFAULT_ATR_PERIOD = 14
MIN_ATR_PERIOD = 1
DEFAULT_PARTIAL_TAKE_PROFIT_PERCENT = 50.0
MAX_PERCENTAGE = 100.0
