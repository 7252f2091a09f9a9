"""
Constants for the backtest engine.

This module centralizes magic numbers and identifier strings.
"""

# Account constants
INITIAL_CAPITAL = 10000.0
TRADING_DAYS_PER_YEAR = 252


class Signal:
    """Per-bar trading signal values."""
    BUY = 1
    SELL = -1
    HOLD = 0


class Position:
    """Simulator position states (long-only, unit-sized)."""
    FLAT = 0
    LONG = 1


class StrategyName:
    """Recognized strategy identifiers."""
    MOMENTUM = "momentum"
    MEAN_REVERSION = "meanReversion"
    BREAKOUT = "breakout"


class WinRule:
    """How a closed trade is classified as a win."""
    TRADE = "trade"  # equity at exit > equity before entry
    EXIT_BAR = "exit_bar"  # equity at exit check > previous curve value


VALID_WIN_RULES = {WinRule.TRADE, WinRule.EXIT_BAR}

# Default indicator periods
DEFAULT_MOMENTUM_PERIOD = 10
DEFAULT_MEAN_REVERSION_PERIOD = 20
DEFAULT_BAND_WIDTH = 2.0
DEFAULT_BREAKOUT_PERIOD = 20

# Bar record fields
DATE_FIELD = "date"
PRICE_FIELDS = ["open", "high", "low", "close"]
