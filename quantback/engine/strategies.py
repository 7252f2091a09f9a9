"""
Strategy signal generation.

Each evaluator maps price series to a per-bar signal series of the same
length holding only BUY (+1), SELL (-1) or HOLD (0). Bars whose
indicators are still warming up always get HOLD. Comparisons against NaN
are false, so a NaN price or indicator falls through to the HOLD/SELL
branches exactly as IEEE semantics dictate.

Strategies are a closed set dispatched through the STRATEGIES table;
adding one means adding an evaluator and a table entry.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List

import numpy as np
import pandas as pd

from quantback.engine.config import BacktestConfig
from quantback.engine.constants import (
    DEFAULT_BAND_WIDTH,
    DEFAULT_BREAKOUT_PERIOD,
    DEFAULT_MEAN_REVERSION_PERIOD,
    DEFAULT_MOMENTUM_PERIOD,
    Signal,
    StrategyName,
)
from quantback.engine.exceptions import UnknownStrategyError
from quantback.indicators.calculations import (
    calculate_bollinger_bands,
    calculate_rolling_max,
    calculate_rolling_min,
    calculate_sma,
)


def _to_signal_series(values: np.ndarray, index: pd.Index) -> pd.Series:
    return pd.Series(values.astype(int), index=index, name="signal")


# =============================================================================
# Evaluators
# =============================================================================


def momentum_signals(
    close: pd.Series, period: int = DEFAULT_MOMENTUM_PERIOD
) -> pd.Series:
    """
    Momentum: long above the moving average, out below it.

    Once the SMA is defined every bar is either BUY or SELL; there is no
    neutral zone.

    Args:
        close: Close price series.
        period: SMA period (default 10).

    Returns:
        Signal series.
    """
    sma = calculate_sma(close, period)
    above = close.to_numpy(dtype=float) > sma.to_numpy()

    values = np.where(
        sma.isna().to_numpy(),
        Signal.HOLD,
        np.where(above, Signal.BUY, Signal.SELL),
    )
    return _to_signal_series(values, close.index)


def mean_reversion_signals(
    close: pd.Series,
    period: int = DEFAULT_MEAN_REVERSION_PERIOD,
    num_std: float = DEFAULT_BAND_WIDTH,
) -> pd.Series:
    """
    Mean reversion: buy below the lower band, sell above the upper band.

    Args:
        close: Close price series.
        period: Band period (default 20).
        num_std: Band width in population standard deviations (default 2).

    Returns:
        Signal series.
    """
    middle, upper, lower = calculate_bollinger_bands(close, period, num_std)
    prices = close.to_numpy(dtype=float)

    undefined = (middle.isna() | upper.isna()).to_numpy()
    values = np.select(
        [undefined, prices < lower.to_numpy(), prices > upper.to_numpy()],
        [Signal.HOLD, Signal.BUY, Signal.SELL],
        default=Signal.HOLD,
    )
    return _to_signal_series(values, close.index)


def breakout_signals(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    period: int = DEFAULT_BREAKOUT_PERIOD,
) -> pd.Series:
    """
    Breakout: buy above the prior bar's rolling high, sell below its rolling low.

    The channel is taken as of the previous bar so the current bar's own
    high/low never counts toward its breakout. The first bar is always HOLD.

    Args:
        high: High price series.
        low: Low price series.
        close: Close price series.
        period: Channel period (default 20).

    Returns:
        Signal series.
    """
    highest = calculate_rolling_max(high, period)
    lowest = calculate_rolling_min(low, period)
    prices = close.to_numpy(dtype=float)

    prior_high = highest.shift(1).to_numpy()
    prior_low = lowest.shift(1).to_numpy()

    undefined = (highest.isna() | lowest.isna()).to_numpy()
    values = np.select(
        [undefined, prices > prior_high, prices < prior_low],
        [Signal.HOLD, Signal.BUY, Signal.SELL],
        default=Signal.HOLD,
    )
    return _to_signal_series(values, close.index)


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class StrategySpec:
    """A named strategy with its evaluator and warm-up requirement."""

    name: str
    label: str
    description: str
    evaluate: Callable[[pd.DataFrame, BacktestConfig], pd.Series]
    lookback: Callable[[BacktestConfig], int]


STRATEGIES: Dict[str, StrategySpec] = {
    StrategyName.MOMENTUM: StrategySpec(
        name=StrategyName.MOMENTUM,
        label="Momentum Strategy",
        description="Buy when price > SMA(10), Sell when price < SMA(10)",
        evaluate=lambda prices, config: momentum_signals(
            prices["close"], config.momentum_period
        ),
        lookback=lambda config: config.momentum_period,
    ),
    StrategyName.MEAN_REVERSION: StrategySpec(
        name=StrategyName.MEAN_REVERSION,
        label="Mean Reversion Strategy",
        description="Buy at lower band, Sell at upper band (Bollinger-style)",
        evaluate=lambda prices, config: mean_reversion_signals(
            prices["close"], config.mean_reversion_period, config.band_width
        ),
        lookback=lambda config: config.mean_reversion_period,
    ),
    StrategyName.BREAKOUT: StrategySpec(
        name=StrategyName.BREAKOUT,
        label="Breakout Strategy",
        description="Buy on 20-day high, Sell on 20-day low",
        evaluate=lambda prices, config: breakout_signals(
            prices["high"], prices["low"], prices["close"], config.breakout_period
        ),
        lookback=lambda config: config.breakout_period,
    ),
}


def get_strategy(name: object) -> StrategySpec:
    """
    Look up a strategy by identifier.

    Args:
        name: Strategy identifier ("momentum", "meanReversion", "breakout").

    Returns:
        The matching StrategySpec.

    Raises:
        UnknownStrategyError: If the identifier is not recognized.
    """
    if not isinstance(name, str) or name not in STRATEGIES:
        raise UnknownStrategyError(name, STRATEGIES.keys())
    return STRATEGIES[name]


def list_strategies() -> List[StrategySpec]:
    """Get all registered strategies in display order."""
    return list(STRATEGIES.values())


def generate_signals(
    prices: pd.DataFrame, strategy: str, config: BacktestConfig
) -> pd.Series:
    """
    Run the named strategy over parsed price data.

    Args:
        prices: DataFrame with close (and high/low for breakout) columns.
        strategy: Strategy identifier.
        config: Backtest configuration supplying periods.

    Returns:
        Signal series aligned with prices.
    """
    return get_strategy(strategy).evaluate(prices, config)
