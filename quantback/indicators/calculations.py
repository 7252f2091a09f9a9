"""
Technical Indicator Calculations Module.

This module provides pure, vectorized functions for the rolling-window
indicators used by the strategy evaluators. All functions operate on
pandas Series and return new data without modifying inputs.

Every indicator follows the same warm-up rule: the first ``period - 1``
entries are NaN because there is not enough history, and entry ``i`` from
``period - 1`` onward is the statistic of the inclusive window
``series[i - period + 1 .. i]``. A NaN anywhere in a window makes that
window's value NaN.

Indicators implemented:
    - Trend: SMA
    - Volatility: population standard deviation, Bollinger Bands
    - Market Structure: rolling max, rolling min
"""

from numbers import Integral
from typing import Tuple

import pandas as pd

from quantback.indicators.exceptions import InvalidPeriodError


def validate_period(series: pd.Series, period: int) -> None:
    """
    Check that a lookback period fits the series.

    Args:
        series: Input series.
        period: Lookback period.

    Raises:
        InvalidPeriodError: If period is not an integer in [1, len(series)].
    """
    length = len(series)

    if isinstance(period, bool) or not isinstance(period, Integral):
        raise InvalidPeriodError(period, length, "period must be an integer")

    if period <= 0:
        raise InvalidPeriodError(period, length, "period must be positive")

    if period > length:
        raise InvalidPeriodError(
            period, length, "period exceeds the number of observations"
        )


# =============================================================================
# Moving Average
# =============================================================================


def calculate_sma(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate Simple Moving Average.

    Args:
        series: Price series.
        period: Lookback period.

    Returns:
        SMA series with NaN for insufficient lookback.

    Raises:
        InvalidPeriodError: If period does not fit the series.
    """
    validate_period(series, period)
    return series.astype(float).rolling(window=period, min_periods=period).mean()


# =============================================================================
# Standard Deviation
# =============================================================================


def calculate_std(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate rolling population standard deviation.

    The divisor is ``period`` (ddof=0), and each window is measured
    against its own mean rather than a global one.

    pandas updates the window sums incrementally, so a value much larger
    than the rest leaves a rounding residue after it exits the window
    (about 5e-7 after a 1e9 spike on prices near 100).

    Args:
        series: Price series.
        period: Lookback period.

    Returns:
        Standard deviation series with NaN for insufficient lookback.

    Raises:
        InvalidPeriodError: If period does not fit the series.
    """
    validate_period(series, period)
    return (
        series.astype(float)
        .rolling(window=period, min_periods=period)
        .std(ddof=0)
    )


# =============================================================================
# Rolling Extrema
# =============================================================================


def calculate_rolling_max(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate the highest value over a trailing window.

    Args:
        series: Price series (typically High).
        period: Lookback period.

    Returns:
        Rolling maximum series with NaN for insufficient lookback.

    Raises:
        InvalidPeriodError: If period does not fit the series.
    """
    validate_period(series, period)
    return series.astype(float).rolling(window=period, min_periods=period).max()


def calculate_rolling_min(series: pd.Series, period: int) -> pd.Series:
    """
    Calculate the lowest value over a trailing window.

    Args:
        series: Price series (typically Low).
        period: Lookback period.

    Returns:
        Rolling minimum series with NaN for insufficient lookback.

    Raises:
        InvalidPeriodError: If period does not fit the series.
    """
    validate_period(series, period)
    return series.astype(float).rolling(window=period, min_periods=period).min()


# =============================================================================
# Bollinger Bands
# =============================================================================


def calculate_bollinger_bands(
    close: pd.Series, period: int = 20, num_std: float = 2.0
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """
    Calculate Bollinger Bands from the population standard deviation.

    Args:
        close: Close price series.
        period: SMA period (default 20).
        num_std: Standard deviation multiplier (default 2).

    Returns:
        Tuple of (middle_band, upper_band, lower_band).
    """
    middle = calculate_sma(close, period)
    rolling_std = calculate_std(close, period)

    upper = middle + (rolling_std * num_std)
    lower = middle - (rolling_std * num_std)

    return middle, upper, lower
