"""
Rolling Indicator Module.

Stateless rolling-window indicators over price series.

Modules:
    - calculations: SMA, standard deviation, rolling extrema, Bollinger Bands
    - exceptions: Indicator errors
"""

from quantback.indicators.calculations import (
    calculate_bollinger_bands,
    calculate_rolling_max,
    calculate_rolling_min,
    calculate_sma,
    calculate_std,
)
from quantback.indicators.exceptions import IndicatorError, InvalidPeriodError

__all__ = [
    "calculate_sma",
    "calculate_std",
    "calculate_rolling_max",
    "calculate_rolling_min",
    "calculate_bollinger_bands",
    "IndicatorError",
    "InvalidPeriodError",
]
