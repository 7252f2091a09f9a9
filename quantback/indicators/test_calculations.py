"""
Tests for the calculations module.

Tests verify:
- NaN warm-up for insufficient lookback
- Window statistics against the closed form
- Constant windows (exact mean, zero deviation)
- NaN propagation and period guards
"""

import numpy as np
import pandas as pd
import pytest

from quantback.indicators.calculations import (
    calculate_bollinger_bands,
    calculate_rolling_max,
    calculate_rolling_min,
    calculate_sma,
    calculate_std,
    validate_period,
)
from quantback.indicators.exceptions import IndicatorError, InvalidPeriodError

ROLLING_FUNCTIONS = [
    calculate_sma,
    calculate_std,
    calculate_rolling_max,
    calculate_rolling_min,
]


class TestValidatePeriod:
    """Tests for validate_period function."""

    def test_valid_period(self):
        validate_period(pd.Series([1.0, 2.0, 3.0]), 3)

    @pytest.mark.parametrize("period", [0, -1, -20])
    def test_non_positive_period(self, period):
        with pytest.raises(InvalidPeriodError) as exc_info:
            validate_period(pd.Series([1.0, 2.0, 3.0]), period)
        assert exc_info.value.period == period
        assert "positive" in str(exc_info.value)

    def test_period_longer_than_series(self):
        with pytest.raises(InvalidPeriodError) as exc_info:
            validate_period(pd.Series([1.0, 2.0]), 5)
        assert exc_info.value.length == 2

    @pytest.mark.parametrize("period", [2.0, "3", True, None])
    def test_non_integer_period(self, period):
        with pytest.raises(InvalidPeriodError):
            validate_period(pd.Series([1.0, 2.0, 3.0]), period)

    def test_empty_series(self):
        with pytest.raises(InvalidPeriodError):
            validate_period(pd.Series([], dtype=float), 1)

    def test_is_indicator_error(self):
        with pytest.raises(IndicatorError):
            validate_period(pd.Series([1.0]), 0)


class TestCalculateSMA:
    """Tests for calculate_sma function."""

    def test_sma_basic(self):
        """Test basic SMA calculation."""
        series = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        result = calculate_sma(series, 3)
        assert pd.isna(result.iloc[0])
        assert pd.isna(result.iloc[1])
        assert result.iloc[2] == pytest.approx(2.0)  # (1+2+3)/3
        assert result.iloc[3] == pytest.approx(3.0)  # (2+3+4)/3
        assert result.iloc[4] == pytest.approx(4.0)  # (3+4+5)/3

    def test_sma_exact_period(self):
        """Test SMA when data length equals period."""
        series = pd.Series([1.0, 2.0, 3.0])
        result = calculate_sma(series, 3)
        assert result.isna().sum() == 2
        assert result.iloc[2] == pytest.approx(2.0)

    def test_sma_period_1(self):
        """Test SMA with period 1 returns original series."""
        series = pd.Series([1.0, 2.0, 3.0])
        result = calculate_sma(series, 1)
        assert (result == series).all()

    def test_sma_nan_handling(self):
        """Test SMA handles NaN values correctly."""
        series = pd.Series([1.0, np.nan, 3.0, 4.0, 5.0])
        result = calculate_sma(series, 3)
        # NaN in window should make result NaN
        assert pd.isna(result.iloc[2])
        assert pd.isna(result.iloc[3])
        assert result.iloc[4] == pytest.approx(4.0)

    def test_sma_does_not_modify_input(self):
        series = pd.Series([1.0, 2.0, 3.0])
        calculate_sma(series, 2)
        assert series.tolist() == [1.0, 2.0, 3.0]

    def test_sma_accepts_integer_series(self):
        result = calculate_sma(pd.Series([1, 2, 3, 4]), 2)
        assert result.iloc[3] == pytest.approx(3.5)


class TestCalculateStd:
    """Tests for calculate_std function."""

    def test_std_is_population(self):
        """Divisor is the period, not period - 1."""
        series = pd.Series([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])
        result = calculate_std(series, 8)
        assert result.iloc[7] == pytest.approx(2.0)

    def test_std_uses_window_mean(self):
        series = pd.Series([1.0, 3.0, 10.0, 12.0])
        result = calculate_std(series, 2)
        assert pd.isna(result.iloc[0])
        assert result.iloc[1] == pytest.approx(1.0)
        assert result.iloc[2] == pytest.approx(3.5)
        assert result.iloc[3] == pytest.approx(1.0)

    def test_std_nan_handling(self):
        series = pd.Series([1.0, 2.0, np.nan, 4.0])
        result = calculate_std(series, 2)
        assert result.iloc[1] == pytest.approx(0.5)
        assert pd.isna(result.iloc[2])
        assert pd.isna(result.iloc[3])


class TestRollingExtrema:
    """Tests for calculate_rolling_max and calculate_rolling_min."""

    def test_rolling_max(self):
        series = pd.Series([3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0])
        result = calculate_rolling_max(series, 3)
        assert result.isna().sum() == 2
        assert result.iloc[2:].tolist() == [4.0, 4.0, 5.0, 9.0, 9.0]

    def test_rolling_min(self):
        series = pd.Series([3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0])
        result = calculate_rolling_min(series, 3)
        assert result.isna().sum() == 2
        assert result.iloc[2:].tolist() == [1.0, 1.0, 1.0, 1.0, 2.0]

    def test_extrema_nan_propagation(self):
        series = pd.Series([1.0, np.nan, 3.0, 4.0])
        assert pd.isna(calculate_rolling_max(series, 2).iloc[1])
        assert pd.isna(calculate_rolling_min(series, 2).iloc[2])
        assert calculate_rolling_max(series, 2).iloc[3] == 4.0


class TestRollingProperties:
    """Properties shared by every rolling indicator."""

    @pytest.mark.parametrize("func", ROLLING_FUNCTIONS)
    @pytest.mark.parametrize("period", [1, 5, 20, 100])
    def test_warm_up_is_nan(self, sample_close, func, period):
        result = func(sample_close, period)
        assert len(result) == len(sample_close)
        assert result.iloc[: period - 1].isna().all()
        assert result.iloc[period - 1 :].notna().all()

    @pytest.mark.parametrize("period", [3, 10, 20])
    def test_matches_closed_form(self, sample_close, period):
        # pandas rolls the window sums online, so values that have left the
        # window leave a rounding residue proportional to their magnitude.
        # sample_close stays near 100, which keeps that residue far below abs=1e-9.
        sma = calculate_sma(sample_close, period)
        std = calculate_std(sample_close, period)
        high = calculate_rolling_max(sample_close, period)
        low = calculate_rolling_min(sample_close, period)

        values = sample_close.to_numpy()
        for i in range(period - 1, len(values)):
            window = values[i - period + 1 : i + 1]
            mean = window.sum() / period
            assert sma.iloc[i] == pytest.approx(mean)
            assert std.iloc[i] == pytest.approx(
                np.sqrt(((window - mean) ** 2).sum() / period), abs=1e-9
            )
            assert high.iloc[i] == window.max()
            assert low.iloc[i] == window.min()

    @pytest.mark.parametrize("value", [5.0, 100.0, 0.0, -3.0])
    def test_constant_window(self, value):
        series = pd.Series([value] * 25)
        assert (calculate_sma(series, 10).iloc[9:] == value).all()
        assert (calculate_std(series, 10).iloc[9:] == 0.0).all()

    def test_constant_window_after_movement(self):
        series = pd.Series([1.0, 7.0, 3.0] + [5.0] * 10)
        assert calculate_sma(series, 5).iloc[-1] == 5.0
        assert calculate_std(series, 5).iloc[-1] == 0.0

    @pytest.mark.parametrize("func", ROLLING_FUNCTIONS)
    def test_period_guard(self, func):
        with pytest.raises(InvalidPeriodError):
            func(pd.Series([1.0, 2.0]), 0)
        with pytest.raises(InvalidPeriodError):
            func(pd.Series([1.0, 2.0]), 3)

    @pytest.mark.parametrize("func", ROLLING_FUNCTIONS)
    def test_preserves_index(self, func):
        series = pd.Series([1.0, 2.0, 3.0], index=[10, 20, 30])
        assert func(series, 2).index.tolist() == [10, 20, 30]


class TestCalculateBollingerBands:
    """Tests for calculate_bollinger_bands function."""

    def test_bands_order(self, sample_close):
        middle, upper, lower = calculate_bollinger_bands(sample_close)
        valid = middle.notna()
        assert (upper[valid] >= middle[valid]).all()
        assert (lower[valid] <= middle[valid]).all()

    def test_band_width(self, sample_close):
        middle, upper, lower = calculate_bollinger_bands(sample_close, 20, 2.0)
        std = calculate_std(sample_close, 20)
        assert np.allclose(
            (upper - lower).dropna().values, (4.0 * std).dropna().values
        )

    def test_constant_series_collapses(self):
        middle, upper, lower = calculate_bollinger_bands(pd.Series([50.0] * 20))
        assert upper.iloc[-1] == 50.0
        assert lower.iloc[-1] == 50.0
        assert pd.isna(middle.iloc[18])
