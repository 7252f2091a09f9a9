"""
Pytest fixtures for backtest engine tests.
"""

import tempfile
from pathlib import Path
from typing import Dict, List

import numpy as np
import pandas as pd
import pytest


def _make_bars(closes, highs=None, lows=None, dates=None) -> List[Dict]:
    """Build bar records from close prices (high/low default to close +/- 1)."""
    highs = highs if highs is not None else [c + 1 for c in closes]
    lows = lows if lows is not None else [c - 1 for c in closes]
    dates = dates if dates is not None else [f"2024-01-{i + 1:02d}" for i in range(len(closes))]
    return [
        {"date": d, "open": c, "high": h, "low": l, "close": c}
        for d, c, h, l in zip(dates, closes, highs, lows)
    ]


@pytest.fixture
def make_bars():
    """Factory for bar records built from close prices."""
    return _make_bars


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_ohlc_data() -> pd.DataFrame:
    """Create sample OHLC data for testing."""
    np.random.seed(42)
    n_days = 120

    dates = pd.date_range(start="2023-01-02", periods=n_days, freq="B")
    close = 100 + np.cumsum(np.random.randn(n_days) * 2)

    return pd.DataFrame({
        "Date": dates.strftime("%Y-%m-%d"),
        "Open": close - np.random.rand(n_days),
        "High": close + np.random.rand(n_days) * 2,
        "Low": close - np.random.rand(n_days) * 2,
        "Close": close,
    })


@pytest.fixture
def sample_bars(sample_ohlc_data) -> List[Dict]:
    """Sample data as request-style records with lowercase keys."""
    df = sample_ohlc_data.rename(columns=str.lower)
    return df.to_dict("records")


@pytest.fixture
def regression_closes() -> List[float]:
    """Eleven-bar close series used as a pinned momentum fixture."""
    return [100, 102, 104, 103, 105, 107, 109, 108, 110, 112, 115]


@pytest.fixture
def oscillating_closes() -> List[float]:
    """Flat warm-up followed by alternating moves around the average."""
    return [100.0] * 10 + [110.0, 90.0, 110.0, 90.0]


@pytest.fixture
def sample_csv_file(temp_dir, sample_ohlc_data) -> Path:
    """Create a valid OHLC CSV file."""
    file_path = temp_dir / "prices.csv"
    sample_ohlc_data.to_csv(file_path, index=False)
    return file_path


@pytest.fixture
def empty_file(temp_dir) -> Path:
    """Create an empty file."""
    file_path = temp_dir / "empty.csv"
    file_path.touch()
    return file_path


@pytest.fixture
def headers_only_file(temp_dir) -> Path:
    """Create a CSV file with headers only."""
    file_path = temp_dir / "headers_only.csv"
    file_path.write_text("Date,Open,High,Low,Close\n")
    return file_path


@pytest.fixture
def missing_column_file(temp_dir) -> Path:
    """Create a CSV file missing the Close column."""
    file_path = temp_dir / "missing_column.csv"
    file_path.write_text(
        "Date,Open,High,Low\n"
        "2024-01-02,100,101,99\n"
    )
    return file_path


@pytest.fixture
def messy_csv_file(temp_dir) -> Path:
    """CSV with padded headers, a blank line, a bad price and a missing date."""
    file_path = temp_dir / "messy.csv"
    file_path.write_text(
        " Date , OPEN , High , Low , Close , Volume \n"
        "2024-01-02, 100, 101, 99, 100.5, 1000\n"
        "\n"
        "2024-01-03, 101, 102, 100, abc, 1100\n"
        ", 102, 103, 101, 102.5, 1200\n"
    )
    return file_path


@pytest.fixture
def config_file(temp_dir) -> Path:
    """Create a YAML config file with a nested backtest section."""
    file_path = temp_dir / "backtest.yaml"
    file_path.write_text(
        "backtest:\n"
        "  initial_capital: 5000\n"
        "  momentum_period: 5\n"
        "  win_rule: exit_bar\n"
    )
    return file_path
