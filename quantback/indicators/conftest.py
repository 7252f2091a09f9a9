"""
Pytest configuration and fixtures for indicator tests.
"""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def sample_close() -> pd.Series:
    """Create a seeded random-walk close series (100 bars)."""
    np.random.seed(42)
    return pd.Series(100 + np.cumsum(np.random.randn(100) * 0.5))
