"""
Backtest Engine Module.

Turns an OHLC bar sequence and a strategy identifier into performance
metrics and an equity curve.

Usage (Python API):
    from quantback.engine import run_backtest
    result = run_backtest(bars, "momentum")

    result.metrics.sharpe_ratio
    result.to_dict()  # {"metrics": {...}, "equityCurve": [...]}

Usage (CLI):
    python -m quantback --data SPY.csv --strategy breakout
"""

from quantback.engine.config import BacktestConfig, load_config
from quantback.engine.constants import Signal, StrategyName, WinRule
from quantback.engine.exceptions import (
    BacktestError,
    ConfigError,
    InsufficientDataError,
    InvalidInputError,
    UnknownStrategyError,
)
from quantback.engine.metrics import PerformanceMetrics, calculate_metrics
from quantback.engine.portfolio import (
    EquityPoint,
    SimulationResult,
    Trade,
    simulate_portfolio,
)
from quantback.engine.runner import BacktestResult, run_backtest, run_backtest_safe
from quantback.engine.strategies import (
    STRATEGIES,
    StrategySpec,
    breakout_signals,
    get_strategy,
    list_strategies,
    mean_reversion_signals,
    momentum_signals,
)

__all__ = [
    # Main API functions
    "run_backtest",
    "run_backtest_safe",
    # Result classes
    "BacktestResult",
    "PerformanceMetrics",
    "SimulationResult",
    "EquityPoint",
    "Trade",
    # Building blocks
    "simulate_portfolio",
    "calculate_metrics",
    "momentum_signals",
    "mean_reversion_signals",
    "breakout_signals",
    "STRATEGIES",
    "StrategySpec",
    "get_strategy",
    "list_strategies",
    # Configuration
    "BacktestConfig",
    "load_config",
    # Constants
    "Signal",
    "StrategyName",
    "WinRule",
    # Errors
    "BacktestError",
    "InvalidInputError",
    "InsufficientDataError",
    "UnknownStrategyError",
    "ConfigError",
]
