"""
QuantBack Package.

A backtester for simple single-asset trading strategies on historical
daily OHLC data.

Modules:
    - indicators: Rolling-window indicator calculations
    - engine: Strategy signals, portfolio simulation and metrics

Main APIs:
    - run_backtest: Run a strategy over bar data and get metrics plus equity curve
"""

from quantback.engine import run_backtest

__all__ = ["run_backtest"]
__version__ = "1.0.0"
