"""
Performance metrics for a simulated run.

All functions are pure; NaN equity values (from unparseable prices)
propagate into the total return but are skipped by the drawdown scan,
and a NaN Sharpe ratio is reported as 0.
"""

import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from quantback.engine.constants import TRADING_DAYS_PER_YEAR
from quantback.engine.portfolio import SimulationResult


@dataclass(frozen=True)
class PerformanceMetrics:
    """Summary statistics of a backtest run (all values in percent except Sharpe)."""

    total_return_pct: float
    sharpe_ratio: float
    max_drawdown_pct: float
    win_rate_pct: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to the response record keys."""
        return {
            "totalReturn": self.total_return_pct,
            "sharpeRatio": self.sharpe_ratio,
            "maxDrawdown": self.max_drawdown_pct,
            "winRate": self.win_rate_pct,
        }


def calculate_total_return_pct(final_equity: float, initial_capital: float) -> float:
    """Percentage change from initial capital to final equity."""
    return (final_equity - initial_capital) / initial_capital * 100


def calculate_sharpe_ratio(
    returns: Sequence[float],
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> float:
    """
    Calculate the annualized Sharpe ratio of per-bar returns.

    Uses the population standard deviation and no risk-free rate:
    mean / std * sqrt(periods_per_year). Flat bars contribute their zero
    returns to both mean and deviation.

    Args:
        returns: Realized per-bar returns.
        periods_per_year: Annualization factor (default 252).

    Returns:
        Sharpe ratio, or 0.0 if there are no returns, the deviation is
        zero, or the result is NaN.
    """
    values = np.asarray(returns, dtype=float)
    if values.size == 0:
        return 0.0

    with np.errstate(invalid="ignore", over="ignore"):
        mean = values.mean()
        std = np.sqrt(((values - mean) ** 2).mean())

        if std == 0:
            return 0.0

        sharpe = float(mean / std * math.sqrt(periods_per_year))
    if math.isnan(sharpe):
        return 0.0
    return sharpe


def calculate_max_drawdown_pct(equity_curve: Sequence[float]) -> float:
    """
    Calculate the largest peak-to-trough decline of an equity curve.

    Args:
        equity_curve: Equity values in time order.

    Returns:
        Maximum drawdown in percent (positive number, 0 if never below peak).
    """
    peak = None
    max_drawdown = 0.0

    for value in equity_curve:
        if peak is None or value > peak:
            peak = value
        drawdown = (peak - value) / peak * 100 if peak else float("nan")
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    return max_drawdown


def calculate_win_rate_pct(wins: int, total_trades: int) -> float:
    """Percentage of completed trades that were wins (0 with no trades)."""
    if total_trades <= 0:
        return 0.0
    return wins / total_trades * 100


def calculate_metrics(
    simulation: SimulationResult,
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR,
) -> PerformanceMetrics:
    """
    Derive summary statistics from a simulation.

    Args:
        simulation: Result of simulate_portfolio.
        trading_days_per_year: Sharpe annualization factor.

    Returns:
        PerformanceMetrics for the run.
    """
    return PerformanceMetrics(
        total_return_pct=calculate_total_return_pct(
            simulation.final_equity, simulation.initial_capital
        ),
        sharpe_ratio=calculate_sharpe_ratio(
            simulation.returns, trading_days_per_year
        ),
        max_drawdown_pct=calculate_max_drawdown_pct(simulation.equity_curve),
        win_rate_pct=calculate_win_rate_pct(
            simulation.wins, simulation.total_trades
        ),
    )
