"""
Report generation module for backtesting.

This module formats metrics for display and writes the downloadable
artifacts of a run:
- Metrics report: two-column Metric/Value CSV of formatted values
- Equity curve: Date/Equity CSV
- Trade log: one row per completed trade
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from quantback.engine.metrics import PerformanceMetrics
from quantback.engine.portfolio import EquityPoint, Trade, trades_frame

METRIC_LABELS = ["Total Return", "Sharpe Ratio", "Max Drawdown", "Win Rate"]


def format_metrics(metrics: PerformanceMetrics) -> Dict[str, str]:
    """
    Format metrics the way they are presented to users.

    Total return carries an explicit "+" when positive.

    Args:
        metrics: Run metrics.

    Returns:
        Dict mapping metric label to formatted value.
    """
    total_return = metrics.total_return_pct
    sign = "+" if total_return > 0 else ""

    return {
        "Total Return": f"{sign}{total_return:.2f}%",
        "Sharpe Ratio": f"{metrics.sharpe_ratio:.2f}",
        "Max Drawdown": f"{metrics.max_drawdown_pct:.2f}%",
        "Win Rate": f"{metrics.win_rate_pct:.1f}%",
    }


def metrics_report_frame(metrics: PerformanceMetrics) -> pd.DataFrame:
    """Build the Metric/Value report table."""
    formatted = format_metrics(metrics)
    return pd.DataFrame({
        "Metric": METRIC_LABELS,
        "Value": [formatted[label] for label in METRIC_LABELS],
    })


def equity_curve_frame(points: Sequence[EquityPoint]) -> pd.DataFrame:
    """Convert equity points to a Date/Equity DataFrame."""
    return pd.DataFrame({
        "Date": [p.date for p in points],
        "Equity": [p.equity for p in points],
    })


def report_filename(strategy: str, timestamp: Optional[datetime] = None) -> str:
    """
    Build the default metrics report file name.

    Args:
        strategy: Strategy identifier.
        timestamp: Report time (default: now).

    Returns:
        File name like "backtest-results-momentum-2024-01-05T10:00:00.csv".
    """
    timestamp = timestamp or datetime.now()
    return f"backtest-results-{strategy}-{timestamp.isoformat(timespec='seconds')}.csv"


def _save_frame(df: pd.DataFrame, output_file: str) -> Path:
    output_path = Path(output_file)

    # Ensure parent directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df.to_csv(output_path, index=False)
    return output_path


def save_metrics_report(metrics: PerformanceMetrics, output_file: str) -> Path:
    """Write the Metric/Value report as CSV."""
    return _save_frame(metrics_report_frame(metrics), output_file)


def save_equity_curve(points: Sequence[EquityPoint], output_file: str) -> Path:
    """Write the equity curve as CSV."""
    return _save_frame(equity_curve_frame(points), output_file)


def save_trades(trades: Sequence[Trade], output_file: str) -> Optional[Path]:
    """Write the trade log as CSV; nothing is written without trades."""
    df = trades_frame(trades)
    if df.empty:
        return None
    return _save_frame(df, output_file)


def format_summary(
    strategy_label: str,
    num_bars: int,
    date_range: Sequence[str],
    metrics: PerformanceMetrics,
    trades: List[Trade],
    open_position: bool,
) -> str:
    """
    Render a human-readable run summary.

    Args:
        strategy_label: Display name of the strategy.
        num_bars: Number of bars simulated.
        date_range: (first label, last label).
        metrics: Run metrics.
        trades: Completed trades.
        open_position: Whether a position was still open at the last bar.

    Returns:
        Multi-line summary string.
    """
    formatted = format_metrics(metrics)

    lines = [
        "=" * 60,
        "BACKTEST RESULTS",
        "=" * 60,
        "",
        f"Strategy: {strategy_label}",
        f"Date Range: {date_range[0]} to {date_range[1]}",
        f"Bars: {num_bars}",
        "",
        "-" * 60,
        "PERFORMANCE",
        "-" * 60,
        "",
    ]

    for label in METRIC_LABELS:
        lines.append(f"{label:20} {formatted[label]:>12}")

    lines.extend([
        "",
        "-" * 60,
        "TRADING SUMMARY",
        "-" * 60,
        "",
        f"Completed Trades: {len(trades)}",
        f"  - Wins: {sum(1 for t in trades if t.is_win)}",
        f"Open Position at End: {'yes' if open_position else 'no'}",
        "",
        "=" * 60,
    ])

    return "\n".join(lines)
