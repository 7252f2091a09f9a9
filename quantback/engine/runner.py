"""
Main runner module for the backtest engine.

This module provides the primary API and CLI for running backtests:
bars -> signals -> simulation -> metrics -> result record.
"""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from quantback.engine.config import BacktestConfig, load_config
from quantback.engine.constants import VALID_WIN_RULES, StrategyName
from quantback.engine.data import date_labels, load_csv, parse_bars, validate_bar_data
from quantback.engine.exceptions import BacktestError, InsufficientDataError
from quantback.engine.metrics import PerformanceMetrics, calculate_metrics
from quantback.engine.portfolio import EquityPoint, SimulationResult, simulate_portfolio
from quantback.engine.reports import (
    format_summary,
    report_filename,
    save_equity_curve,
    save_metrics_report,
    save_trades,
)
from quantback.engine.strategies import get_strategy, list_strategies

logger = logging.getLogger(__name__)


@dataclass
class BacktestResult:
    """Complete results from a backtest run."""

    strategy: str
    metrics: PerformanceMetrics
    equity_curve: List[EquityPoint]
    signals: List[int] = field(default_factory=list)
    simulation: Optional[SimulationResult] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the response record.

        Returns:
            {"metrics": {totalReturn, sharpeRatio, maxDrawdown, winRate},
             "equityCurve": [{"date", "equity"}, ...]}
        """
        return {
            "metrics": self.metrics.to_dict(),
            "equityCurve": [p.to_dict() for p in self.equity_curve],
        }

    def summary(self) -> str:
        """Generate human-readable summary."""
        trades = self.simulation.trades if self.simulation else []
        open_position = self.simulation.open_position if self.simulation else False
        date_range = (self.equity_curve[0].date, self.equity_curve[-1].date)

        return format_summary(
            strategy_label=get_strategy(self.strategy).label,
            num_bars=len(self.equity_curve),
            date_range=date_range,
            metrics=self.metrics,
            trades=trades,
            open_position=open_position,
        )


def run_backtest(
    data: Any,
    strategy: str,
    config: Optional[BacktestConfig] = None,
) -> BacktestResult:
    """
    Run a complete backtest.

    This is the main API function for programmatic usage. Input shape and
    strategy identifier are checked before any computation begins.

    Args:
        data: Sequence of bar records ({date, open, high, low, close}, numbers
            or numeric strings) or a DataFrame with those columns.
        strategy: "momentum", "meanReversion" or "breakout".
        config: Optional BacktestConfig (defaults reproduce the fixed
            strategy parameters and 10,000 starting capital).

    Returns:
        BacktestResult with metrics and the dated equity curve.

    Raises:
        InvalidInputError: If data is missing, not a sequence, or empty.
        UnknownStrategyError: If the strategy identifier is not recognized.
        InsufficientDataError: If there are fewer bars than the strategy's lookback.

    Example:
        >>> result = run_backtest(bars, "momentum")
        >>> result.to_dict()["metrics"]["totalReturn"]
    """
    config = config or BacktestConfig()

    validate_bar_data(data)
    spec = get_strategy(strategy)

    bars = parse_bars(data)
    num_bars = len(bars)

    required = spec.lookback(config)
    if num_bars < required:
        raise InsufficientDataError(num_bars, required)

    logger.info(f"Running {strategy} strategy on {num_bars} data points")

    signals = spec.evaluate(bars, config)
    labels = date_labels(bars["date"])

    simulation = simulate_portfolio(
        close=bars["close"],
        signals=signals,
        initial_capital=config.initial_capital,
        dates=labels,
        win_rule=config.win_rule,
    )
    metrics = calculate_metrics(simulation, config.trading_days_per_year)

    logger.debug(
        f"{simulation.total_trades} completed trade(s), {simulation.wins} win(s), "
        f"final equity {simulation.final_equity:.2f}"
    )
    logger.info("Backtest completed successfully")

    return BacktestResult(
        strategy=strategy,
        metrics=metrics,
        equity_curve=simulation.equity_points(),
        signals=signals.tolist(),
        simulation=simulation,
    )


def run_backtest_safe(
    data: Any,
    strategy: str,
    config: Optional[BacktestConfig] = None,
) -> Dict[str, Any]:
    """
    Run a backtest and return either the result record or an error record.

    A run either returns complete results or a single error message;
    there are no partial results.

    Args:
        data: Bar records or DataFrame.
        strategy: Strategy identifier.
        config: Optional BacktestConfig.

    Returns:
        result.to_dict() on success, {"error": message} on failure.
    """
    try:
        return run_backtest(data, strategy, config).to_dict()
    except BacktestError as e:
        logger.error(f"Error running backtest: {e}")
        return {"error": str(e)}


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_strategy_list() -> str:
    """List available strategies for the CLI."""
    lines = ["Available strategies:"]
    for spec in list_strategies():
        lines.append(f"  {spec.name:15} {spec.label}: {spec.description}")
    return "\n".join(lines)


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser.
    """
    parser = argparse.ArgumentParser(
        prog="quantback",
        description="Backtest a trading strategy on historical OHLC data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m quantback --data SPY.csv --strategy momentum
  python -m quantback -d SPY.csv -s breakout --output result.json
  python -m quantback -d SPY.csv -s meanReversion --equity-curve equity.csv --report metrics.csv
  python -m quantback -d SPY.csv -s momentum --config backtest.yaml -v

CSV Format:
  Date,Open,High,Low,Close
  2024-01-02,100.0,101.5,99.2,101.0
""",
    )

    parser.add_argument(
        "--data",
        "-d",
        type=str,
        default=None,
        help="Path to CSV file with Date, Open, High, Low, Close columns",
    )

    parser.add_argument(
        "--strategy",
        "-s",
        type=str,
        default=StrategyName.MOMENTUM,
        help=f"Strategy identifier (default: {StrategyName.MOMENTUM})",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML config file",
    )

    parser.add_argument(
        "--win-rule",
        type=str,
        choices=sorted(VALID_WIN_RULES),
        default=None,
        help="How closed trades count as wins (overrides config)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Path to save the result record as JSON",
    )

    parser.add_argument(
        "--equity-curve",
        "-e",
        type=str,
        default=None,
        help="Path to save the equity curve CSV",
    )

    parser.add_argument(
        "--report",
        "-r",
        type=str,
        default=None,
        help="Path (or directory) to save the metrics report CSV",
    )

    parser.add_argument(
        "--trades",
        "-t",
        type=str,
        default=None,
        help="Path to save the trade log CSV",
    )

    parser.add_argument(
        "--list-strategies",
        action="store_true",
        help="List available strategies and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable info logging",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.list_strategies:
        print(format_strategy_list())
        return 0

    if not parsed_args.data:
        parser.error("--data is required unless --list-strategies is given")

    try:
        config = (
            load_config(parsed_args.config) if parsed_args.config else BacktestConfig()
        )
        if parsed_args.win_rule:
            config = BacktestConfig.from_dict(
                {**config.to_dict(), "win_rule": parsed_args.win_rule}
            )

        bars = load_csv(parsed_args.data)
        result = run_backtest(bars, parsed_args.strategy, config)

        print(result.summary())

        if parsed_args.output:
            with open(parsed_args.output, "w") as f:
                json.dump(result.to_dict(), f, indent=2)
            print(f"\nResult saved to: {parsed_args.output}")

        if parsed_args.equity_curve:
            save_equity_curve(result.equity_curve, parsed_args.equity_curve)
            print(f"Equity curve saved to: {parsed_args.equity_curve}")

        if parsed_args.report:
            report_path = Path(parsed_args.report)
            if report_path.is_dir():
                report_path = report_path / report_filename(parsed_args.strategy)
            save_metrics_report(result.metrics, report_path)
            print(f"Metrics report saved to: {report_path}")

        if parsed_args.trades:
            if save_trades(result.simulation.trades, parsed_args.trades):
                print(f"Trade log saved to: {parsed_args.trades}")
            else:
                print("No trades to save (no completed trades)")

        return 0

    except BacktestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
