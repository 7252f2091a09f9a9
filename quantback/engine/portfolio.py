"""
Portfolio simulation module for backtesting.

This module simulates a single long-only, unit-sized position driven by
per-bar signals, compounding equity by the daily close-to-close return
while long, and logging completed trades.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from quantback.engine.constants import INITIAL_CAPITAL, Position, Signal, WinRule


@dataclass
class Trade:
    """Represents a completed round trip (entry and exit)."""

    entry_index: int
    exit_index: int
    entry_date: str
    exit_date: str
    entry_price: float
    exit_price: float
    entry_equity: float  # equity before the entry bar's return accrued
    exit_equity: float
    is_win: bool

    @property
    def return_pct(self) -> float:
        """Equity return over the trade, in percent."""
        if self.entry_equity == 0:
            return float("nan")
        return (self.exit_equity / self.entry_equity - 1.0) * 100

    @property
    def bars_held(self) -> int:
        """Number of bars whose return accrued to the trade."""
        return self.exit_index - self.entry_index

    def to_dict(self) -> Dict:
        """Convert trade to dictionary."""
        return {
            "entry_index": self.entry_index,
            "exit_index": self.exit_index,
            "entry_date": self.entry_date,
            "exit_date": self.exit_date,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "entry_equity": self.entry_equity,
            "exit_equity": self.exit_equity,
            "return_pct": self.return_pct,
            "bars_held": self.bars_held,
            "is_win": self.is_win,
        }


@dataclass(frozen=True)
class EquityPoint:
    """One equity curve value paired with its bar label."""

    date: str
    equity: float

    def to_dict(self) -> Dict:
        """Convert point to dictionary."""
        return {"date": self.date, "equity": self.equity}


@dataclass
class SimulationResult:
    """Results from portfolio simulation."""

    # Daily tracking (equity_curve and positions have one entry per bar,
    # returns one entry per bar after the first)
    dates: List[str] = field(default_factory=list)
    equity_curve: List[float] = field(default_factory=list)
    returns: List[float] = field(default_factory=list)
    positions: List[int] = field(default_factory=list)
    signals: List[int] = field(default_factory=list)

    # Trade log
    trades: List[Trade] = field(default_factory=list)

    # Summary
    initial_capital: float = INITIAL_CAPITAL
    final_equity: float = INITIAL_CAPITAL
    total_trades: int = 0
    wins: int = 0
    open_position: bool = False

    def equity_points(self) -> List[EquityPoint]:
        """Pair each equity value with its bar label."""
        return [
            EquityPoint(date=d, equity=e)
            for d, e in zip(self.dates, self.equity_curve)
        ]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert daily tracking to DataFrame."""
        return pd.DataFrame({
            "Date": self.dates,
            "Equity": self.equity_curve,
            "Return": [0.0] + list(self.returns),
            "Position": self.positions,
            "Signal": self.signals,
        })

    def trades_to_dataframe(self) -> pd.DataFrame:
        """Convert trade log to DataFrame."""
        return trades_frame(self.trades)


def trades_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    """Convert completed trades to a DataFrame (empty without trades)."""
    if not trades:
        return pd.DataFrame()
    return pd.DataFrame([t.to_dict() for t in trades])


def simulate_portfolio(
    close: pd.Series,
    signals: pd.Series,
    initial_capital: float = INITIAL_CAPITAL,
    dates: Optional[Sequence[str]] = None,
    win_rule: str = WinRule.TRADE,
) -> SimulationResult:
    """
    Simulate a long-only account driven by trading signals.

    For each bar after the first:
    - BUY while flat opens the position, SELL while long closes it
      (counting one trade); any other signal leaves the position as is.
    - If long after that check, equity compounds by the bar's
      close-to-close return, which is also the recorded realized return.
      If flat, equity is unchanged and the realized return is 0.

    The entry bar's own return accrues to the position.

    Args:
        close: Close price series.
        signals: Series of +1/-1/0 signals aligned with close.
        initial_capital: Starting equity.
        dates: Optional bar labels (defaults to "Day i").
        win_rule: "trade" counts a win when exit equity beats the equity
            before entry; "exit_bar" counts a win when equity at the exit
            check beats the previous curve value.

    Returns:
        SimulationResult with the equity curve, returns and trade log.

    Raises:
        ValueError: If inputs are empty or lengths don't match.
    """
    if len(close) == 0:
        raise ValueError("Cannot simulate portfolio on empty price series")

    if len(signals) != len(close):
        raise ValueError(
            f"Signals length ({len(signals)}) does not match data length ({len(close)})"
        )

    if dates is None:
        dates = [f"Day {i}" for i in range(len(close))]
    elif len(dates) != len(close):
        raise ValueError(
            f"Dates length ({len(dates)}) does not match data length ({len(close)})"
        )

    prices = close.to_numpy(dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        daily_returns = np.diff(prices) / prices[:-1]

    signals_list = [int(s) for s in signals.tolist()]
    labels = list(dates)

    equity = float(initial_capital)
    position = Position.FLAT

    result = SimulationResult(
        dates=labels,
        equity_curve=[equity],
        positions=[position],
        signals=signals_list,
        initial_capital=float(initial_capital),
    )

    entry_index = 0
    entry_equity = equity

    for i in range(1, len(prices)):
        daily_return = float(daily_returns[i - 1])
        signal = signals_list[i]

        if signal == Signal.BUY and position == Position.FLAT:
            position = Position.LONG
            entry_index = i
            entry_equity = equity

        elif signal == Signal.SELL and position == Position.LONG:
            position = Position.FLAT
            result.total_trades += 1

            if win_rule == WinRule.EXIT_BAR:
                is_win = equity > result.equity_curve[-1]
            else:
                is_win = equity > entry_equity

            if is_win:
                result.wins += 1

            result.trades.append(
                Trade(
                    entry_index=entry_index,
                    exit_index=i,
                    entry_date=labels[entry_index],
                    exit_date=labels[i],
                    entry_price=float(prices[entry_index]),
                    exit_price=float(prices[i]),
                    entry_equity=entry_equity,
                    exit_equity=equity,
                    is_win=is_win,
                )
            )

        if position == Position.LONG:
            equity *= 1 + daily_return
            result.returns.append(daily_return)
        else:
            result.returns.append(0.0)

        result.equity_curve.append(equity)
        result.positions.append(position)

    result.final_equity = equity
    result.open_position = position == Position.LONG

    return result

