"""
Backtest configuration loading and validation.

The defaults reproduce the fixed parameters of the three built-in
strategies; a YAML file can override any of them:

    backtest:
      initial_capital: 10000
      momentum_period: 10
      mean_reversion_period: 20
      band_width: 2.0
      breakout_period: 20
      win_rule: trade
"""

from dataclasses import dataclass, fields
from numbers import Integral, Real
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from quantback.engine.constants import (
    DEFAULT_BAND_WIDTH,
    DEFAULT_BREAKOUT_PERIOD,
    DEFAULT_MEAN_REVERSION_PERIOD,
    DEFAULT_MOMENTUM_PERIOD,
    INITIAL_CAPITAL,
    TRADING_DAYS_PER_YEAR,
    VALID_WIN_RULES,
    WinRule,
)
from quantback.engine.exceptions import ConfigError, FileNotFoundError

# Top-level key the settings may be nested under
CONFIG_SECTION = "backtest"

_INTEGER_FIELDS = (
    "trading_days_per_year",
    "momentum_period",
    "mean_reversion_period",
    "breakout_period",
)


@dataclass(frozen=True)
class BacktestConfig:
    """
    Parameters for a backtest run.

    Attributes:
        initial_capital: Starting equity (default: 10000).
        trading_days_per_year: Sharpe annualization factor (default: 252).
        momentum_period: SMA period of the momentum strategy (default: 10).
        mean_reversion_period: Band period of mean reversion (default: 20).
        band_width: Standard deviations between band and mean (default: 2.0).
        breakout_period: Rolling high/low period of breakout (default: 20).
        win_rule: "trade" or "exit_bar" (default: "trade").
    """
    initial_capital: float = INITIAL_CAPITAL
    trading_days_per_year: int = TRADING_DAYS_PER_YEAR
    momentum_period: int = DEFAULT_MOMENTUM_PERIOD
    mean_reversion_period: int = DEFAULT_MEAN_REVERSION_PERIOD
    band_width: float = DEFAULT_BAND_WIDTH
    breakout_period: int = DEFAULT_BREAKOUT_PERIOD
    win_rule: str = WinRule.TRADE

    def __post_init__(self) -> None:
        for name in _INTEGER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise ConfigError(name, f"must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigError(name, f"must be positive, got {value}")

        for name in ("initial_capital", "band_width"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigError(name, f"must be a number, got {value!r}")

        if not self.initial_capital > 0:
            raise ConfigError(
                "initial_capital", f"must be positive, got {self.initial_capital}"
            )
        if self.band_width < 0:
            raise ConfigError(
                "band_width", f"must be non-negative, got {self.band_width}"
            )
        if self.win_rule not in VALID_WIN_RULES:
            raise ConfigError(
                "win_rule",
                f"must be one of {sorted(VALID_WIN_RULES)}, got {self.win_rule!r}",
            )

    @classmethod
    def from_dict(cls, d: Optional[Mapping[str, Any]]) -> "BacktestConfig":
        """
        Create a BacktestConfig from a mapping.

        Args:
            d: Mapping of field names to values. None yields the defaults.

        Returns:
            Validated BacktestConfig.

        Raises:
            ConfigError: If a key is unknown or a value is invalid.
        """
        d = dict(d or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(
                "config", f"unknown keys: {', '.join(str(k) for k in unknown)}"
            )
        return cls(**d)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config(file_path: str) -> BacktestConfig:
    """
    Load a BacktestConfig from a YAML file.

    Args:
        file_path: Path to YAML file.

    Returns:
        Validated BacktestConfig.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the YAML is malformed or holds invalid values.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(file_path)

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(file_path, f"YAML parsing error: {e}")

    if data is None:
        return BacktestConfig()

    if not isinstance(data, dict):
        raise ConfigError(file_path, "root must be a mapping")

    if CONFIG_SECTION in data:
        data = data[CONFIG_SECTION]
        if data is None:
            return BacktestConfig()
        if not isinstance(data, dict):
            raise ConfigError(file_path, f"'{CONFIG_SECTION}' must be a mapping")

    return BacktestConfig.from_dict(data)
