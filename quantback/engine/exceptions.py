"""
Custom exceptions for the backtest engine module.

This module defines all custom exceptions used throughout the backtest engine.
"""

from typing import Iterable, List, Optional


class BacktestError(Exception):
    """Base exception for all backtest-related errors."""

    pass


class InvalidInputError(BacktestError):
    """Exception raised when bar data is missing, not a sequence, or empty."""

    def __init__(self, details: str = "") -> None:
        message = "Invalid data format"
        if details:
            message += f": {details}"
        super().__init__(message)


class MissingColumnError(InvalidInputError):
    """Exception raised when required columns are missing."""

    def __init__(self, missing_columns: List[str]) -> None:
        self.missing_columns = missing_columns
        super().__init__(f"missing required columns: {', '.join(missing_columns)}")


class InsufficientDataError(InvalidInputError):
    """Exception raised when there are fewer bars than a strategy needs."""

    def __init__(self, rows: int, required: int = 1) -> None:
        self.rows = rows
        self.required = required
        super().__init__(
            f"insufficient data: got {rows} rows, need at least {required}"
        )


class UnknownStrategyError(BacktestError):
    """Exception raised when a strategy identifier is not recognized."""

    def __init__(
        self, strategy: object, valid: Optional[Iterable[str]] = None
    ) -> None:
        self.strategy = strategy
        message = f"Invalid strategy: {strategy!r}"
        if valid:
            message += f" (expected one of: {', '.join(valid)})"
        super().__init__(message)


class ConfigError(BacktestError):
    """Exception raised when configuration is invalid."""

    def __init__(self, source: str, details: str = "") -> None:
        self.source = source
        message = f"Invalid configuration: {source}"
        if details:
            message += f": {details}"
        super().__init__(message)


class FileNotFoundError(BacktestError):
    """Exception raised when a required file is not found."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")
