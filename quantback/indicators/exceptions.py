"""
Custom exceptions for the indicator module.

This module defines all custom exceptions raised by indicator calculations.
"""


class IndicatorError(Exception):
    """Base exception for all indicator-related errors."""

    pass


class InvalidPeriodError(IndicatorError):
    """Exception raised when a lookback period does not fit the series."""

    def __init__(self, period: object, length: int, reason: str = "") -> None:
        self.period = period
        self.length = length
        message = f"Invalid period {period!r} for series of length {length}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
