"""
Bar Data Module.

This module turns raw OHLC records (from a CSV file or a request body)
into aligned price series. Prices may arrive as numbers or numeric
strings; values that cannot be parsed (or are infinite) become NaN and
propagate through the indicator math instead of aborting the run.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from quantback.engine.constants import DATE_FIELD, PRICE_FIELDS
from quantback.engine.exceptions import (
    FileNotFoundError,
    InvalidInputError,
    MissingColumnError,
)

logger = logging.getLogger(__name__)

BAR_COLUMNS = [DATE_FIELD] + PRICE_FIELDS


def _normalize_key(key: Any) -> str:
    return str(key).strip().lower()


def _check_unique(names: List[str], original: List[Any]) -> None:
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        clashing = [repr(o) for o, n in zip(original, names) if n in duplicates]
        raise InvalidInputError(
            f"duplicate columns after normalization: {', '.join(clashing)}"
        )


def _normalize_record(row: Mapping) -> Dict[str, Any]:
    keys = list(row.keys())
    normalized = [_normalize_key(k) for k in keys]
    _check_unique(normalized, keys)
    return {n: row[k] for n, k in zip(normalized, keys)}


def _to_price(values: pd.Series) -> pd.Series:
    """Convert raw price values to floats, NaN where unparseable or infinite."""
    stripped = values.map(lambda v: v.strip() if isinstance(v, str) else v)
    prices = pd.to_numeric(stripped, errors="coerce").astype(float)
    return prices.replace([np.inf, -np.inf], np.nan)


def clean_column_names(df: pd.DataFrame) -> pd.DataFrame:
    """
    Strip whitespace from column names and lowercase them.

    Args:
        df: Input DataFrame.

    Returns:
        DataFrame with cleaned column names.

    Raises:
        InvalidInputError: If two columns collide once cleaned
            (e.g. "Close" and "close").
    """
    original = list(df.columns)
    names = [_normalize_key(c) for c in original]
    _check_unique(names, original)

    df = df.copy()
    df.columns = names
    return df


def validate_bar_data(data: Any) -> None:
    """
    Validate the shape of raw bar data without parsing it.

    Args:
        data: Raw bar data.

    Raises:
        InvalidInputError: If data is missing, not a sequence, or empty.
    """
    if data is None:
        raise InvalidInputError("no data provided")

    if isinstance(data, pd.DataFrame):
        if data.empty:
            raise InvalidInputError("data is empty (no rows)")
        return

    if isinstance(data, (str, bytes)) or not isinstance(data, Sequence):
        raise InvalidInputError(
            f"expected a sequence of bar records, got {type(data).__name__}"
        )

    if len(data) == 0:
        raise InvalidInputError("data is empty (no rows)")

    for i, row in enumerate(data):
        if not isinstance(row, Mapping):
            raise InvalidInputError(
                f"bar {i} is a {type(row).__name__}, expected a record"
            )


def parse_bars(data: Any) -> pd.DataFrame:
    """
    Parse raw bar records into a DataFrame of aligned series.

    Args:
        data: DataFrame, or sequence of mappings with date/open/high/low/close
            keys (case-insensitive). Missing keys are treated as missing values.

    Returns:
        DataFrame with columns date, open, high, low, close; prices as float.

    Raises:
        InvalidInputError: If data is missing, not a sequence, or empty, or
            if two keys differ only by case or surrounding whitespace.
    """
    validate_bar_data(data)

    if isinstance(data, pd.DataFrame):
        raw = clean_column_names(data).reset_index(drop=True)
    else:
        raw = pd.DataFrame([_normalize_record(row) for row in data])

    bars = pd.DataFrame(index=pd.RangeIndex(len(raw)))
    if DATE_FIELD in raw.columns:
        bars[DATE_FIELD] = raw[DATE_FIELD].astype(object)
    else:
        bars[DATE_FIELD] = None

    for field in PRICE_FIELDS:
        if field in raw.columns:
            bars[field] = _to_price(raw[field])
        else:
            bars[field] = float("nan")

        nan_count = int(bars[field].isna().sum())
        if nan_count:
            logger.warning(
                f"{nan_count} of {len(bars)} '{field}' value(s) are missing or "
                "not finite; NaN will propagate through calculations"
            )

    return bars


def _format_date(value: Any) -> str:
    if isinstance(value, (pd.Timestamp, datetime)):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return value.strftime("%Y-%m-%d")
        return value.isoformat()
    return str(value)


def date_labels(dates: pd.Series) -> List[str]:
    """
    Build presentation labels for each bar.

    Args:
        dates: Raw date values aligned with the bars.

    Returns:
        List of labels; "Day i" where the date is missing or empty.
    """
    labels = []
    for i, value in enumerate(dates):
        if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
            labels.append(f"Day {i}")
            continue

        label = _format_date(value)
        labels.append(label if label else f"Day {i}")
    return labels


def load_csv(file_path: str) -> List[Dict[str, Any]]:
    """
    Load an OHLC CSV file as a list of bar records.

    Values are kept as strings, the same way an uploaded file arrives;
    `parse_bars` does the numeric conversion.

    Args:
        file_path: Path to CSV with Date, Open, High, Low, Close columns.

    Returns:
        List of row dictionaries keyed by lowercase column name.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidInputError: If the file is empty or cannot be parsed.
        MissingColumnError: If a price column is missing.
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(file_path)

    if path.stat().st_size == 0:
        raise InvalidInputError(f"file is empty: {file_path}")

    try:
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise InvalidInputError(f"file is empty: {file_path}")
    except Exception as e:
        raise InvalidInputError(f"failed to parse CSV: {e}")

    df = clean_column_names(df)

    missing = [col for col in PRICE_FIELDS if col not in df.columns]
    if missing:
        raise MissingColumnError(missing)

    if df.empty:
        raise InvalidInputError(f"file has no data rows: {file_path}")

    logger.debug(f"Loaded {len(df)} rows from {file_path}")

    columns = [col for col in BAR_COLUMNS if col in df.columns]
    return df[columns].to_dict("records")
