"""
Data I/O helpers for factor panels.

Loads local CSV panels with minimal validation and type coercion. Nothing
here fetches data from remote sources.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from .panel import DATE, KEY_COLUMNS, SYMBOL, require_columns

logger = logging.getLogger(__name__)


def load_panel(path: Union[str, Path], required: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Load a long (symbol, date, ...) panel from CSV with validation and cleaning.

    Args:
        path: Path to CSV file
        required: Extra columns that must be present

    Returns:
        DataFrame sorted by (symbol, date) with date as datetime64, symbol
        as str and infinite measurements replaced by NaN

    Raises:
        MissingColumnError: If symbol, date or a required column is missing
    """
    df = pd.read_csv(path)

    required_cols = list(KEY_COLUMNS) + [c for c in (required or []) if c not in KEY_COLUMNS]
    require_columns(df, required_cols)

    # Drop rows with a null key before coercing, so "nan" never becomes a symbol
    df = df.dropna(subset=list(KEY_COLUMNS)).copy()
    df[DATE] = pd.to_datetime(df[DATE]).dt.normalize()
    df[SYMBOL] = df[SYMBOL].astype(str)

    numeric_cols = df.select_dtypes(include=[np.number]).columns
    df[numeric_cols] = df[numeric_cols].replace([np.inf, -np.inf], np.nan)

    # Drop duplicates and sort
    df = df.drop_duplicates(subset=list(KEY_COLUMNS), keep="last")
    df = df.sort_values([SYMBOL, DATE]).reset_index(drop=True)

    logger.info("Loaded %d rows for %d symbols from %s", len(df), df[SYMBOL].nunique(), path)
    return df


def unique_dates(panel: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Get unique dates from a panel.

    Returns:
        Sorted DatetimeIndex of unique dates
    """
    return pd.DatetimeIndex(sorted(pd.to_datetime(panel[DATE]).dropna().unique()))
