"""
Panel helpers: the narrow slice of pandas the factors are allowed to use.

A panel is a long DataFrame keyed by (symbol, date) with any number of
measured columns. Factors never reach into pandas directly for the
point-in-time steps; they go through the primitives below so the
filter / sort / lag / rolling / snapshot sequence is applied the same way
everywhere:

    1. as_of()      keep rows with date <= as-of, sort by (symbol, date)
    2. lag()        shift within each symbol's own series
       rolling()    trailing window per symbol with a min_periods gate
    3. snapshot()   keep date == as-of, project, drop missing values

Failures raised by pandas inside these helpers surface as EngineError.
"""

from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import EngineError, FactorError, InvalidDateRangeError, MissingColumnError

SYMBOL = "symbol"
DATE = "date"
KEY_COLUMNS = (SYMBOL, DATE)

ROLLING_AGGREGATIONS = ("mean", "std", "var", "sum", "min", "max", "median", "skew", "quantile")

DateLike = Union[str, date, datetime, np.datetime64, pd.Timestamp]


@contextmanager
def engine_errors(context: str):
    """Re-raise anything pandas throws as EngineError, leaving our own errors alone."""
    try:
        yield
    except FactorError:
        raise
    except Exception as e:
        raise EngineError(f"{context}: {e}") from e


def normalize_date(value: DateLike) -> pd.Timestamp:
    """
    Coerce a date-like value to a timezone-naive, midnight Timestamp.

    Args:
        value: ISO string (YYYY-MM-DD), date, datetime, numpy datetime64 or Timestamp

    Returns:
        Normalized pd.Timestamp

    Raises:
        ValueError: If the value cannot be parsed as a date
    """
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date: {value!r}") from e
    if pd.isna(ts):
        raise ValueError(f"Invalid date: {value!r}")
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def _coerce_dates(dates: pd.Series) -> pd.Series:
    out = pd.to_datetime(dates)
    if getattr(out.dt, "tz", None) is not None:
        out = out.dt.tz_localize(None)
    return out.dt.normalize()


def require_columns(panel: pd.DataFrame, columns: Iterable[str]) -> None:
    """
    Raise MissingColumnError naming every absent column, in declared order.
    """
    missing = [col for col in columns if col not in panel.columns]
    if missing:
        raise MissingColumnError(missing)


def as_of(panel: pd.DataFrame, as_of_date: DateLike,
          columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Point-in-time slice of a panel.

    Args:
        panel: Input panel with at least symbol and date columns
        as_of_date: Last date that may be seen
        columns: Columns to keep (default: all). Must include symbol and date.

    Returns:
        Copy restricted to date <= as_of_date, date coerced to datetime64,
        rows with a null key dropped, sorted by (symbol, date) ascending
        with nulls last and a fresh RangeIndex.

    Raises:
        MissingColumnError: If a requested column is absent
        EngineError: If pandas rejects the data (e.g. unparseable dates)
    """
    keep = list(columns) if columns is not None else list(panel.columns)
    require_columns(panel, list(KEY_COLUMNS) + [c for c in keep if c not in KEY_COLUMNS])
    asof = normalize_date(as_of_date)

    with engine_errors("as_of"):
        frame = panel.loc[:, keep].copy()
        frame = frame.dropna(subset=list(KEY_COLUMNS))
        frame[DATE] = _coerce_dates(frame[DATE])
        frame = frame[frame[DATE] <= asof]
        frame = frame.sort_values([SYMBOL, DATE], na_position="last", kind="mergesort")
        return frame.reset_index(drop=True)


def date_range_slice(panel: pd.DataFrame, start: DateLike, end: DateLike) -> pd.DataFrame:
    """
    Inclusive [start, end] slice of a panel, sorted by (symbol, date).

    Raises:
        InvalidDateRangeError: If start is after end
    """
    start_ts = normalize_date(start)
    end_ts = normalize_date(end)
    if start_ts > end_ts:
        raise InvalidDateRangeError(start_ts.date().isoformat(), end_ts.date().isoformat())

    frame = as_of(panel, end_ts)
    return frame[frame[DATE] >= start_ts].reset_index(drop=True)


def lag(frame: pd.DataFrame, column: str, periods: int = 1) -> pd.Series:
    """
    Value of `column` `periods` rows earlier within the same symbol.

    The frame must already be sorted by (symbol, date), as as_of() leaves it.
    """
    if periods < 0:
        raise ValueError("lag periods must be non-negative (no look-ahead)")
    with engine_errors(f"lag({column}, {periods})"):
        return frame.groupby(SYMBOL, sort=False)[column].shift(periods)


def pct_change(frame: pd.DataFrame, column: str, periods: int = 1) -> pd.Series:
    """Simple return (x_t - x_{t-p}) / x_{t-p} within each symbol."""
    prev = lag(frame, column, periods)
    with engine_errors(f"pct_change({column}, {periods})"):
        return (frame[column] - prev) / prev


def rolling(frame: pd.DataFrame, column: str, window: int,
            min_periods: Optional[int] = None, how: str = "mean", **kwargs) -> pd.Series:
    """
    Trailing rolling aggregate of `column` within each symbol.

    Args:
        frame: Panel sorted by (symbol, date)
        column: Column to aggregate
        window: Number of trailing rows in the window (current row included)
        min_periods: Minimum non-missing observations, defaults to `window`.
            Fewer observations yield NaN, never a partial estimate.
        how: One of ROLLING_AGGREGATIONS
        **kwargs: Passed to the aggregation (e.g. q=0.05 for quantile)

    Returns:
        Series aligned to frame.index
    """
    if how not in ROLLING_AGGREGATIONS:
        raise ValueError(f"Unknown rolling aggregation: {how}")
    if window < 1:
        raise ValueError("rolling window must be at least 1")
    if min_periods is None:
        min_periods = window

    with engine_errors(f"rolling({column}, {how}, {window})"):
        if frame.empty:
            return pd.Series(np.nan, index=frame.index, dtype=float)
        windows = frame.groupby(SYMBOL, sort=False)[column].rolling(window, min_periods=min_periods)
        result = getattr(windows, how)(**kwargs)
        return result.reset_index(level=0, drop=True).reindex(frame.index)


def snapshot(frame: pd.DataFrame, as_of_date: DateLike, values, name: str) -> pd.DataFrame:
    """
    Final projection of a factor computation.

    Args:
        frame: Sorted as-of panel the values were derived from
        as_of_date: Date to keep
        values: Series aligned to frame.index (or scalar) holding the factor value
        name: Output column name

    Returns:
        DataFrame with exactly (symbol, date, name), one row per symbol,
        all dated as_of_date, infinities turned into missing values and
        missing values dropped.
    """
    asof = normalize_date(as_of_date)
    with engine_errors(f"snapshot({name})"):
        out = pd.DataFrame({SYMBOL: frame[SYMBOL], DATE: frame[DATE], name: values}, index=frame.index)
        out = out[out[DATE] == asof].copy()
        out[name] = out[name].astype(float).replace([np.inf, -np.inf], np.nan)
        out = out.dropna(subset=[name])
        out = out.drop_duplicates(subset=list(KEY_COLUMNS), keep="last")
        return out.reset_index(drop=True)


def per_symbol_series(frame: pd.DataFrame, column: str,
                      tail: Optional[int] = None) -> Iterator[Tuple[str, pd.Timestamp, np.ndarray]]:
    """
    Iterate (symbol, last_date, values) for hand-written per-symbol loops.

    Values are the non-missing observations of `column` in date order,
    optionally limited to the last `tail` of them. last_date is the date of
    the latest non-missing observation, so a symbol whose value is missing
    on the as-of date reports an earlier date. Symbols with no observations
    at all are skipped. The frame must come from as_of() so nothing after
    the as-of date is visible.
    """
    with engine_errors(f"per_symbol_series({column})"):
        for symbol, group in frame.groupby(SYMBOL, sort=True):
            observed = group.dropna(subset=[column])
            if observed.empty:
                continue
            values = observed[column].to_numpy(dtype=float)
            if tail is not None:
                values = values[-tail:]
            yield symbol, observed[DATE].iloc[-1], values


def from_records(records: Sequence[Tuple[str, pd.Timestamp, float]], name: str) -> pd.DataFrame:
    """Build a (symbol, date, name) frame from per-symbol loop output."""
    out = pd.DataFrame(list(records), columns=[SYMBOL, DATE, name])
    out[name] = out[name].astype(float).replace([np.inf, -np.inf], np.nan)
    out[DATE] = pd.to_datetime(out[DATE])
    out = out.dropna(subset=[name])
    return out.reset_index(drop=True)


def inner_join(left: pd.DataFrame, right: pd.DataFrame) -> pd.DataFrame:
    """Inner join two factor frames on (symbol, date)."""
    with engine_errors("inner_join"):
        return left.merge(right, on=list(KEY_COLUMNS), how="inner")


def empty_result(name: str) -> pd.DataFrame:
    """Zero-row (symbol, date, name) frame with the usual dtypes."""
    return pd.DataFrame({
        SYMBOL: pd.Series(dtype=object),
        DATE: pd.Series(dtype="datetime64[ns]"),
        name: pd.Series(dtype=float),
    })
