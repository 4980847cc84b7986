"""
Cross-sectional standardization of factor values.

Provides z-scoring, robust (median/MAD) z-scoring and winsorization,
each available for a single cross-section (a Series) and for a long
panel, where the transform is applied separately within every date.
The transforms are independent: none calls another, so the caller
decides the order (winsorize, then z-score is the usual pipeline).
"""

from typing import Any, Iterable, List

import numpy as np
import pandas as pd
from scipy import stats

from .errors import MissingColumnError
from .panel import DATE, engine_errors

# Consistency constant making MAD comparable to a normal standard deviation
MAD_SCALE = 1.4826

# Dispersion at or below this fraction of the largest magnitude is treated as zero
RELATIVE_DISPERSION_FLOOR = 1e-12

STEP_NAMES = ("zscore", "robust", "winsorize")


def _negligible(dispersion: float, values: pd.Series) -> bool:
    """True when `dispersion` is zero relative to the scale of `values`, or undefined."""
    if not np.isfinite(dispersion):
        return True
    return dispersion <= RELATIVE_DISPERSION_FLOOR * values.abs().max()


def zscore(series: pd.Series, ddof: int = 1) -> pd.Series:
    """
    Calculate z-score (standardized) values for one cross-section.

    Args:
        series: Input values
        ddof: Delta degrees of freedom for std (1 for sample std)

    Returns:
        Z-scored series with same index as input

    Notes:
        - Z-score = (x - mean) / std
        - NaN inputs stay NaN
        - Returns all-NaN if fewer than 2 non-missing values or std is zero
    """
    if series.empty:
        return series.astype(float)

    values = series.astype(float)
    if values.count() < 2:
        return pd.Series(np.nan, index=series.index, name=series.name)

    std_val = values.std(ddof=ddof)
    if _negligible(std_val, values):
        return pd.Series(np.nan, index=series.index, name=series.name)

    return (values - values.mean()) / std_val


def robust_zscore(series: pd.Series) -> pd.Series:
    """
    Robust z-score: (x - median) / (1.4826 * MAD).

    Returns all-NaN when there are no non-missing values or the MAD is zero.
    """
    if series.empty:
        return series.astype(float)

    values = series.astype(float)
    if values.count() == 0:
        return pd.Series(np.nan, index=series.index, name=series.name)

    median_val = values.median()
    mad = stats.median_abs_deviation(values.to_numpy(), scale=1.0, nan_policy="omit")
    scale = MAD_SCALE * float(mad)
    if _negligible(scale, values):
        return pd.Series(np.nan, index=series.index, name=series.name)

    return (values - median_val) / scale


def _check_percentiles(p_low: float, p_high: float) -> None:
    if not (0.0 <= p_low <= 1.0 and 0.0 <= p_high <= 1.0):
        raise ValueError(f"Percentiles must lie in [0, 1], got ({p_low}, {p_high})")
    if p_low > p_high:
        raise ValueError(f"Lower percentile {p_low} exceeds upper percentile {p_high}")


def winsorize(series: pd.Series, p_low: float, p_high: float) -> pd.Series:
    """
    Winsorize a series by capping values at specified percentiles.

    Args:
        series: Input series to winsorize
        p_low: Lower percentile (e.g., 0.01 for 1st percentile)
        p_high: Upper percentile (e.g., 0.99 for 99th percentile)

    Returns:
        Winsorized series with same index as input

    Raises:
        ValueError: If percentiles are outside [0, 1] or p_low > p_high

    Notes:
        - NaN values are excluded from the percentile calculation and preserved
        - Quantiles use linear interpolation
    """
    _check_percentiles(p_low, p_high)
    if series.empty:
        return series

    low_val = series.quantile(p_low, interpolation="linear")
    high_val = series.quantile(p_high, interpolation="linear")

    return series.clip(lower=low_val, upper=high_val)


def _by_date(df: pd.DataFrame, value_column: str, date_column: str, func, label: str) -> pd.DataFrame:
    missing = [col for col in (date_column, value_column) if col not in df.columns]
    if missing:
        raise MissingColumnError(missing)

    result = df.copy()
    if result.empty:
        result[value_column] = result[value_column].astype(float)
        return result

    with engine_errors(label):
        result[value_column] = (
            result.groupby(date_column, sort=False)[value_column]
            .transform(func)
            .astype(float)
        )
    return result


def cross_sectional_standardize(df: pd.DataFrame, value_column: str,
                                date_column: str = DATE) -> pd.DataFrame:
    """
    Replace `value_column` by its z-score within each date.

    Uses the sample standard deviation. Dates with fewer than two values
    or zero dispersion produce NaN, never infinities.
    """
    return _by_date(df, value_column, date_column, zscore, f"zscore({value_column})")


def robust_standardize(df: pd.DataFrame, value_column: str,
                       date_column: str = DATE) -> pd.DataFrame:
    """Replace `value_column` by its median/MAD z-score within each date."""
    return _by_date(df, value_column, date_column, robust_zscore, f"robust({value_column})")


def winsorize_panel(df: pd.DataFrame, value_column: str, lower_pct: float, upper_pct: float,
                    date_column: str = DATE) -> pd.DataFrame:
    """Clip `value_column` into its per-date [lower_pct, upper_pct] quantile band."""
    _check_percentiles(lower_pct, upper_pct)
    return _by_date(
        df, value_column, date_column,
        lambda s: winsorize(s, lower_pct, upper_pct),
        f"winsorize({value_column})",
    )


def parse_steps(steps: Iterable[Any]) -> List[tuple]:
    """
    Normalize step specs to (name, args) tuples.

    Accepted forms: "zscore", "robust", {"winsorize": [lo, hi]}.

    Raises:
        ValueError: On an unknown step or malformed winsorize bounds
    """
    parsed = []
    for step in steps:
        if isinstance(step, str):
            if step not in ("zscore", "robust"):
                raise ValueError(f"Unknown standardization step: {step}")
            parsed.append((step, ()))
        elif isinstance(step, dict) and len(step) == 1 and "winsorize" in step:
            bounds = step["winsorize"]
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
                raise ValueError(f"winsorize step needs [lower, upper], got {bounds!r}")
            lo, hi = float(bounds[0]), float(bounds[1])
            _check_percentiles(lo, hi)
            parsed.append(("winsorize", (lo, hi)))
        else:
            raise ValueError(f"Unknown standardization step: {step!r}")
    return parsed


def apply_steps(df: pd.DataFrame, value_column: str, steps: Iterable[Any],
                date_column: str = DATE) -> pd.DataFrame:
    """
    Run a caller-ordered sequence of per-date transforms.

    Example:
        apply_steps(raw, "roe", [{"winsorize": [0.01, 0.99]}, "zscore"])
    """
    result = df
    for name, args in parse_steps(steps):
        if name == "zscore":
            result = cross_sectional_standardize(result, value_column, date_column)
        elif name == "robust":
            result = robust_standardize(result, value_column, date_column)
        else:
            result = winsorize_panel(result, value_column, args[0], args[1], date_column)
    return result
