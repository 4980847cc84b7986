"""
Core factor abstractions.

Every factor is a stateless, named computation that maps
(panel, as-of date) -> (symbol, date, <name>) plus static metadata:
name, description, category, required columns, lookback and frequency.

Concrete factors implement compute_raw() following the point-in-time
pattern provided by quant_factors.panel:

    history = self.history(panel, as_of_date)       # filter + sort
    history["x_lag"] = lag(history, "x", 4)          # backward-looking only
    return self.finish(history, as_of_date, values)  # restrict + project + dropna

compute() adds cross-sectional z-scoring on top of compute_raw().
"""

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .errors import InsufficientDataError
from .panel import KEY_COLUMNS, DateLike, as_of, empty_result, require_columns, snapshot
from .standardize import cross_sectional_standardize


class DataFrequency(Enum):
    """Time unit of a factor's lookback."""
    DAILY = "Daily"
    QUARTERLY = "Quarterly"

    def __str__(self) -> str:
        return self.value


class FactorCategory(Enum):
    """Closed set of factor families."""
    MOMENTUM = "Momentum"
    VALUE = "Value"
    QUALITY = "Quality"
    SIZE = "Size"
    VOLATILITY = "Volatility"
    GROWTH = "Growth"
    LIQUIDITY = "Liquidity"
    SENTIMENT = "Sentiment"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "FactorCategory":
        """Accept an enum member, its value ("Momentum") or its name ("MOMENTUM")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"Unknown factor category: {value}")


@dataclass(frozen=True)
class FactorInfo:
    """Immutable factor metadata used for listing and introspection."""
    name: str
    description: str
    category: FactorCategory
    required_columns: Tuple[str, ...]
    lookback: int
    frequency: DataFrequency

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": str(self.category),
            "required_columns": list(self.required_columns),
            "lookback": self.lookback,
            "frequency": str(self.frequency),
        }


class Factor(ABC):
    """
    Base class for all factors.

    Subclasses set the class attributes below and implement compute_raw().
    Instances are read-only after construction: nothing in compute_raw() or
    compute() may mutate them, so one instance can be shared by any number
    of threads.

    Attributes:
        name: Stable snake_case identifier, also the output column name
        description: Human-readable summary
        category: FactorCategory member
        required_columns: Input columns, always starting with symbol and date
        frequency: DataFrequency of the lookback unit
    """

    name: str = ""
    description: str = ""
    category: FactorCategory
    required_columns: Tuple[str, ...] = KEY_COLUMNS
    frequency: DataFrequency = DataFrequency.DAILY

    def __init__(self):
        self._check_metadata()

    def _check_metadata(self) -> None:
        if not self.name:
            raise TypeError(f"{type(self).__name__} must define a name")
        if not isinstance(getattr(self, "category", None), FactorCategory):
            raise TypeError(f"{self.name}: category must be a FactorCategory")
        missing_keys = [col for col in KEY_COLUMNS if col not in self.required_columns]
        if missing_keys:
            raise TypeError(f"{self.name}: required_columns must include {missing_keys}")
        if self.lookback < 0:
            raise TypeError(f"{self.name}: lookback must be >= 0, got {self.lookback}")

    @property
    def lookback(self) -> int:
        """Trailing periods (in `frequency` units) needed for a non-missing value."""
        return 1

    def info(self) -> FactorInfo:
        return FactorInfo(
            name=self.name,
            description=self.description,
            category=self.category,
            required_columns=tuple(self.required_columns),
            lookback=self.lookback,
            frequency=self.frequency,
        )

    def validate(self, panel: pd.DataFrame) -> None:
        """Raise MissingColumnError if the panel lacks any required column."""
        require_columns(panel, self.required_columns)

    def history(self, panel: pd.DataFrame, as_of_date: DateLike) -> pd.DataFrame:
        """
        Steps 1-2 of the point-in-time pattern.

        Returns the required columns restricted to date <= as_of_date and
        sorted by (symbol, date).

        Raises:
            MissingColumnError: If a required column is absent
            InsufficientDataError: If no observation exists on or before as_of_date
        """
        self.validate(panel)
        frame = as_of(panel, as_of_date, self.required_columns)
        if frame.empty:
            raise InsufficientDataError(required=self.lookback, available=0)
        return frame

    def finish(self, frame: pd.DataFrame, as_of_date: DateLike, values) -> pd.DataFrame:
        """Steps 4-5: restrict to the as-of date and project to (symbol, date, name)."""
        return snapshot(frame, as_of_date, values, self.name)

    def empty(self) -> pd.DataFrame:
        return empty_result(self.name)

    @abstractmethod
    def compute_raw(self, panel: pd.DataFrame, as_of_date: DateLike) -> pd.DataFrame:
        """
        Compute raw factor values as of a date.

        Args:
            panel: Long panel containing at least required_columns
            as_of_date: Date to compute for; later rows must not influence the result

        Returns:
            DataFrame with exactly (symbol, date, name); at most one row per
            symbol; symbols without enough history are omitted

        Raises:
            MissingColumnError: If a required column is absent
            EngineError: If pandas rejects the computation
        """

    def compute(self, panel: pd.DataFrame, as_of_date: DateLike,
                standardize: bool = True) -> pd.DataFrame:
        """
        Compute cross-sectionally z-scored factor values.

        Rows whose z-score is undefined (single-name cross-section, zero
        dispersion) are dropped. Pass standardize=False to get the raw
        values unchanged.
        """
        raw = self.compute_raw(panel, as_of_date)
        if not standardize:
            return raw
        scored = cross_sectional_standardize(raw, self.name)
        return scored.dropna(subset=[self.name]).reset_index(drop=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, lookback={self.lookback})"


class ConfigurableFactor(Factor):
    """
    Factor whose tunables live in a dataclass config.

    Subclasses set `config_class` to a dataclass whose fields all have
    defaults. Configuration changes parameters only; name and category are
    fixed by the class. Register a differently-configured copy under a
    distinct name by subclassing.
    """

    config_class: type

    def __init__(self, config: Optional[Any] = None):
        if config is None:
            config = self.config_class()
        elif not isinstance(config, self.config_class):
            raise TypeError(
                f"{type(self).__name__} expects {self.config_class.__name__}, "
                f"got {type(config).__name__}"
            )
        self._config = config
        super().__init__()

    @property
    def config(self):
        return self._config

    @classmethod
    def with_config(cls, config) -> "ConfigurableFactor":
        return cls(config)

    def with_params(self, **overrides) -> "ConfigurableFactor":
        """
        Copy of this factor with some config fields replaced.

        Raises:
            ValueError: If an override names an unknown config field
        """
        known = {f.name for f in dataclasses.fields(self.config_class)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(f"{self.name}: unknown config field(s): {', '.join(unknown)}")
        return type(self)(dataclasses.replace(self._config, **overrides))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config!r})"
