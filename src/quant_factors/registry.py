"""
Factor registry for discovery, introspection and bulk computation.

Registries have two phases. A FactorRegistry is built single-threaded
(register / configure), then freeze() hands out a FrozenFactorRegistry,
an immutable snapshot that is safe to share between threads. Both expose
the same read API, including compute_all(), which computes every factor
and inner-joins the results on (symbol, date).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .base import ConfigurableFactor, Factor, FactorCategory, FactorInfo
from .config import apply_factor_overrides
from .errors import (
    ComputationError,
    DuplicateFactorError,
    FactorNotFoundError,
    RegistryFrozenError,
)
from .panel import DATE, KEY_COLUMNS, SYMBOL, DateLike, inner_join, normalize_date
from .standardize import apply_steps

logger = logging.getLogger(__name__)


class _RegistryView:
    """Read-only operations shared by the building and frozen registries."""

    _factors: Mapping[str, Factor]

    def get(self, name: str) -> Optional[Factor]:
        """Factor registered under `name`, or None."""
        return self._factors.get(name)

    def require(self, name: str) -> Factor:
        """
        Factor registered under `name`.

        Raises:
            FactorNotFoundError: If no factor has that name
        """
        factor = self._factors.get(name)
        if factor is None:
            raise FactorNotFoundError(name, self._factors.keys())
        return factor

    def by_category(self, category) -> List[Factor]:
        """Factors in a category. Order is not meaningful."""
        category = FactorCategory.parse(category)
        return [f for f in self._factors.values() if f.category is category]

    def all_info(self) -> List[FactorInfo]:
        return [f.info() for f in self._factors.values()]

    def names(self) -> List[str]:
        return list(self._factors)

    def is_empty(self) -> bool:
        return not self._factors

    def __len__(self) -> int:
        return len(self._factors)

    def __contains__(self, name) -> bool:
        return name in self._factors

    def __iter__(self) -> Iterator[Factor]:
        return iter(list(self._factors.values()))

    def _select(self, names: Optional[Iterable[str]]) -> List[Tuple[str, Factor]]:
        if names is None:
            return sorted(self._factors.items())
        return [(name, self.require(name)) for name in sorted(set(names))]

    def compute_all(self, panel: pd.DataFrame, as_of_date: DateLike,
                    names: Optional[Iterable[str]] = None,
                    standardize: bool = True,
                    steps: Optional[Sequence[Any]] = None,
                    max_workers: Optional[int] = None) -> pd.DataFrame:
        """
        Compute several factors and inner-join them into one wide panel.

        Args:
            panel: Long input panel holding every required column
            as_of_date: Date to compute for
            names: Subset of factor names (default: all registered)
            standardize: Cross-sectionally z-score each factor (default).
                False keeps raw values.
            steps: Explicit per-date transform sequence applied to each raw
                factor instead of the default z-score, e.g.
                [{"winsorize": [0.01, 0.99]}, "zscore"]
            max_workers: Compute factors on a thread pool of this size

        Returns:
            DataFrame with symbol, date and one column per factor (sorted by
            name). A symbol missing from any factor's output is dropped, so
            every row has a value for every factor.

        Raises:
            ComputationError: If there are no factors to compute
            FactorNotFoundError: If `names` contains an unknown factor
            MissingColumnError / EngineError: Propagated from the factors
        """
        selected = self._select(names)
        if not selected:
            raise ComputationError("No factors registered")

        asof = normalize_date(as_of_date)
        logger.info("Computing %d factors as of %s", len(selected), asof.date().isoformat())

        if max_workers is not None and max_workers > 1 and len(selected) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                futures = [
                    (name, pool.submit(_compute_one, factor, panel, asof, standardize, steps))
                    for name, factor in selected
                ]
                results = [(name, future.result()) for name, future in futures]
        else:
            results = [
                (name, _compute_one(factor, panel, asof, standardize, steps))
                for name, factor in selected
            ]

        combined = None
        for name, frame in results:
            logger.debug("Factor %s produced %d rows", name, len(frame))
            combined = frame if combined is None else inner_join(combined, frame)

        columns = [SYMBOL, DATE] + [name for name, _ in selected]
        combined = combined[columns].sort_values(list(KEY_COLUMNS)).reset_index(drop=True)
        logger.info("Combined panel has %d rows", len(combined))
        return combined


def _compute_one(factor: Factor, panel: pd.DataFrame, asof: pd.Timestamp,
                 standardize: bool, steps: Optional[Sequence[Any]]) -> pd.DataFrame:
    if steps is None:
        return factor.compute(panel, asof, standardize=standardize)
    raw = factor.compute_raw(panel, asof)
    transformed = apply_steps(raw, factor.name, steps)
    return transformed.dropna(subset=[factor.name]).reset_index(drop=True)


class FactorRegistry(_RegistryView):
    """
    Mutable registry used while wiring up factors.

    Registration is last-write-wins: re-registering a name replaces the
    previous factor and logs a warning. Pass strict=True to make a
    collision an error instead.
    """

    def __init__(self, factors: Iterable[Factor] = ()):
        self._factors: Dict[str, Factor] = {}
        for factor in factors:
            self.register(factor)

    @classmethod
    def with_defaults(cls) -> "FactorRegistry":
        """Registry holding one default-configured instance of every standard factor."""
        from .factors import DEFAULT_FACTORS

        return cls(factor_cls() for factor_cls in DEFAULT_FACTORS)

    def register(self, factor: Factor, strict: bool = False) -> None:
        """
        Add a factor under factor.name.

        Raises:
            TypeError: If `factor` is not a Factor
            DuplicateFactorError: If strict and the name is already taken
        """
        if not isinstance(factor, Factor):
            raise TypeError(f"Expected a Factor, got {type(factor).__name__}")
        previous = self._factors.get(factor.name)
        if previous is not None:
            if strict:
                raise DuplicateFactorError(f"Factor already registered: {factor.name}")
            logger.warning("Replacing registered factor %s: %r -> %r", factor.name, previous, factor)
        self._factors[factor.name] = factor

    def configure(self, name: str, **params) -> Factor:
        """
        Replace a configurable factor by a copy with some parameters changed.

        Raises:
            FactorNotFoundError: If the name is unknown
            ValueError: If the factor is not configurable or a parameter is unknown
        """
        factor = self.require(name)
        if not isinstance(factor, ConfigurableFactor):
            raise ValueError(f"Factor '{name}' has no configurable parameters")
        updated = factor.with_params(**params)
        self._factors[name] = updated
        logger.info("Configured %r", updated)
        return updated

    def freeze(self) -> "FrozenFactorRegistry":
        """Immutable snapshot of the current registrations."""
        return FrozenFactorRegistry(self._factors)


class FrozenFactorRegistry(_RegistryView):
    """Read-only registry; safe to share once built."""

    def __init__(self, factors: Mapping[str, Factor]):
        self._factors = MappingProxyType(dict(factors))

    def register(self, factor: Factor, strict: bool = False) -> None:
        raise RegistryFrozenError(f"Cannot register {factor.name!r}: registry is frozen")

    def configure(self, name: str, **params) -> Factor:
        raise RegistryFrozenError(f"Cannot configure {name!r}: registry is frozen")


def default_registry(config: Optional[Mapping[str, Any]] = None) -> FrozenFactorRegistry:
    """
    Frozen registry of the standard factors.

    Args:
        config: Parsed configuration; its `factors` section
            ({factor_name: {param: value}}) overrides default parameters
    """
    registry = FactorRegistry.with_defaults()
    apply_factor_overrides(registry, (config or {}).get("factors") or {})
    return registry.freeze()
