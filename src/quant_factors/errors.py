"""
Error types raised by factor computations and the factor registry.

Every exception derives from FactorError so callers can catch the whole
family at once, while the more specific classes also subclass the builtin
exception a pandas user would expect (ValueError, KeyError).
"""

from typing import Iterable, List, Optional


class FactorError(Exception):
    """Base class for all factor library errors."""


class MissingColumnError(FactorError, ValueError):
    """A required column is absent from the input panel."""

    def __init__(self, columns: Iterable[str]):
        self.columns: List[str] = list(columns)
        super().__init__(f"Missing required column(s): {', '.join(self.columns)}")


class InsufficientDataError(FactorError):
    """
    Not enough history for any row to be computable.

    Per-symbol insufficiency is handled by omitting the symbol from the
    result; this error is reserved for the whole-computation case.
    """

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"Insufficient data: need {required} periods, got {available}")


class InvalidDateRangeError(FactorError, ValueError):
    """Start date is after end date."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(f"Invalid date range: start {start} is after end {end}")


class EngineError(FactorError):
    """Opaque failure surfaced by the tabular engine (pandas/numpy)."""


class FactorNotFoundError(FactorError, KeyError):
    """Requested factor name is not registered."""

    def __init__(self, name: str, available: Optional[Iterable[str]] = None):
        self.name = name
        self.available: List[str] = sorted(available) if available is not None else []
        super().__init__(name)

    def __str__(self) -> str:
        return f"Factor not found: {self.name}"


class ComputationError(FactorError):
    """Logic error not covered by a more specific class."""


class RegistryFrozenError(ComputationError):
    """Attempt to register a factor after the registry was frozen."""


class DuplicateFactorError(ComputationError):
    """Name collision on a strict registration."""
