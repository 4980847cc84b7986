"""
Quant Factors - point-in-time factor computations over (symbol, date) panels.

This package provides a registry of momentum, value, quality, size,
volatility, growth, liquidity and sentiment factors, all evaluated with
strict point-in-time discipline, plus per-date cross-sectional
standardization (z-score, robust z-score, winsorization).
"""

__version__ = "0.1.0"

from .errors import (
    FactorError, MissingColumnError, InsufficientDataError, InvalidDateRangeError,
    EngineError, FactorNotFoundError, ComputationError, RegistryFrozenError,
    DuplicateFactorError
)
from .base import DataFrequency, FactorCategory, FactorInfo, Factor, ConfigurableFactor
from .standardize import (
    zscore, robust_zscore, winsorize, cross_sectional_standardize,
    robust_standardize, winsorize_panel, apply_steps
)
from .registry import FactorRegistry, FrozenFactorRegistry, default_registry
from .config import load_config, validate_config, setup_logging, apply_factor_overrides
from .data_io import load_panel, unique_dates

__all__ = [
    "FactorError",
    "MissingColumnError",
    "InsufficientDataError",
    "InvalidDateRangeError",
    "EngineError",
    "FactorNotFoundError",
    "ComputationError",
    "RegistryFrozenError",
    "DuplicateFactorError",
    "DataFrequency",
    "FactorCategory",
    "FactorInfo",
    "Factor",
    "ConfigurableFactor",
    "zscore",
    "robust_zscore",
    "winsorize",
    "cross_sectional_standardize",
    "robust_standardize",
    "winsorize_panel",
    "apply_steps",
    "FactorRegistry",
    "FrozenFactorRegistry",
    "default_registry",
    "load_config",
    "validate_config",
    "setup_logging",
    "apply_factor_overrides",
    "load_panel",
    "unique_dates",
]
