"""
Configuration helpers: YAML loading, validation, logging setup and
per-factor parameter overrides.

A configuration file looks like:

    logging:
      level: INFO
    standardization:
      steps:
        - winsorize: [0.01, 0.99]
        - zscore
    factors:
      medium_term_momentum:
        lookback: 100
        skip_days: 10

Every section is optional.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .standardize import parse_steps

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def setup_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """
    Configure root logger once. Safe to call multiple times.
    - level: "DEBUG"|"INFO"|"WARNING"|"ERROR"|"CRITICAL"; unknown levels fall back to INFO
    - fmt default: "%(asctime)s %(levelname)s %(name)s - %(message)s"
    """
    log_level = LOG_LEVELS.get(str(level).upper(), logging.INFO)

    # Remove existing handlers on root to avoid duplicate logs
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(level=log_level, format=fmt or DEFAULT_LOG_FORMAT)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to a YAML file

    Returns:
        Parsed mapping; an empty file gives {}

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level is not a mapping
    """
    with open(config_path, "r") as f:
        cfg = yaml.safe_load(f)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config root must be a mapping, got {type(cfg).__name__}")
    logger.debug("Loaded config from %s", config_path)
    return cfg


def validate_config(cfg: Mapping[str, Any]) -> None:
    """
    Fail fast on malformed keys. Raise ValueError listing every problem.
    Checked (only keys we actually read):
      logging.level            known level name
      standardization.steps    list of "zscore" | "robust" | {winsorize: [lo, hi]}
      factors.<name>           mapping of parameter overrides
    """
    problems = []

    logging_cfg = cfg.get("logging") or {}
    level = logging_cfg.get("level")
    if level is not None and str(level).upper() not in LOG_LEVELS:
        problems.append(f"logging.level ({level!r})")

    steps = (cfg.get("standardization") or {}).get("steps")
    if steps is not None:
        if not isinstance(steps, list):
            problems.append("standardization.steps (must be a list)")
        else:
            try:
                parse_steps(steps)
            except ValueError as e:
                problems.append(f"standardization.steps ({e})")

    factors_cfg = cfg.get("factors") or {}
    if not isinstance(factors_cfg, dict):
        problems.append("factors (must be a mapping)")
    else:
        for name, params in factors_cfg.items():
            if params is not None and not isinstance(params, dict):
                problems.append(f"factors.{name} (must be a mapping)")

    if problems:
        raise ValueError(f"Invalid config keys: {', '.join(problems)}")


def apply_factor_overrides(registry, overrides: Mapping[str, Optional[Mapping[str, Any]]]) -> None:
    """
    Rebuild configurable factors in a building registry with new parameters.

    Args:
        registry: FactorRegistry (not frozen)
        overrides: {factor_name: {param: value}}

    Raises:
        FactorNotFoundError: If a factor name is unknown
        ValueError: If the factor is not configurable or a parameter is unknown
    """
    for name, params in overrides.items():
        registry.configure(name, **dict(params or {}))


def standardization_steps(cfg: Mapping[str, Any]):
    """Configured standardization steps, or None for the default z-score."""
    return (cfg.get("standardization") or {}).get("steps")
