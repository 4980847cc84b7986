"""
Command-line interface for discovering, inspecting and computing factors.

    quant-factors list
    quant-factors info medium_term_momentum
    quant-factors compute AAPL --factor roe
    quant-factors --config factors.yaml compute AAPL --factor roe --panel panel.csv --asof 2024-01-01
"""

import argparse
import logging
import sys
from collections import defaultdict
from typing import List, Optional

from .base import DataFrequency
from .config import load_config, setup_logging, standardization_steps, validate_config
from .data_io import load_panel
from .errors import FactorError, FactorNotFoundError
from .panel import SYMBOL, normalize_date
from .registry import default_registry
from .standardize import apply_steps, cross_sectional_standardize

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quant-factors",
        description="Point-in-time factor library for quantitative equity research",
    )
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--log-level", help="Logging level (overrides config)")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("list", help="List all available factors")

    info = commands.add_parser("info", help="Show information about a specific factor")
    info.add_argument("factor", help="Factor name")

    compute = commands.add_parser("compute", help="Compute a factor for a symbol")
    compute.add_argument("symbol", help="Stock symbol")
    compute.add_argument("--factor", required=True, help="Factor to compute")
    compute.add_argument("--panel", help="Local CSV panel with symbol, date and required columns")
    compute.add_argument("--asof", help="Date to compute for (YYYY-MM-DD), required with --panel")
    return parser


def list_factors(registry) -> None:
    """Print factors grouped by category."""
    by_category = defaultdict(list)
    for info in registry.all_info():
        by_category[str(info.category)].append(info)

    print(f"Available Factors ({len(registry)} total)\n")
    for category in sorted(by_category):
        print(f"{category}:")
        for info in sorted(by_category[category], key=lambda i: i.name):
            print(f"  {info.name} - {info.description}")
        print()


def _report_not_found(err: FactorNotFoundError) -> int:
    print(f"Error: Factor '{err.name}' not found", file=sys.stderr)
    print("\nAvailable factors:", file=sys.stderr)
    for name in err.available:
        print(f"  {name}", file=sys.stderr)
    return 1


def show_factor_info(registry, factor_name: str) -> None:
    info = registry.require(factor_name).info()
    print(f"Factor: {info.name}")
    print(f"Category: {info.category}")
    print(f"Description: {info.description}")
    print(f"Frequency: {info.frequency}")
    print(f"Lookback: {info.lookback} periods")
    print("Required columns:")
    for col in info.required_columns:
        print(f"  - {col}")


def compute_factor(registry, symbol: str, factor_name: str, cfg: dict,
                   panel_path: Optional[str] = None, asof: Optional[str] = None) -> int:
    """
    Without a panel, describe what the computation needs. With a local panel,
    compute the factor as of `asof` and print the symbol's values.
    """
    factor = registry.require(factor_name)
    info = factor.info()

    print(f"Computing factor '{factor_name}' for symbol '{symbol}'")
    print("\nFactor Details:")
    print(f"  Category: {info.category}")
    print(f"  Description: {info.description}")
    print(f"  Lookback: {info.lookback} periods")
    print("\nRequired data columns:")
    for col in info.required_columns:
        print(f"  - {col}")

    if panel_path is None:
        unit = "daily" if info.frequency is DataFrequency.DAILY else "quarterly"
        print("\n[PLACEHOLDER] No panel given, nothing computed.")
        print("To compute this factor, you need to:")
        print(f"1. Provide historical {unit} data for {symbol}")
        print(f"2. Prepare a CSV with required columns: {list(info.required_columns)}")
        print(f"3. Run: quant-factors compute {symbol} --factor {factor_name} --panel PANEL.csv --asof YYYY-MM-DD")
        return 0

    if asof is None:
        raise ValueError("--asof is required with --panel")
    asof_dt = normalize_date(asof)

    panel = load_panel(panel_path, required=info.required_columns)
    raw = factor.compute_raw(panel, asof_dt)
    steps = standardization_steps(cfg)
    if steps is None:
        scored = cross_sectional_standardize(raw, factor_name)
    else:
        scored = apply_steps(raw, factor_name, steps)
    scored = scored.dropna(subset=[factor_name])

    raw_row = raw[raw[SYMBOL] == symbol]
    scored_row = scored[scored[SYMBOL] == symbol]
    print(f"\nAs of {asof_dt.date().isoformat()} ({len(raw)} symbols in cross-section):")
    if raw_row.empty:
        print(f"  No value for {symbol} (missing data or insufficient history)")
        return 0
    print(f"  Raw: {raw_row[factor_name].iloc[0]:.6f}")
    if scored_row.empty:
        print("  Standardized: n/a (cross-section too small or without dispersion)")
    else:
        print(f"  Standardized: {scored_row[factor_name].iloc[0]:.6f}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else {}
        validate_config(cfg)
        level = args.log_level or (cfg.get("logging") or {}).get("level", "WARNING")
        setup_logging(level, (cfg.get("logging") or {}).get("format"))

        registry = default_registry(cfg)
        logger.debug("Registry holds %d factors", len(registry))

        if args.command == "list":
            list_factors(registry)
            return 0
        if args.command == "info":
            show_factor_info(registry, args.factor)
            return 0
        return compute_factor(registry, args.symbol, args.factor, cfg, args.panel, args.asof)
    except FactorNotFoundError as e:
        return _report_not_found(e)
    except (FactorError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
