"""
Tests for config module.
"""

import logging

import pytest
import yaml

from quant_factors.config import (
    apply_factor_overrides, load_config, setup_logging, standardization_steps, validate_config
)
from quant_factors.errors import FactorNotFoundError
from quant_factors.factors import MediumTermMomentum, Roe
from quant_factors.registry import FactorRegistry


def write_config(tmp_path, config):
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


class TestLoadConfig:
    """Test YAML loading."""

    def test_load_config_roundtrip(self, tmp_path):
        config = {
            "logging": {"level": "DEBUG"},
            "standardization": {"steps": [{"winsorize": [0.01, 0.99]}, "zscore"]},
            "factors": {"medium_term_momentum": {"lookback": 100, "skip_days": 10}},
        }
        cfg = load_config(write_config(tmp_path, config))

        assert cfg == config
        assert standardization_steps(cfg) == [{"winsorize": [0.01, 0.99]}, "zscore"]

    def test_load_config_empty_file(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        cfg = load_config(config_path)

        assert cfg == {}
        assert standardization_steps(cfg) is None

    def test_load_config_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_load_config_non_mapping(self, tmp_path):
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path)


class TestValidateConfig:
    """Test fail-fast validation."""

    def test_valid_config(self):
        validate_config({
            "logging": {"level": "info"},
            "standardization": {"steps": ["robust"]},
            "factors": {"rsi": {"period": 10}, "roe": None},
        })
        validate_config({})

    def test_invalid_config_lists_every_problem(self):
        with pytest.raises(ValueError) as exc_info:
            validate_config({
                "logging": {"level": "LOUD"},
                "standardization": {"steps": ["rank"]},
                "factors": {"rsi": 14},
            })
        message = str(exc_info.value)
        assert "logging.level" in message
        assert "standardization.steps" in message
        assert "factors.rsi" in message


class TestFactorOverrides:
    """Test per-factor parameter overrides."""

    def test_apply_overrides(self):
        registry = FactorRegistry([MediumTermMomentum(), Roe()])

        apply_factor_overrides(registry, {"medium_term_momentum": {"lookback": 100, "skip_days": 10}})

        factor = registry.require("medium_term_momentum")
        assert factor.config.lookback == 100
        assert factor.lookback == 110

    def test_override_errors(self):
        registry = FactorRegistry([MediumTermMomentum(), Roe()])

        with pytest.raises(ValueError, match="unknown config field"):
            apply_factor_overrides(registry, {"medium_term_momentum": {"window": 5}})
        with pytest.raises(ValueError, match="no configurable parameters"):
            apply_factor_overrides(registry, {"roe": {"window": 5}})
        with pytest.raises(FactorNotFoundError):
            apply_factor_overrides(registry, {"rsi": {"period": 5}})


class TestSetupLogging:
    """Test logging configuration."""

    def test_setup_logging_idempotent(self):
        setup_logging("DEBUG")
        setup_logging("WARNING")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_setup_logging_unknown_level_defaults_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO
