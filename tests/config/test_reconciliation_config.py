"""Tests for ReconciliationConfig, the YAML loader and get_active_config."""

from decimal import Decimal

import pytest
import yaml

from stock_config import get_active_config
from stock_config.loader import load_config, parse_config
from stock_config.schema import ReconciliationConfig
from stock_kernel.exceptions import InvalidConfigError


# =============================================================================
# Schema validation
# =============================================================================


class TestReconciliationConfig:

    def test_defaults(self):
        config = ReconciliationConfig.with_defaults()
        assert config.default_page_size == 200
        assert (config.min_page_size, config.max_page_size) == (1, 2000)
        assert config.quantity_places == 4
        assert config.totals_tolerance == Decimal("0")
        assert config.deadline_seconds is None
        assert config.report_version == "1"

    @pytest.mark.parametrize("overrides, field", [
        ({"min_page_size": 0}, "min_page_size"),
        ({"max_page_size": 2001}, "max_page_size"),
        ({"min_page_size": 50, "max_page_size": 10, "default_page_size": 10}, "min_page_size"),
        ({"default_page_size": 3000}, "default_page_size"),
        ({"quantity_places": -1}, "quantity_places"),
        ({"totals_tolerance": Decimal("-0.1")}, "totals_tolerance"),
        ({"deadline_seconds": 0}, "deadline_seconds"),
        ({"report_version": ""}, "report_version"),
    ])
    def test_rejects_invalid(self, overrides, field):
        with pytest.raises(InvalidConfigError) as exc_info:
            ReconciliationConfig(**overrides)
        assert exc_info.value.field == field
        assert exc_info.value.code == "INVALID_CONFIG"

    def test_frozen(self):
        config = ReconciliationConfig()
        with pytest.raises(AttributeError):
            config.default_page_size = 10


class TestFromDict:

    def test_converts_tolerance_and_version(self):
        config = ReconciliationConfig.from_dict({"totals_tolerance": 0.001, "report_version": 2})
        assert config.totals_tolerance == Decimal("0.001")
        assert config.report_version == "2"

    def test_unknown_key(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            ReconciliationConfig.from_dict({"page_size": 10})
        assert exc_info.value.field == "page_size"

    def test_bad_tolerance(self):
        with pytest.raises(InvalidConfigError):
            ReconciliationConfig.from_dict({"totals_tolerance": "lots"})


# =============================================================================
# Loader
# =============================================================================


class TestLoader:

    def test_load_file(self, tmp_path):
        path = tmp_path / "report.yaml"
        path.write_text(yaml.safe_dump({
            "reconciliation": {"default_page_size": 25, "deadline_seconds": 2.5},
        }))
        config = load_config(path)
        assert config.default_page_size == 25
        assert config.deadline_seconds == 2.5

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ReconciliationConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_section_must_be_mapping(self):
        with pytest.raises(InvalidConfigError):
            parse_config({"reconciliation": [1, 2]})

    def test_root_must_be_mapping(self):
        with pytest.raises(InvalidConfigError):
            parse_config(["reconciliation"])


class TestGetActiveConfig:

    def test_bundled_defaults(self):
        assert get_active_config() == ReconciliationConfig()

    def test_emits_config_trace(self, tmp_path, captured_logs):
        path = tmp_path / "report.yaml"
        path.write_text("reconciliation:\n  max_page_size: 500\n")
        config = get_active_config(path)
        assert config.max_page_size == 500
        traces = [r for r in captured_logs() if r["message"] == "STOCK_CONFIG_TRACE"]
        assert traces[0]["config_path"] == str(path)
        assert traces[0]["max_page_size"] == 500
