"""
Tests for loading configuration sets and deriving module configs from them.
"""

import pytest
import yaml

from billing_config import get_active_config
from billing_config.loader import compute_checksum, parse_configuration_set
from billing_modules.analytics import AnalyticsConfig


def _write_set(directory, name, data):
    path = directory / f"{name}.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


MINIMAL = {"config_id": "test-practice", "version": 2, "currency": "eur"}


class TestGetActiveConfig:
    def test_default_set(self):
        config = get_active_config()

        assert config.config_id == "practice-default"
        assert config.currency == "USD"
        assert config.analytics["max_page_size"] == 100
        assert config.fee_adjustment == {"allow_edits_on_terminal_invoices": False}

    def test_custom_directory(self, tmp_path):
        _write_set(tmp_path, "clinic", MINIMAL)

        config = get_active_config(config_dir=tmp_path, name="clinic")

        assert config.currency == "EUR"
        assert config.version == 2
        assert config.analytics == {}

    def test_missing_set(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(config_dir=tmp_path, name="absent")

    def test_trace_logged(self, captured_logs):
        config = get_active_config()

        traces = [r for r in captured_logs() if r["message"] == "BILLING_CONFIG_TRACE"]
        assert traces[0]["config_set_id"] == "practice-default"
        assert traces[0]["checksum"] == config.checksum


class TestParseConfigurationSet:
    def test_checksum_is_key_order_independent(self):
        reordered = {"currency": "eur", "version": 2, "config_id": "test-practice"}
        assert compute_checksum(MINIMAL) == compute_checksum(reordered)
        assert compute_checksum(MINIMAL) != compute_checksum({**MINIMAL, "version": 3})

    def test_missing_config_id(self):
        with pytest.raises(KeyError):
            parse_configuration_set({"version": 1})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"currency": "XXQ"},
            {"version": 0},
            {"display_decimal_places": 12},
            {"analytics": ["not", "a", "mapping"]},
            {"config_id": " "},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            parse_configuration_set({**MINIMAL, **overrides})


class TestAnalyticsConfig:
    def test_from_default_set(self):
        config = AnalyticsConfig.from_config_set(get_active_config())

        assert config.default_page_size == 10
        assert config.max_page_size == 100
        assert config.slow_query_threshold_ms == 1000
        assert config.display_decimal_places == 2

    def test_section_overrides(self, tmp_path):
        _write_set(tmp_path, "clinic", {**MINIMAL, "analytics": {"default_page_size": 25}})

        config = AnalyticsConfig.from_config_set(
            get_active_config(config_dir=tmp_path, name="clinic"),
        )

        assert config.default_page_size == 25
        assert config.currency == "EUR"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_page_size": 0},
            {"default_page_size": 50, "max_page_size": 20},
            {"display_decimal_places": 10},
            {"slow_query_threshold_ms": -1},
            {"currency": "??"},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AnalyticsConfig(**kwargs)

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            AnalyticsConfig.from_dict({"page_limit": 5})
