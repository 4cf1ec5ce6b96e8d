"""
Test Suite: Configuration overrides
"""

import pytest

from budget_pace.config import Config, get_config


class TestConfig:
    def test_defaults(self):
        config = Config()

        assert config.work_day_seconds == 28800
        assert (config.recent_days_window, config.recent_sessions_window) == (7, 5)
        assert (config.critical_horizon_days, config.warning_horizon_days) == (3, 7)
        assert config.item_pace_epsilon == 0.001
        assert config.span_through_now is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BP_RECENT_DAYS_WINDOW", "14")
        monkeypatch.setenv("BP_OVERAGE_CRITICAL_RATIO", "0.3")
        monkeypatch.setenv("BP_SPAN_THROUGH_NOW", "false")
        monkeypatch.setenv("BP_AZURE_BLOB_CONTAINER_NAME", "ledgers")

        config = Config.from_env()

        assert config.recent_days_window == 14
        assert config.overage_critical_ratio == pytest.approx(0.3)
        assert config.span_through_now is False
        assert config.azure_blob_container_name == "ledgers"
        assert config.azure_blob_connection_string is None

    def test_unparsable_values_keep_defaults(self, monkeypatch):
        monkeypatch.setenv("BP_ITEM_PACE_EPSILON", "tiny")
        monkeypatch.setenv("BP_MAX_NAMED_ITEMS", "two")

        config = Config.from_env()

        assert config.item_pace_epsilon == 0.001
        assert config.max_named_items == 2

    def test_get_config_reload(self, monkeypatch):
        monkeypatch.setenv("BP_WARNING_HORIZON_DAYS", "10")
        assert get_config(force_reload=True).warning_horizon_days == 10

        monkeypatch.delenv("BP_WARNING_HORIZON_DAYS")
        assert get_config(force_reload=True).warning_horizon_days == 7
