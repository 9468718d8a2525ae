"""Configuration system unit tests."""

import pytest
from pydantic import ValidationError

from signal_sentry.domain.config import AppConfig, DatabaseConfig, MonitorConfig, get_config


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.env == "production"
        assert config.log_level == "INFO"
        assert config.log_json is True

    def test_db_url(self):
        config = AppConfig()
        assert "pymysql" in config.db.url
        assert config.db.host in config.db.url

    def test_sqlite_url(self):
        db = DatabaseConfig(driver="sqlite", name="/tmp/signals.db")
        assert db.url == "sqlite:////tmp/signals.db"

    def test_monitor_defaults(self):
        config = AppConfig()
        assert config.monitor.budget_seconds == 50.0
        assert config.monitor.fetch_limit == 1000
        assert config.monitor.timeframe == "1m"
        assert config.monitor.notional == 1000.0
        assert config.monitor.compare_and_swap is True

    def test_exchange_defaults(self):
        config = AppConfig()
        assert config.exchange.base_url == "https://fapi.binance.com"
        assert config.exchange.proxy_url == ""
        assert config.exchange.breaker_fail_max == 5

    def test_fetch_limit_bounds(self):
        with pytest.raises(ValidationError):
            MonitorConfig(fetch_limit=1501)
        with pytest.raises(ValidationError):
            MonitorConfig(fetch_limit=0)
        with pytest.raises(ValidationError):
            MonitorConfig(fetch_limit=1)
        assert MonitorConfig(fetch_limit=2).fetch_limit == 2

    def test_sub_configs(self):
        config = AppConfig()
        assert hasattr(config, "db")
        assert hasattr(config, "exchange")
        assert hasattr(config, "monitor")


class TestGetConfig:
    def test_singleton(self):
        c1 = get_config()
        c2 = get_config()
        assert c1 is c2

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DB_HOST", "testhost")
        monkeypatch.setenv("DB_PORT", "3308")
        monkeypatch.setenv("MONITOR_BUDGET_SECONDS", "20")
        monkeypatch.setenv("MONITOR_COMPARE_AND_SWAP", "false")
        monkeypatch.setenv("EXCHANGE_PROXY_URL", "http://proxy:3128")
        config = get_config()
        assert config.db.host == "testhost"
        assert config.db.port == 3308
        assert config.monitor.budget_seconds == 20.0
        assert config.monitor.compare_and_swap is False
        assert config.exchange.proxy_url == "http://proxy:3128"
