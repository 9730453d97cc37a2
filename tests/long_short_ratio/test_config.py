"""
Tests for configuration loading and validation.
"""

import pytest

from long_short_ratio.config import (
    DEFAULT_EXCHANGES,
    LongShortConfig,
    get_config,
    set_config,
)
from long_short_ratio.exceptions import ConfigurationError
from long_short_ratio.models import Timeframe


class TestDefaults:

    def test_defaults(self):
        config = LongShortConfig()
        assert config.exchanges == list(DEFAULT_EXCHANGES)
        assert config.request_timeout == 10.0
        assert config.percent_sum_tolerance == 0.01
        assert config.taker_volume_source == "binanceusdm"
        assert config.default_symbol == "BTC"
        assert config.default_timeframe is Timeframe.M5

    def test_to_dict(self):
        data = LongShortConfig().to_dict()
        assert data["default_timeframe"] == "5m"
        assert data["exchanges"][0] == "binanceusdm"


class TestFromEnv:

    def test_reads_environment(self):
        config = LongShortConfig.from_env({
            "LSR_EXCHANGES": " OKX, bybit ,,",
            "LSR_REQUEST_TIMEOUT": "2.5",
            "LSR_PERCENT_SUM_TOLERANCE": "0.5",
            "LSR_TAKER_VOLUME_SOURCE": "GateIO",
            "LSR_DEFAULT_SYMBOL": "eth",
            "LSR_DEFAULT_TIMEFRAME": "4h",
            "LSR_USER_AGENT": "test-agent",
        })
        assert config.exchanges == ["okx", "bybit"]
        assert config.request_timeout == 2.5
        assert config.percent_sum_tolerance == 0.5
        assert config.taker_volume_source == "gateio"
        assert config.default_symbol == "ETH"
        assert config.default_timeframe is Timeframe.H4
        assert config.user_agent == "test-agent"

    def test_empty_environment_gives_defaults(self):
        assert LongShortConfig.from_env({}) == LongShortConfig()

    @pytest.mark.parametrize("env", [
        {"LSR_REQUEST_TIMEOUT": "soon"},
        {"LSR_REQUEST_TIMEOUT": "0"},
        {"LSR_PERCENT_SUM_TOLERANCE": "-1"},
        {"LSR_DEFAULT_TIMEFRAME": "1w"},
        {"LSR_EXCHANGES": ","},
        {"LSR_EXCHANGES": "okx,OKX"},
        {"LSR_DEFAULT_SYMBOL": "BTC/USDT"},
        {"DASHBOARD_PORT": "http"},
        {"DASHBOARD_PORT": "70000"},
    ])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            LongShortConfig.from_env(env)


class TestDashboardBind:

    def test_defaults(self):
        config = LongShortConfig.from_env({})
        assert config.dashboard_host == "0.0.0.0"
        assert config.dashboard_port == 8000

    def test_dashboard_variables(self):
        config = LongShortConfig.from_env({"DASHBOARD_HOST": "127.0.0.1", "DASHBOARD_PORT": "9100"})
        assert config.dashboard_host == "127.0.0.1"
        assert config.dashboard_port == 9100

    def test_port_fallback(self):
        assert LongShortConfig.from_env({"PORT": "5000"}).dashboard_port == 5000
        assert LongShortConfig.from_env({"PORT": "5000", "DASHBOARD_PORT": "6000"}).dashboard_port == 6000


class TestGlobalConfig:

    def test_set_and_reset(self, monkeypatch):
        custom = LongShortConfig(exchanges=["okx"])
        set_config(custom)
        assert get_config() is custom

        set_config(None)
        monkeypatch.setenv("LSR_EXCHANGES", "bitget")
        assert get_config().exchanges == ["bitget"]
