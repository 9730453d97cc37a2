"""
Tests for the HTTP routes.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from long_short_ratio import api
from long_short_ratio.aggregator import RatioAggregator
from long_short_ratio.config import LongShortConfig, set_config
from long_short_ratio.exceptions import TransportError
from long_short_ratio.providers import BinanceTakerVolumeSource


@pytest.fixture
def client():
    return TestClient(api.app)


@pytest.fixture
def fake_aggregator(fake_source_cls):
    return RatioAggregator([
        fake_source_cls("binanceusdm", long_fraction="0.75", short_fraction="0.25"),
        fake_source_cls("bybit", behaviour="fail"),
    ])


class TestHealth:

    def test_health(self, client):
        set_config(LongShortConfig(exchanges=["okx"]))
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["exchanges"] == ["okx"]


class TestLongShortRatio:

    def test_returns_one_entry_per_exchange(self, client, fake_aggregator):
        with patch.object(api, "get_default_aggregator", return_value=fake_aggregator):
            response = client.get("/api/long-short-ratio", params={"symbol": "eth", "timeframe": "1h"})

        assert response.status_code == 200
        data = response.json()
        assert [item["exchange"] for item in data] == ["binanceusdm", "bybit"]
        assert data[0]["status"] == "Success"
        assert data[0]["longPercent"] == 75.0
        assert data[0]["shortPercent"] == 25.0
        assert data[0]["longShortRatio"] == 3.0
        assert data[1] == {"exchange": "bybit", "status": "Error", "message": "HTTP 503: unavailable"}

    def test_defaults(self, client, fake_aggregator):
        mock_aggregate = AsyncMock(return_value=[])
        fake_aggregator.aggregate = mock_aggregate
        with patch.object(api, "get_default_aggregator", return_value=fake_aggregator):
            response = client.get("/api/long-short-ratio")

        assert response.status_code == 200
        symbol, timeframe = mock_aggregate.call_args.args
        assert symbol == "BTC"
        assert timeframe.value == "5m"

    def test_bad_timeframe(self, client):
        response = client.get("/api/long-short-ratio", params={"timeframe": "1w"})

        assert response.status_code == 400
        assert "Invalid timeframe" in response.json()["detail"]

    def test_path_like_symbol_rejected_before_fan_out(self, client, fake_aggregator):
        mock_aggregate = AsyncMock(return_value=[])
        fake_aggregator.aggregate = mock_aggregate
        with patch.object(api, "get_default_aggregator", return_value=fake_aggregator):
            response = client.get(
                "/api/long-short-ratio",
                params={"symbol": "../../../derivatives/api/v3/accounts?x=", "timeframe": "5m"},
            )

        assert response.status_code == 400
        assert "Invalid symbol" in response.json()["detail"]
        mock_aggregate.assert_not_called()


class TestTakerVolumeSummary:

    def test_keyed_by_timeframe(self, client):
        payload = [{"buySellRatio": "3", "buyVol": "300", "sellVol": "100", "timestamp": 1}]
        with patch.object(BinanceTakerVolumeSource, "_make_request", AsyncMock(return_value=payload)):
            response = client.get("/api/taker-volume-summary", params={"symbol": "BTC"})

        assert response.status_code == 200
        data = response.json()
        assert list(data) == ["5m", "15m", "30m", "1h", "4h", "1d"]
        assert data["1h"]["totalVolume"] == 400.0
        assert data["1h"]["longs"] == 300.0
        assert data["1h"]["shorts"] == 100.0

    def test_unknown_source(self, client):
        response = client.get("/api/taker-volume-summary", params={"source": "bitget"})
        assert response.status_code == 400

    def test_invalid_symbol(self, client):
        mock_request = AsyncMock()
        with patch.object(BinanceTakerVolumeSource, "_make_request", mock_request):
            response = client.get("/api/taker-volume-summary", params={"symbol": "BTC/USDT"})

        assert response.status_code == 400
        mock_request.assert_not_called()


class TestAvailableMarkets:

    def test_lists_markets(self, client):
        with patch.object(api, "available_markets", AsyncMock(return_value=["BTC", "ETH"])):
            response = client.get("/api/available-markets")

        assert response.status_code == 200
        assert response.json() == ["BTC", "ETH"]

    def test_upstream_failure_is_502(self, client):
        error = TransportError("Connection error: refused", source_name="binanceusdm")
        with patch.object(api, "available_markets", AsyncMock(side_effect=error)):
            response = client.get("/api/available-markets")

        assert response.status_code == 502
        assert response.json()["detail"] == "Connection error: refused"
