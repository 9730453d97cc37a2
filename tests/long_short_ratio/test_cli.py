"""
Tests for the command line interface.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from long_short_ratio import cli
from long_short_ratio.aggregator import RatioAggregator
from long_short_ratio.config import LongShortConfig, set_config
from long_short_ratio.exceptions import TransportError
from long_short_ratio.models import NormalizedRatio


class TestRendering:

    def test_bar_width(self):
        assert cli.render_bar(75.0, width=8) == "######--"
        assert cli.render_bar(0.0, width=4) == "----"
        assert cli.render_bar(120.0, width=4) == "####"

    def test_format_failed_record(self):
        line = cli.format_ratio(NormalizedRatio.error("okx", "Timeframe '1d' not supported."))
        assert "okx" in line
        assert "Error: Timeframe '1d' not supported." in line

    def test_format_success_record(self):
        record = NormalizedRatio.success("bybit", Decimal("60"), Decimal("40"), Decimal("1.5"))
        line = cli.format_ratio(record)
        assert "L  60.00%" in line
        assert "R 1.5000" in line


class TestCommands:

    @pytest.fixture(autouse=True)
    def config(self):
        set_config(LongShortConfig(exchanges=["binanceusdm"]))

    def test_ratio_json(self, capsys, fake_source_cls):
        aggregator = RatioAggregator([fake_source_cls("binanceusdm")])
        with patch.object(cli, "build_aggregator", return_value=aggregator):
            exit_code = cli.main(["ratio", "--symbol", "eth", "--timeframe", "4h", "--json"])

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data[0]["exchange"] == "binanceusdm"
        assert data[0]["longPercent"] == 60.0

    def test_markets_failure_exit_code(self, capsys):
        error = TransportError("HTTP 451: restricted", source_name="binanceusdm")
        with patch.object(cli, "available_markets", AsyncMock(side_effect=error)):
            exit_code = cli.main(["markets"])

        assert exit_code == 1
        assert "HTTP 451: restricted" in capsys.readouterr().err

    def test_rejects_unknown_timeframe(self):
        with pytest.raises(SystemExit):
            cli.main(["ratio", "--timeframe", "1w"])

    def test_rejects_invalid_symbol(self, capsys):
        with patch.object(cli, "build_aggregator") as mock_build:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["ratio", "--symbol", "../x?y="])

        assert exc_info.value.code == 2
        assert "Invalid symbol" in capsys.readouterr().err
        mock_build.assert_not_called()
