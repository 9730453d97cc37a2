"""
Tests for the API server runner.
"""

from unittest.mock import patch

import run_dashboard
from long_short_ratio.config import get_config


class TestRunDashboard:

    def test_binds_from_config(self):
        env = {"DASHBOARD_HOST": "127.0.0.1", "DASHBOARD_PORT": "9100", "LSR_EXCHANGES": "okx"}
        with patch.object(run_dashboard.uvicorn, "run") as mock_run:
            exit_code = run_dashboard.main(env)

        assert exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.args == ("long_short_ratio.api:app",)
        assert mock_run.call_args.kwargs["host"] == "127.0.0.1"
        assert mock_run.call_args.kwargs["port"] == 9100
        assert mock_run.call_args.kwargs["reload"] is False
        # The app serves the configuration the runner validated
        assert get_config().exchanges == ["okx"]

    def test_invalid_configuration_does_not_start(self):
        with patch.object(run_dashboard.uvicorn, "run") as mock_run:
            exit_code = run_dashboard.main({"LSR_EXCHANGES": "kucoin,kucoin"})

        assert exit_code == 1
        mock_run.assert_not_called()

    def test_server_failure_exit_code(self):
        with patch.object(run_dashboard.uvicorn, "run", side_effect=OSError("address in use")):
            assert run_dashboard.main({}) == 1
