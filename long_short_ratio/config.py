"""
Long/Short Ratio - Configuration.

============================================================
CONFIGURABLE ROSTER AND TRANSPORT
============================================================

- Which exchanges the aggregator calls, and in which order
- Per-request HTTP timeout inside each adapter
- Percent-sum tolerance used to flag upstream anomalies
- Source of the taker volume summary
- Defaults used by the HTTP routes and the CLI

Configuration can be loaded from:
- Default values
- Environment variables (LSR_*), optionally from a .env file

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from .exceptions import ConfigurationError
from .models import Timeframe, parse_symbol


logger = logging.getLogger(__name__)


DEFAULT_EXCHANGES: tuple[str, ...] = (
    "binanceusdm",
    "bybit",
    "okx",
    "bitget",
    "huobi",
    "krakenfutures",
    "gateio",
)


@dataclass
class LongShortConfig:
    """
    Main configuration for ratio aggregation.

    Environment variables:
    - LSR_EXCHANGES              comma separated exchange ids
    - LSR_REQUEST_TIMEOUT        seconds
    - LSR_PERCENT_SUM_TOLERANCE  percentage points
    - LSR_TAKER_VOLUME_SOURCE    exchange id
    - LSR_DEFAULT_SYMBOL
    - LSR_DEFAULT_TIMEFRAME
    - LSR_USER_AGENT
    - DASHBOARD_HOST, DASHBOARD_PORT (or PORT)
    """
    exchanges: list[str] = field(default_factory=lambda: list(DEFAULT_EXCHANGES))
    request_timeout: float = 10.0
    percent_sum_tolerance: float = 0.01
    taker_volume_source: str = "binanceusdm"
    default_symbol: str = "BTC"
    default_timeframe: Timeframe = Timeframe.M5
    user_agent: str = "LongShortRatio/1.0"
    dashboard_host: str = "0.0.0.0"
    dashboard_port: int = 8000

    def __post_init__(self) -> None:
        self.exchanges = [e.strip().lower() for e in self.exchanges if e and e.strip()]
        if not self.exchanges:
            raise ConfigurationError("At least one exchange must be enabled", config_key="exchanges")
        if len(set(self.exchanges)) != len(self.exchanges):
            raise ConfigurationError(
                f"Duplicate exchange ids: {self.exchanges}", config_key="exchanges"
            )
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be > 0", config_key="request_timeout")
        if self.percent_sum_tolerance < 0:
            raise ConfigurationError(
                "percent_sum_tolerance must be >= 0", config_key="percent_sum_tolerance"
            )
        self.taker_volume_source = self.taker_volume_source.strip().lower()
        try:
            self.default_symbol = parse_symbol(self.default_symbol)
        except ValueError as e:
            raise ConfigurationError(str(e), config_key="default_symbol", original_error=e)
        try:
            self.default_timeframe = Timeframe.parse(self.default_timeframe)
        except ValueError as e:
            raise ConfigurationError(str(e), config_key="default_timeframe", original_error=e)
        if not 0 < self.dashboard_port < 65536:
            raise ConfigurationError(
                f"dashboard_port must be 1-65535, got {self.dashboard_port}", config_key="dashboard_port"
            )

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "LongShortConfig":
        """Load configuration from environment variables."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        if env.get("LSR_EXCHANGES"):
            kwargs["exchanges"] = env["LSR_EXCHANGES"].split(",")
        if env.get("LSR_REQUEST_TIMEOUT"):
            kwargs["request_timeout"] = _parse_float(env["LSR_REQUEST_TIMEOUT"], "LSR_REQUEST_TIMEOUT")
        if env.get("LSR_PERCENT_SUM_TOLERANCE"):
            kwargs["percent_sum_tolerance"] = _parse_float(
                env["LSR_PERCENT_SUM_TOLERANCE"], "LSR_PERCENT_SUM_TOLERANCE"
            )
        if env.get("LSR_TAKER_VOLUME_SOURCE"):
            kwargs["taker_volume_source"] = env["LSR_TAKER_VOLUME_SOURCE"]
        if env.get("LSR_DEFAULT_SYMBOL"):
            kwargs["default_symbol"] = env["LSR_DEFAULT_SYMBOL"]
        if env.get("LSR_DEFAULT_TIMEFRAME"):
            kwargs["default_timeframe"] = env["LSR_DEFAULT_TIMEFRAME"]
        if env.get("LSR_USER_AGENT"):
            kwargs["user_agent"] = env["LSR_USER_AGENT"]
        if env.get("DASHBOARD_HOST"):
            kwargs["dashboard_host"] = env["DASHBOARD_HOST"]
        port = env.get("DASHBOARD_PORT") or env.get("PORT")
        if port:
            kwargs["dashboard_port"] = _parse_int(port, "DASHBOARD_PORT")

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "exchanges": list(self.exchanges),
            "request_timeout": self.request_timeout,
            "percent_sum_tolerance": self.percent_sum_tolerance,
            "taker_volume_source": self.taker_volume_source,
            "default_symbol": self.default_symbol,
            "default_timeframe": self.default_timeframe.value,
            "user_agent": self.user_agent,
            "dashboard_host": self.dashboard_host,
            "dashboard_port": self.dashboard_port,
        }


def _parse_float(value: str, key: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number, got {value!r}", config_key=key, original_error=e)


def _parse_int(value: str, key: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}", config_key=key, original_error=e)


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_config: Optional[LongShortConfig] = None


def get_config() -> LongShortConfig:
    """Get the global configuration."""
    global _default_config
    if _default_config is None:
        _default_config = LongShortConfig.from_env()
        logger.debug(f"Loaded configuration: {_default_config.to_dict()}")
    return _default_config


def set_config(config: Optional[LongShortConfig]) -> None:
    """Set (or reset with None) the global configuration."""
    global _default_config
    _default_config = config
