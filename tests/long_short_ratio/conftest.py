"""
Shared fixtures for long/short ratio tests.

No test reaches the network: adapters are either fakes defined here or
real adapters with _make_request patched.
"""

import asyncio
from decimal import Decimal
from typing import Any, Optional

import pytest

from long_short_ratio.aggregator import reset_default_aggregator
from long_short_ratio.base import BaseRatioSource
from long_short_ratio.config import set_config
from long_short_ratio.derivation import from_fractions
from long_short_ratio.exceptions import TransportError
from long_short_ratio.models import NormalizedRatio, RatioRequest, Timeframe


class FakeRatioSource(BaseRatioSource):
    """
    Scriptable adapter.

    behaviour:
        "ok"      - returns long/short fractions
        "fail"    - raises TransportError inside fetch_raw
        "boom"    - raises RuntimeError inside fetch_raw
        "slow"    - sleeps `delay` seconds, then succeeds
    """

    BASE_URL = "https://fake.invalid"
    TIMEFRAME_MAP = {tf: tf.value for tf in Timeframe}

    def __init__(
        self,
        exchange_id: str,
        behaviour: str = "ok",
        long_fraction: str = "0.6",
        short_fraction: str = "0.4",
        delay: float = 0.0,
        timeframes: Optional[dict] = None,
    ) -> None:
        super().__init__()
        self.EXCHANGE_ID = exchange_id
        self.behaviour = behaviour
        self.long_fraction = long_fraction
        self.short_fraction = short_fraction
        self.delay = delay
        self.calls = 0
        if timeframes is not None:
            self.TIMEFRAME_MAP = timeframes

    def format_symbol(self, symbol: str) -> str:
        return symbol

    async def fetch_raw(self, native_symbol: str, native_timeframe: Any, request: RatioRequest) -> Any:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.behaviour == "fail":
            raise TransportError("HTTP 503: unavailable", source_name=self.name, status_code=503)
        if self.behaviour == "boom":
            raise RuntimeError("kaboom")
        return {"long": self.long_fraction, "short": self.short_fraction}

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        figures = from_fractions(Decimal(raw["long"]), Decimal(raw["short"]))
        return self._ratio_record(figures, raw_info=raw)


@pytest.fixture
def fake_source_cls():
    return FakeRatioSource


@pytest.fixture
def btc_5m() -> RatioRequest:
    return RatioRequest(symbol="btc", timeframe="5m")


@pytest.fixture(autouse=True)
def reset_globals():
    """Isolate the module-level config and aggregator singletons."""
    set_config(None)
    reset_default_aggregator()
    yield
    set_config(None)
    reset_default_aggregator()
