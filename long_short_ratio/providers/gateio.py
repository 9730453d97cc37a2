"""
Gate.io - Public API adapters built on USDT futures contract statistics.

One endpoint serves both metrics: top_lsr_account for the ratio and
long_taker_size / short_taker_size for taker volume.
"""

from typing import Any

from long_short_ratio.base import BaseRatioSource, BaseTakerVolumeSource, latest_point
from long_short_ratio.derivation import from_ratio, to_decimal
from long_short_ratio.exceptions import DataShapeError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    TakerVolume,
    Timeframe,
)


GATEIO_URL = "https://api.gateio.ws"

GATEIO_INTERVALS = {
    Timeframe.M5: "5m",
    Timeframe.M15: "15m",
    Timeframe.M30: "30m",
    Timeframe.H1: "1h",
    Timeframe.H4: "4h",
    Timeframe.D1: "1d",
}


class _ContractStatsMixin:
    """Shared request for /api/v4/futures/usdt/contract_stats."""

    name: str
    BASE_URL: str

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTC_USDT"""
        return f"{symbol.upper()}_USDT"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/api/v4/futures/usdt/contract_stats"
        params = {
            "contract": native_symbol,
            "interval": native_timeframe,
            "limit": "1",
        }
        return await self._make_request(url, params=params)

    def _latest_stats(self, raw: Any) -> dict[str, Any]:
        point = latest_point(raw, "time", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)
        return point


class GateioRatioSource(_ContractStatsMixin, BaseRatioSource):
    """Gate.io top-trader account long/short ratio (ratio only)."""

    EXCHANGE_ID = "gateio"
    DISPLAY_NAME = "Gate.io"
    BASE_URL = GATEIO_URL
    STRATEGY = DerivationStrategy.RATIO_ONLY
    TIMEFRAME_MAP = GATEIO_INTERVALS

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        point = self._latest_stats(raw)
        ratio = to_decimal(point.get("top_lsr_account"), "top_lsr_account", self.name)
        return self._ratio_record(from_ratio(ratio), raw_info=point)


class GateioTakerVolumeSource(_ContractStatsMixin, BaseTakerVolumeSource):
    """Gate.io taker long/short size."""

    EXCHANGE_ID = "gateio"
    DISPLAY_NAME = "Gate.io"
    BASE_URL = GATEIO_URL
    TIMEFRAME_MAP = GATEIO_INTERVALS

    def normalize(self, raw: Any, request: RatioRequest) -> TakerVolume:
        point = self._latest_stats(raw)
        return self._volume_record(
            request,
            to_decimal(point.get("long_taker_size"), "long_taker_size", self.name),
            to_decimal(point.get("short_taker_size"), "short_taker_size", self.name),
            raw_info=point,
        )
