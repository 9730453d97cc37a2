"""
Bybit - Public API adapter for the linear perpetual account ratio.
"""

from typing import Any

from long_short_ratio.base import BaseRatioSource, latest_point
from long_short_ratio.derivation import from_fractions, to_decimal
from long_short_ratio.exceptions import DataShapeError, TransportError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    Timeframe,
)


class BybitRatioSource(BaseRatioSource):
    """
    Bybit v5 account ratio.

    Endpoint:
    - /v5/market/account-ratio (category=linear)

    Wrapped in {"retCode": 0, "result": {"list": [...]}}; rows carry
    buyRatio and sellRatio as fractions and no ratio of their own.
    """

    EXCHANGE_ID = "bybit"
    DISPLAY_NAME = "Bybit"
    BASE_URL = "https://api.bybit.com"
    STRATEGY = DerivationStrategy.DIRECT_PERCENTAGE

    TIMEFRAME_MAP = {
        Timeframe.M5: "5min",
        Timeframe.M15: "15min",
        Timeframe.M30: "30min",
        Timeframe.H1: "1h",
        Timeframe.H4: "4h",
        Timeframe.D1: "1d",
    }

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTCUSDT"""
        return f"{symbol.upper()}USDT"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/v5/market/account-ratio"
        params = {
            "category": "linear",
            "symbol": native_symbol,
            "period": native_timeframe,
            "limit": "1",
        }
        response = await self._make_request(url, params=params)

        if not isinstance(response, dict):
            raise DataShapeError("Unexpected response format", source_name=self.name, raw_data=response)
        if response.get("retCode", 0) != 0:
            raise TransportError(
                message=f"Bybit API error: {response.get('retMsg', 'Unknown error')}",
                source_name=self.name,
                response_body=str(response)[:1000],
            )
        return (response.get("result") or {}).get("list")

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        point = latest_point(raw, "timestamp", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)

        figures = from_fractions(
            to_decimal(point.get("buyRatio"), "buyRatio", self.name),
            to_decimal(point.get("sellRatio"), "sellRatio", self.name),
        )
        return self._ratio_record(figures, raw_info=point)
