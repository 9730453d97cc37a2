"""
Bitget - Public API adapter for the USDT-futures account long/short ratio.
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


class BitgetRatioSource(BaseRatioSource):
    """
    Bitget v2 mix account long/short.

    Endpoint:
    - /api/v2/mix/market/account-long-short

    Wrapped in {"code": "00000", "data": [...]}; rows carry
    longAccountRatio and shortAccountRatio as fractions.
    """

    EXCHANGE_ID = "bitget"
    DISPLAY_NAME = "Bitget"
    BASE_URL = "https://api.bitget.com"
    STRATEGY = DerivationStrategy.DIRECT_PERCENTAGE

    # 1d not supported
    TIMEFRAME_MAP = {
        Timeframe.M5: "5m",
        Timeframe.M15: "15m",
        Timeframe.M30: "30m",
        Timeframe.H1: "1h",
        Timeframe.H4: "4h",
    }

    PRODUCT_TYPE = "USDT-FUTURES"
    SUCCESS_CODE = "00000"

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTCUSDT"""
        return f"{symbol.upper()}USDT"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/api/v2/mix/market/account-long-short"
        params = {
            "symbol": native_symbol,
            "productType": self.PRODUCT_TYPE,
            "period": native_timeframe,
        }
        response = await self._make_request(url, params=params)

        if not isinstance(response, dict):
            raise DataShapeError("Unexpected response format", source_name=self.name, raw_data=response)
        if str(response.get("code", self.SUCCESS_CODE)) != self.SUCCESS_CODE:
            raise TransportError(
                message=f"Bitget API error: {response.get('msg') or 'Unknown error'}",
                source_name=self.name,
                response_body=str(response)[:1000],
            )
        return response.get("data")

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        point = latest_point(raw, "ts", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)

        ratio = point.get("longShortAccountRatio")
        figures = from_fractions(
            to_decimal(point.get("longAccountRatio"), "longAccountRatio", self.name),
            to_decimal(point.get("shortAccountRatio"), "shortAccountRatio", self.name),
            to_decimal(ratio, "longShortAccountRatio", self.name) if ratio is not None else None,
        )
        return self._ratio_record(figures, raw_info=point)
