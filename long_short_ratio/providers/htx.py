"""
HTX (formerly Huobi) - Public API adapter for USDT-margined swaps.

The elite account ratio reports buy_ratio and sell_ratio next to a
locked_ratio, so the two sides do not sum to one on their own. They are
treated as raw amounts and normalized by their total.
"""

from typing import Any

from long_short_ratio.base import BaseRatioSource, latest_point
from long_short_ratio.derivation import from_volumes, to_decimal
from long_short_ratio.exceptions import DataShapeError, TransportError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    Timeframe,
)


class HTXRatioSource(BaseRatioSource):
    """
    HTX linear swap elite account ratio.

    Endpoint:
    - /linear-swap-api/v1/swap_elite_account_ratio

    Wrapped in {"status": "ok", "data": {"list": [...]}}.
    """

    EXCHANGE_ID = "huobi"
    DISPLAY_NAME = "HTX"
    BASE_URL = "https://api.hbdm.com"
    STRATEGY = DerivationStrategy.RAW_VOLUME

    TIMEFRAME_MAP = {
        Timeframe.M5: "5min",
        Timeframe.M15: "15min",
        Timeframe.M30: "30min",
        Timeframe.H1: "60min",
        Timeframe.H4: "4hour",
        Timeframe.D1: "1day",
    }

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTC-USDT"""
        return f"{symbol.upper()}-USDT"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/linear-swap-api/v1/swap_elite_account_ratio"
        params = {
            "contract_code": native_symbol,
            "period": native_timeframe,
        }
        response = await self._make_request(url, params=params)

        if not isinstance(response, dict):
            raise DataShapeError("Unexpected response format", source_name=self.name, raw_data=response)
        if response.get("status") != "ok":
            raise TransportError(
                message=f"HTX API error: {response.get('err_msg') or 'Unknown error'}",
                source_name=self.name,
                response_body=str(response)[:1000],
            )
        return (response.get("data") or {}).get("list")

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        point = latest_point(raw, "ts", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)

        figures = from_volumes(
            to_decimal(point.get("buy_ratio"), "buy_ratio", self.name),
            to_decimal(point.get("sell_ratio"), "sell_ratio", self.name),
        )
        return self._ratio_record(figures, raw_info=point)
