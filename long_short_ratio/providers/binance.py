"""
Binance USDⓈ-M Futures - Public API adapters.

Implements long/short account ratio, taker buy/sell volume and the list
of tradable perpetual markets. No authentication required.
"""

import logging
from typing import Any

from long_short_ratio.base import BaseRatioSource, BaseTakerVolumeSource, latest_point
from long_short_ratio.derivation import from_fractions, to_decimal
from long_short_ratio.exceptions import DataShapeError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    TakerVolume,
    Timeframe,
)


logger = logging.getLogger(__name__)


BINANCE_FUTURES_URL = "https://fapi.binance.com"

# Binance uses the canonical tokens for every window
BINANCE_PERIODS = {
    Timeframe.M5: "5m",
    Timeframe.M15: "15m",
    Timeframe.M30: "30m",
    Timeframe.H1: "1h",
    Timeframe.H4: "4h",
    Timeframe.D1: "1d",
}


def binance_symbol(symbol: str) -> str:
    """BTC -> BTCUSDT"""
    return f"{symbol.upper()}USDT"


class BinanceRatioSource(BaseRatioSource):
    """
    Binance Futures global long/short account ratio.

    Endpoint:
    - /futures/data/globalLongShortAccountRatio

    Response rows carry longAccount and shortAccount as fractions plus the
    exchange's own longShortRatio.
    """

    EXCHANGE_ID = "binanceusdm"
    DISPLAY_NAME = "Binance"
    BASE_URL = BINANCE_FUTURES_URL
    STRATEGY = DerivationStrategy.DIRECT_PERCENTAGE
    TIMEFRAME_MAP = BINANCE_PERIODS

    def format_symbol(self, symbol: str) -> str:
        return binance_symbol(symbol)

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/futures/data/globalLongShortAccountRatio"
        params = {
            "symbol": native_symbol,
            "period": native_timeframe,
            "limit": "1",
        }
        return await self._make_request(url, params=params)

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        point = latest_point(raw, "timestamp", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)

        ratio = point.get("longShortRatio")
        figures = from_fractions(
            to_decimal(point.get("longAccount"), "longAccount", self.name),
            to_decimal(point.get("shortAccount"), "shortAccount", self.name),
            to_decimal(ratio, "longShortRatio", self.name) if ratio is not None else None,
        )
        return self._ratio_record(figures, raw_info=point)

    async def get_available_symbols(self, quote_asset: str = "USDT") -> list[str]:
        """
        Base assets of tradable USDⓈ-M perpetual contracts.

        Unlike fetch(), this raises TransportError/DataShapeError to the
        caller.
        """
        data = await self._make_request(f"{self.BASE_URL}/fapi/v1/exchangeInfo")

        symbols = data.get("symbols") if isinstance(data, dict) else None
        if not isinstance(symbols, list):
            raise DataShapeError(
                "Missing field 'symbols' in exchangeInfo",
                source_name=self.name,
                field_name="symbols",
            )

        bases = {
            item["baseAsset"]
            for item in symbols
            if isinstance(item, dict)
            and item.get("contractType") == "PERPETUAL"
            and item.get("quoteAsset") == quote_asset
            and item.get("status") == "TRADING"
            and item.get("baseAsset")
        }
        logger.debug(f"[{self.name}] {len(bases)} {quote_asset} perpetual markets")
        return sorted(bases)


class BinanceTakerVolumeSource(BaseTakerVolumeSource):
    """
    Binance Futures taker buy/sell volume.

    Endpoint:
    - /futures/data/takerlongshortRatio (buyVol, sellVol, buySellRatio)
    """

    EXCHANGE_ID = "binanceusdm"
    DISPLAY_NAME = "Binance"
    BASE_URL = BINANCE_FUTURES_URL
    TIMEFRAME_MAP = BINANCE_PERIODS

    def format_symbol(self, symbol: str) -> str:
        return binance_symbol(symbol)

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/futures/data/takerlongshortRatio"
        params = {
            "symbol": native_symbol,
            "period": native_timeframe,
            "limit": "1",
        }
        return await self._make_request(url, params=params)

    def normalize(self, raw: Any, request: RatioRequest) -> TakerVolume:
        point = latest_point(raw, "timestamp", source_name=self.name)
        if not isinstance(point, dict):
            raise DataShapeError("Unexpected row format", source_name=self.name, raw_data=point)

        return self._volume_record(
            request,
            to_decimal(point.get("buyVol"), "buyVol", self.name),
            to_decimal(point.get("sellVol"), "sellVol", self.name),
            raw_info=point,
        )
