"""
OKX - Public API adapters (trading statistics / "rubik" endpoints).

Implements the contract long/short account ratio and taker volume.
No authentication required for public endpoints.
"""

from typing import Any

from long_short_ratio.base import BaseRatioSource, BaseTakerVolumeSource, latest_point
from long_short_ratio.derivation import from_ratio, to_decimal
from long_short_ratio.exceptions import DataShapeError, TransportError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    TakerVolume,
    Timeframe,
)


OKX_URL = "https://www.okx.com"


class _OKXResponseMixin:
    """OKX wraps responses in {"code": "0", "data": [...], "msg": ""}."""

    name: str

    def _unwrap(self, response: Any) -> Any:
        if not isinstance(response, dict):
            raise DataShapeError("Unexpected response format", source_name=self.name, raw_data=response)

        code = str(response.get("code", "0"))
        if code != "0":
            raise TransportError(
                message=f"OKX API error: {response.get('msg') or 'Unknown error'} (code {code})",
                source_name=self.name,
                response_body=str(response)[:1000],
            )
        return response.get("data")


def _row_value(row: Any, index: int, field_name: str, source_name: str) -> Any:
    """OKX statistics rows are positional: [ts, value, ...]."""
    if not isinstance(row, (list, tuple)) or len(row) <= index:
        raise DataShapeError(
            f"Missing field '{field_name}'",
            source_name=source_name,
            field_name=field_name,
            raw_data=row,
        )
    return row[index]


class OKXRatioSource(_OKXResponseMixin, BaseRatioSource):
    """
    OKX contract long/short account ratio.

    Endpoint:
    - /api/v5/rubik/stat/contracts/long-short-account-ratio-contract

    Rows are [ts, longShortAcctRatio]; only the ratio is published, so
    percentages are derived from it. Daily data is not offered.
    """

    EXCHANGE_ID = "okx"
    DISPLAY_NAME = "OKX"
    BASE_URL = OKX_URL
    STRATEGY = DerivationStrategy.RATIO_ONLY

    TIMEFRAME_MAP = {
        Timeframe.M5: "5m",
        Timeframe.M15: "15m",
        Timeframe.M30: "30m",
        Timeframe.H1: "1H",
        Timeframe.H4: "4H",
    }

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTC-USDT-SWAP"""
        return f"{symbol.upper()}-USDT-SWAP"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/api/v5/rubik/stat/contracts/long-short-account-ratio-contract"
        params = {
            "instId": native_symbol,
            "period": native_timeframe,
            "limit": "1",
        }
        return self._unwrap(await self._make_request(url, params=params))

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        row = latest_point(raw, 0, source_name=self.name)
        ratio = to_decimal(_row_value(row, 1, "longShortAcctRatio", self.name), "longShortAcctRatio", self.name)
        return self._ratio_record(from_ratio(ratio), raw_info=row)


class OKXTakerVolumeSource(_OKXResponseMixin, BaseTakerVolumeSource):
    """
    OKX contract taker volume.

    Endpoint:
    - /api/v5/rubik/stat/taker-volume (instType=CONTRACTS)

    Rows are [ts, sellVol, buyVol]. Only 5m, 1H and 1D windows exist.
    """

    EXCHANGE_ID = "okx"
    DISPLAY_NAME = "OKX"
    BASE_URL = OKX_URL

    TIMEFRAME_MAP = {
        Timeframe.M5: "5m",
        Timeframe.H1: "1H",
        Timeframe.D1: "1D",
    }

    def format_symbol(self, symbol: str) -> str:
        """BTC -> BTC (the endpoint is keyed by currency)"""
        return symbol.upper()

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        url = f"{self.BASE_URL}/api/v5/rubik/stat/taker-volume"
        params = {
            "ccy": native_symbol,
            "instType": "CONTRACTS",
            "period": native_timeframe,
        }
        return self._unwrap(await self._make_request(url, params=params))

    def normalize(self, raw: Any, request: RatioRequest) -> TakerVolume:
        row = latest_point(raw, 0, source_name=self.name)
        return self._volume_record(
            request,
            buy_volume=to_decimal(_row_value(row, 2, "buyVol", self.name), "buyVol", self.name),
            sell_volume=to_decimal(_row_value(row, 1, "sellVol", self.name), "sellVol", self.name),
            raw_info=row,
        )
