"""
Kraken Futures - Charts analytics adapter.

The analytics endpoint returns history as parallel arrays, oldest first.
It is queried from two intervals back so that the latest point is always
inside the window.
"""

import time
from typing import Any, Callable

from long_short_ratio.base import BaseRatioSource
from long_short_ratio.derivation import from_series
from long_short_ratio.exceptions import DataShapeError
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    Timeframe,
)


class KrakenFuturesRatioSource(BaseRatioSource):
    """
    Kraken Futures long/short info.

    Endpoint:
    - /api/charts/v1/analytics/{symbol}/long-short-info

    Uses the top20Percent series (longPercent, shortPercent, ratio).
    """

    EXCHANGE_ID = "krakenfutures"
    DISPLAY_NAME = "Kraken Futures"
    BASE_URL = "https://futures.kraken.com"
    STRATEGY = DerivationStrategy.TIME_SERIES

    # Interval in seconds
    TIMEFRAME_MAP = {
        Timeframe.M5: 300,
        Timeframe.M15: 900,
        Timeframe.M30: 1800,
        Timeframe.H1: 3600,
        Timeframe.H4: 14400,
        Timeframe.D1: 86400,
    }

    LOOKBACK_INTERVALS = 2
    SERIES_KEY = "top20Percent"

    def __init__(self, *args: Any, clock: Callable[[], float] = time.time, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._clock = clock

    def format_symbol(self, symbol: str) -> str:
        """BTC -> btcusd"""
        return f"{symbol.lower()}usd"

    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        since = int(self._clock()) - native_timeframe * self.LOOKBACK_INTERVALS
        url = f"{self.BASE_URL}/api/charts/v1/analytics/{native_symbol}/long-short-info"
        params = {
            "since": str(since),
            "interval": str(native_timeframe),
        }
        return await self._make_request(url, params=params)

    def normalize(self, raw: Any, request: RatioRequest) -> NormalizedRatio:
        result = raw.get("result") if isinstance(raw, dict) else None
        data = result.get("data") if isinstance(result, dict) else None
        series = data.get(self.SERIES_KEY) if isinstance(data, dict) else None

        if not isinstance(series, dict) or not series.get("longPercent"):
            raise DataShapeError(
                "No data returned from Kraken API.",
                source_name=self.name,
                field_name=self.SERIES_KEY,
                raw_data=raw,
            )

        figures = from_series(
            series.get("longPercent"),
            series.get("shortPercent"),
            series.get("ratio"),
        )
        return self._ratio_record(figures, raw_info=series)
