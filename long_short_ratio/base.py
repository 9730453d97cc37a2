"""
Base Exchange Source - Abstract interface for all exchange adapters.

All adapters MUST implement this interface to ensure:
- Isolation: one adapter never affects another
- Fail-safety: fetch() never raises, every failure becomes a record
- Capability checks before any network call
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Generic, Optional, TypeVar

import aiohttp

from long_short_ratio.derivation import RatioFigures, from_volumes
from long_short_ratio.exceptions import (
    CapabilityGapError,
    DataShapeError,
    LongShortError,
    TransportError,
    UnsupportedTimeframeError,
)
from long_short_ratio.models import (
    DerivationStrategy,
    NormalizedRatio,
    RatioRequest,
    RatioStatus,
    TakerVolume,
    Timeframe,
)


logger = logging.getLogger(__name__)

R = TypeVar("R")


def latest_point(
    rows: Any,
    timestamp_key: Any,
    source_name: Optional[str] = None,
) -> Any:
    """
    Pick the most recent data point from a list of rows.

    Rows are dicts (timestamp_key is a key) or lists (timestamp_key is an
    index). Falls back to the last row when timestamps are unusable.

    Raises:
        DataShapeError: If rows is not a non-empty list
    """
    if not isinstance(rows, list) or not rows:
        raise DataShapeError(
            "Exchange returned no data.",
            source_name=source_name,
            raw_data=rows,
        )
    try:
        return max(rows, key=lambda row: float(row[timestamp_key]))
    except (KeyError, IndexError, TypeError, ValueError):
        return rows[-1]


class BaseExchangeSource(ABC, Generic[R]):
    """
    Abstract base class for every exchange adapter.

    Each adapter must:
    1. Declare EXCHANGE_ID, BASE_URL and TIMEFRAME_MAP
    2. Implement format_symbol() - canonical ticker -> exchange symbol
    3. Implement fetch_raw() - one HTTP call, raw payload out
    4. Implement normalize() - raw payload -> record

    An empty TIMEFRAME_MAP means the exchange has no such metric at all.
    """

    EXCHANGE_ID: str = ""
    DISPLAY_NAME: str = ""
    BASE_URL: str = ""
    METRIC: str = ""
    STRATEGY: DerivationStrategy = DerivationStrategy.DIRECT_PERCENTAGE

    # Canonical timeframe -> exchange-native token
    TIMEFRAME_MAP: dict[Timeframe, Any] = {}

    DEFAULT_TIMEOUT = 10.0
    DEFAULT_USER_AGENT = "LongShortRatio/1.0"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout = timeout
        self._session = session
        self._user_agent = user_agent

    @property
    def name(self) -> str:
        """Unique identifier for this adapter."""
        return self.EXCHANGE_ID

    def supports_metric(self) -> bool:
        return bool(self.TIMEFRAME_MAP)

    def supported_timeframes(self) -> list[Timeframe]:
        """Canonical timeframes this exchange answers for, in canonical order."""
        return [tf for tf in Timeframe if tf in self.TIMEFRAME_MAP]

    def native_timeframe(self, timeframe: Timeframe) -> Any:
        """
        Translate a canonical timeframe into the exchange's own token.

        Raises:
            CapabilityGapError: If the exchange has no such metric
            UnsupportedTimeframeError: If only this timeframe is missing
        """
        if not self.supports_metric():
            raise CapabilityGapError(
                f"{self.DISPLAY_NAME or self.name} does not provide {self.METRIC}.",
                source_name=self.name,
            )
        native = self.TIMEFRAME_MAP.get(timeframe)
        if native is None:
            raise UnsupportedTimeframeError(timeframe.value, source_name=self.name)
        return native

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.name,
            "display_name": self.DISPLAY_NAME,
            "metric": self.METRIC,
            "strategy": self.STRATEGY.value,
            "base_url": self.BASE_URL,
            "timeframes": [tf.value for tf in self.supported_timeframes()],
        }

    @abstractmethod
    def format_symbol(self, symbol: str) -> str:
        """Build the exchange-native contract identifier from a base ticker."""

    @abstractmethod
    async def fetch_raw(
        self,
        native_symbol: str,
        native_timeframe: Any,
        request: RatioRequest,
    ) -> Any:
        """
        Fetch the raw payload from the exchange.

        Raises:
            TransportError: On network failure or a non-success response
        """

    @abstractmethod
    def normalize(self, raw: Any, request: RatioRequest) -> R:
        """
        Turn the raw payload into a success record.

        Raises:
            DataShapeError: If expected fields are absent or malformed
        """

    @abstractmethod
    def _not_supported_record(self, request: RatioRequest, message: str) -> R:
        ...

    @abstractmethod
    def _error_record(self, request: RatioRequest, message: str) -> R:
        ...

    async def fetch(self, request: RatioRequest) -> R:
        """
        Fetch and normalize one snapshot (main entry point).

        Note:
            Never raises - every failure is returned as a record with a
            non-success status. There are no retries.
        """
        try:
            native_timeframe = self.native_timeframe(request.timeframe)
            native_symbol = self.format_symbol(request.symbol)
            raw = await self.fetch_raw(native_symbol, native_timeframe, request)
            return self.normalize(raw, request)

        except CapabilityGapError as e:
            logger.info(f"[{self.name}] {e.message}")
            return self._not_supported_record(request, e.message)

        except LongShortError as e:
            logger.warning(f"[{self.name}] {request.symbol} {request.timeframe.value}: {e}")
            return self._error_record(request, e.message)

        except Exception as e:
            logger.error(
                f"[{self.name}] Unexpected error for {request.symbol} "
                f"{request.timeframe.value}: {e}",
                exc_info=True,
            )
            return self._error_record(request, f"Unexpected error: {e}")

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "User-Agent": self._user_agent,
        }

    async def _make_request(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        GET a JSON document.

        Uses the injected session when there is one, otherwise a session
        that lives for this call only.
        """
        try:
            if self._session is not None:
                return await self._send(self._session, url, params)

            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._get_default_headers(),
            ) as session:
                return await self._send(session, url, params)

        except aiohttp.ClientError as e:
            raise TransportError(
                message=f"Connection error: {e}",
                source_name=self.name,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                message=f"Request timed out after {self._timeout}s",
                source_name=self.name,
                request_url=url,
                original_error=e,
            )

    async def _send(
        self,
        session: aiohttp.ClientSession,
        url: str,
        params: Optional[dict[str, Any]],
    ) -> Any:
        start_time = time.time()
        async with session.get(url, params=params) as response:
            latency_ms = (time.time() - start_time) * 1000

            if response.status >= 400:
                body = await response.text()
                raise TransportError(
                    message=f"HTTP {response.status}: {body[:200]}",
                    source_name=self.name,
                    status_code=response.status,
                    response_body=body[:1000],
                    request_url=url,
                )

            try:
                data = await response.json(content_type=None)
            except ValueError as e:
                raise DataShapeError(
                    f"Invalid JSON from {self.DISPLAY_NAME or self.name}",
                    source_name=self.name,
                    original_error=e,
                )

            logger.debug(f"[{self.name}] GET {url} completed in {latency_ms:.1f}ms")
            return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"


class BaseRatioSource(BaseExchangeSource[NormalizedRatio]):
    """Adapter producing NormalizedRatio records."""

    METRIC = "long/short account ratio"

    def _ratio_record(self, figures: RatioFigures, raw_info: Any = None) -> NormalizedRatio:
        return NormalizedRatio.success(
            self.name,
            long_percent=figures.long_percent,
            short_percent=figures.short_percent,
            long_short_ratio=figures.long_short_ratio,
            raw_info=raw_info,
        )

    def _not_supported_record(self, request: RatioRequest, message: str) -> NormalizedRatio:
        return NormalizedRatio.not_supported(self.name, message)

    def _error_record(self, request: RatioRequest, message: str) -> NormalizedRatio:
        return NormalizedRatio.error(self.name, message)


class BaseTakerVolumeSource(BaseExchangeSource[TakerVolume]):
    """Adapter producing TakerVolume records (always the raw-volume strategy)."""

    METRIC = "taker buy/sell volume"
    STRATEGY = DerivationStrategy.RAW_VOLUME

    def _volume_record(
        self,
        request: RatioRequest,
        buy_volume: Decimal,
        sell_volume: Decimal,
        raw_info: Any = None,
    ) -> TakerVolume:
        figures = from_volumes(buy_volume, sell_volume)
        return TakerVolume(
            source=self.name,
            timeframe=request.timeframe,
            status=RatioStatus.SUCCESS,
            buy_volume=buy_volume,
            sell_volume=sell_volume,
            buy_sell_ratio=figures.long_short_ratio,
            long_percent=figures.long_percent,
            short_percent=figures.short_percent,
            raw_info=raw_info,
        )

    def _not_supported_record(self, request: RatioRequest, message: str) -> TakerVolume:
        return TakerVolume.not_supported(self.name, request.timeframe, message)

    def _error_record(self, request: RatioRequest, message: str) -> TakerVolume:
        return TakerVolume.error(self.name, request.timeframe, message)
