"""
Ratio Aggregator - Concurrent fan-out over a fixed roster of adapters.

Provides:
- aggregate(): every configured adapter, same (symbol, timeframe)
- TakerVolumeSummarizer: one adapter, every timeframe
- Construction from configuration (exchange ids -> adapter instances)

There is no deadline here: an aggregation completes when its slowest
adapter completes. Callers that need bounded latency wrap the call in
their own timeout. Each adapter carries its own HTTP timeout.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Generic, Iterable, Optional, Sequence, TypeVar, Union

from long_short_ratio.base import BaseExchangeSource, BaseRatioSource, BaseTakerVolumeSource
from long_short_ratio.config import LongShortConfig, get_config
from long_short_ratio.exceptions import ConfigurationError
from long_short_ratio.models import NormalizedRatio, RatioRequest, TakerVolume, Timeframe
from long_short_ratio.providers import RATIO_SOURCES, TAKER_VOLUME_SOURCES
from long_short_ratio.providers.binance import BinanceRatioSource


logger = logging.getLogger(__name__)

R = TypeVar("R", NormalizedRatio, TakerVolume)

HUNDRED = Decimal("100")


class SourceAggregator(Generic[R]):
    """
    Fans one request out to a fixed, ordered list of sources.

    Usage:
        aggregator = SourceAggregator([BinanceRatioSource(), OKXRatioSource()])
        records = await aggregator.aggregate("BTC", "1h")

    The result always has one record per source, in source order.
    """

    def __init__(
        self,
        sources: Sequence[BaseExchangeSource[R]],
        percent_sum_tolerance: float = 0.01,
    ) -> None:
        names = [source.name for source in sources]
        if len(set(names)) != len(names):
            raise ConfigurationError(f"Duplicate sources in roster: {names}", config_key="exchanges")

        self._sources: list[BaseExchangeSource[R]] = list(sources)
        self._tolerance = Decimal(str(percent_sum_tolerance))

    @property
    def sources(self) -> list[BaseExchangeSource[R]]:
        return list(self._sources)

    def list_sources(self) -> list[str]:
        """Source ids in configured order."""
        return [source.name for source in self._sources]

    async def aggregate(self, symbol: str, timeframe: Union[str, Timeframe]) -> list[R]:
        """
        Fetch from every source concurrently.

        Args:
            symbol: Base asset ticker, e.g. "BTC"
            timeframe: One of 5m, 15m, 30m, 1h, 4h, 1d

        Returns:
            One record per configured source, in configured order

        Raises:
            ValueError: If symbol is empty or timeframe is not canonical
        """
        request = RatioRequest(symbol=symbol, timeframe=timeframe)
        return await self.aggregate_request(request)

    async def aggregate_request(self, request: RatioRequest) -> list[R]:
        results = await asyncio.gather(
            *(source.fetch(request) for source in self._sources),
            return_exceptions=True,
        )

        records: list[R] = []
        for source, result in zip(self._sources, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                # fetch() does not raise; keep the slot anyway
                logger.error(f"[{source.name}] Escaped adapter boundary: {result!r}")
                result = source._error_record(request, f"Unexpected error: {result}")
            records.append(result)

        self._flag_anomalies(records)

        succeeded = sum(1 for record in records if record.is_success)
        logger.info(
            f"Aggregated {request.symbol} {request.timeframe.value}: "
            f"{succeeded}/{len(records)} sources succeeded"
        )
        return records

    def _flag_anomalies(self, records: Iterable[R]) -> None:
        """Warn about success records whose percents do not sum to 100."""
        for record in records:
            total = record.percent_sum()
            if total is None:
                continue
            if abs(total - HUNDRED) > self._tolerance:
                source = getattr(record, "exchange", None) or getattr(record, "source", "?")
                logger.warning(
                    f"[{source}] long+short = {total:.4f}%, "
                    f"outside 100 ± {self._tolerance}"
                )


class RatioAggregator(SourceAggregator[NormalizedRatio]):
    """Aggregator over long/short ratio adapters."""


class TakerVolumeSummarizer:
    """
    Taker volume for one source across several timeframes.

    Timeframes are fetched concurrently; results come back in the
    requested timeframe order.
    """

    def __init__(
        self,
        source: BaseTakerVolumeSource,
        percent_sum_tolerance: float = 0.01,
    ) -> None:
        self._source = source
        self._tolerance = percent_sum_tolerance

    @property
    def source(self) -> BaseTakerVolumeSource:
        return self._source

    async def summarize(
        self,
        symbol: str,
        timeframes: Optional[Sequence[Union[str, Timeframe]]] = None,
    ) -> list[TakerVolume]:
        frames = [Timeframe.parse(tf) for tf in (timeframes or list(Timeframe))]
        requests = [RatioRequest(symbol=symbol, timeframe=tf) for tf in frames]

        # One single-source aggregation per timeframe keeps per-call isolation
        aggregator: SourceAggregator[TakerVolume] = SourceAggregator(
            [self._source], percent_sum_tolerance=self._tolerance
        )
        results = await asyncio.gather(
            *(aggregator.aggregate_request(request) for request in requests)
        )
        return [records[0] for records in results]


# =============================================================
# CONSTRUCTION FROM CONFIGURATION
# =============================================================


def _source_kwargs(config: LongShortConfig) -> dict[str, Any]:
    return {"timeout": config.request_timeout, "user_agent": config.user_agent}


def build_ratio_sources(
    exchange_ids: Iterable[str],
    config: Optional[LongShortConfig] = None,
) -> list[BaseRatioSource]:
    """
    Instantiate ratio adapters for the given exchange ids, in order.

    Raises:
        ConfigurationError: If an id has no adapter
    """
    config = config or get_config()
    sources = []
    for exchange_id in exchange_ids:
        source_cls = RATIO_SOURCES.get(exchange_id)
        if source_cls is None:
            raise ConfigurationError(
                f"Unknown exchange '{exchange_id}' (known: {', '.join(RATIO_SOURCES)})",
                config_key="exchanges",
            )
        sources.append(source_cls(**_source_kwargs(config)))
    return sources


def build_aggregator(config: Optional[LongShortConfig] = None) -> RatioAggregator:
    config = config or get_config()
    sources = build_ratio_sources(config.exchanges, config)
    logger.info(f"Ratio aggregator roster: {[s.name for s in sources]}")
    return RatioAggregator(sources, percent_sum_tolerance=config.percent_sum_tolerance)


def build_taker_volume_summarizer(
    config: Optional[LongShortConfig] = None,
    source_id: Optional[str] = None,
) -> TakerVolumeSummarizer:
    """
    Raises:
        ConfigurationError: If the source id has no taker volume adapter
    """
    config = config or get_config()
    source_id = (source_id or config.taker_volume_source).lower()
    source_cls = TAKER_VOLUME_SOURCES.get(source_id)
    if source_cls is None:
        raise ConfigurationError(
            f"Unknown taker volume source '{source_id}' "
            f"(known: {', '.join(TAKER_VOLUME_SOURCES)})",
            config_key="taker_volume_source",
        )
    return TakerVolumeSummarizer(
        source_cls(**_source_kwargs(config)),
        percent_sum_tolerance=config.percent_sum_tolerance,
    )


# Singleton instance for convenience
_default_aggregator: Optional[RatioAggregator] = None


def get_default_aggregator() -> RatioAggregator:
    """Get or create the default aggregator from the global configuration."""
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = build_aggregator()
    return _default_aggregator


def reset_default_aggregator() -> None:
    global _default_aggregator
    _default_aggregator = None


async def aggregate(symbol: str, timeframe: Union[str, Timeframe]) -> list[NormalizedRatio]:
    """aggregate(symbol, timeframe) -> one NormalizedRatio per configured exchange."""
    return await get_default_aggregator().aggregate(symbol, timeframe)


async def summarize_taker_volume(
    symbol: str,
    timeframes: Optional[Sequence[Union[str, Timeframe]]] = None,
    source_id: Optional[str] = None,
) -> list[TakerVolume]:
    return await build_taker_volume_summarizer(source_id=source_id).summarize(symbol, timeframes)


async def available_markets(config: Optional[LongShortConfig] = None) -> list[str]:
    """
    Sorted base assets of Binance USDT perpetuals.

    Raises:
        TransportError: If Binance cannot be reached
        DataShapeError: If the exchange info payload is malformed
    """
    config = config or get_config()
    return await BinanceRatioSource(**_source_kwargs(config)).get_available_symbols()
