"""
Long/Short Ratio Package - Cross-exchange positioning snapshot.

Asks a fixed roster of derivatives exchanges for the long/short account
ratio of one symbol over one timeframe, and returns one normalized record
per exchange, whatever each exchange answered.

Features:
- One adapter per exchange, isolated from every other
- Normalized output format across all exchanges
- Concurrent fan-out, one record per configured exchange, in roster order
- Taker buy/sell volume summary across timeframes
- Binance USDT perpetual market listing

Quick Start:
    from long_short_ratio import aggregate

    async def show():
        for record in await aggregate("BTC", "1h"):
            if record.is_success:
                print(f"{record.exchange}: {record.long_percent:.2f}% long")
            else:
                print(f"{record.exchange}: {record.status.value} ({record.message})")

Adding New Exchanges:
    1. Create class extending BaseRatioSource
    2. Implement: format_symbol(), fetch_raw(), normalize()
    3. Add it to RATIO_SOURCES in long_short_ratio.providers
    4. Enable it with LSR_EXCHANGES
"""

from long_short_ratio.aggregator import (
    RatioAggregator,
    SourceAggregator,
    TakerVolumeSummarizer,
    aggregate,
    available_markets,
    build_aggregator,
    build_ratio_sources,
    build_taker_volume_summarizer,
    get_default_aggregator,
    summarize_taker_volume,
)
from long_short_ratio.base import BaseExchangeSource, BaseRatioSource, BaseTakerVolumeSource
from long_short_ratio.config import LongShortConfig, get_config, set_config
from long_short_ratio.exceptions import (
    CapabilityGapError,
    ConfigurationError,
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
from long_short_ratio.providers import RATIO_SOURCES, TAKER_VOLUME_SOURCES


__version__ = "1.0.0"

__all__ = [
    # Aggregation
    "RatioAggregator",
    "SourceAggregator",
    "TakerVolumeSummarizer",
    "aggregate",
    "available_markets",
    "build_aggregator",
    "build_ratio_sources",
    "build_taker_volume_summarizer",
    "get_default_aggregator",
    "summarize_taker_volume",
    # Base
    "BaseExchangeSource",
    "BaseRatioSource",
    "BaseTakerVolumeSource",
    # Config
    "LongShortConfig",
    "get_config",
    "set_config",
    # Exceptions
    "CapabilityGapError",
    "ConfigurationError",
    "DataShapeError",
    "LongShortError",
    "TransportError",
    "UnsupportedTimeframeError",
    # Models
    "DerivationStrategy",
    "NormalizedRatio",
    "RatioRequest",
    "RatioStatus",
    "TakerVolume",
    "Timeframe",
    # Providers
    "RATIO_SOURCES",
    "TAKER_VOLUME_SOURCES",
]
