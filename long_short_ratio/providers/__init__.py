"""
Providers package - Exchange adapter implementations.

RATIO_SOURCES and TAKER_VOLUME_SOURCES are the closed sets of adapters an
aggregator can be configured with, keyed by exchange id.
"""

from long_short_ratio.base import BaseRatioSource, BaseTakerVolumeSource
from long_short_ratio.providers.binance import BinanceRatioSource, BinanceTakerVolumeSource
from long_short_ratio.providers.bitget import BitgetRatioSource
from long_short_ratio.providers.bybit import BybitRatioSource
from long_short_ratio.providers.gateio import GateioRatioSource, GateioTakerVolumeSource
from long_short_ratio.providers.htx import HTXRatioSource
from long_short_ratio.providers.kraken import KrakenFuturesRatioSource
from long_short_ratio.providers.okx import OKXRatioSource, OKXTakerVolumeSource


RATIO_SOURCES: dict[str, type[BaseRatioSource]] = {
    source.EXCHANGE_ID: source
    for source in (
        BinanceRatioSource,
        BybitRatioSource,
        OKXRatioSource,
        BitgetRatioSource,
        HTXRatioSource,
        KrakenFuturesRatioSource,
        GateioRatioSource,
    )
}

TAKER_VOLUME_SOURCES: dict[str, type[BaseTakerVolumeSource]] = {
    source.EXCHANGE_ID: source
    for source in (
        BinanceTakerVolumeSource,
        OKXTakerVolumeSource,
        GateioTakerVolumeSource,
    )
}


__all__ = [
    "BinanceRatioSource",
    "BinanceTakerVolumeSource",
    "BitgetRatioSource",
    "BybitRatioSource",
    "GateioRatioSource",
    "GateioTakerVolumeSource",
    "HTXRatioSource",
    "KrakenFuturesRatioSource",
    "OKXRatioSource",
    "OKXTakerVolumeSource",
    "RATIO_SOURCES",
    "TAKER_VOLUME_SOURCES",
]
