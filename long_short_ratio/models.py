"""
Long/Short Ratio Models - Normalized output records.

Every exchange adapter produces exactly one of these records per request,
whatever the exchange answered. Records are created per request and never
stored.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


# Opaque upstream payload. Carried for debugging only; nothing in this
# package or its consumers reads into it.
RawInfo = Any


class Timeframe(str, Enum):
    """Canonical aggregation windows."""
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"

    @classmethod
    def parse(cls, value: "str | Timeframe") -> "Timeframe":
        """
        Parse a canonical timeframe token.

        Raises:
            ValueError: If the token is not one of 5m, 15m, 30m, 1h, 4h, 1d
        """
        if isinstance(value, cls):
            return value
        token = str(value).strip()
        for member in cls:
            if member.value == token:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"Invalid timeframe: {value!r} (expected one of {allowed})")


class RatioStatus(str, Enum):
    """Outcome of a single adapter call."""
    SUCCESS = "Success"
    NOT_SUPPORTED = "Not Supported"
    ERROR = "Error"


class DerivationStrategy(Enum):
    """How an exchange's payload is turned into long/short percentages."""
    DIRECT_PERCENTAGE = "direct_percentage"
    RATIO_ONLY = "ratio_only"
    RAW_VOLUME = "raw_volume"
    TIME_SERIES = "time_series"


# Base-asset ticker. Adapters interpolate it into URL paths.
SYMBOL_PATTERN = re.compile(r"[A-Z0-9]{1,20}")


def parse_symbol(value: Optional[str]) -> str:
    """
    Normalize a base-asset ticker ("btc " -> "BTC").

    Raises:
        ValueError: If empty or not 1-20 letters/digits
    """
    symbol = (value or "").strip().upper()
    if not symbol:
        raise ValueError("Symbol is required")
    if not SYMBOL_PATTERN.fullmatch(symbol):
        raise ValueError(f"Invalid symbol: {value!r} (expected 1-20 letters or digits)")
    return symbol


@dataclass(frozen=True)
class RatioRequest:
    """A (symbol, timeframe) pair supplied by the caller."""
    symbol: str
    timeframe: Timeframe = Timeframe.M5

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", parse_symbol(self.symbol))
        object.__setattr__(self, "timeframe", Timeframe.parse(self.timeframe))


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _check_figures(status: RatioStatus, figures: dict[str, Optional[Decimal]]) -> None:
    """Success carries both percents; anything else carries no figures."""
    if status == RatioStatus.SUCCESS:
        missing = [
            name for name in ("long_percent", "short_percent")
            if figures.get(name) is None
        ]
        if missing:
            raise ValueError(f"Success record requires {', '.join(missing)}")
    else:
        present = [name for name, value in figures.items() if value is not None]
        if present:
            raise ValueError(
                f"{status.value} record must not carry {', '.join(present)}"
            )


@dataclass(frozen=True)
class NormalizedRatio:
    """
    Uniform long/short ratio record - STRICT schema.

    All exchange adapters MUST normalize to this format.
    No downstream consumer depends on exchange-specific fields; raw_info
    is diagnostic only.
    """
    exchange: str
    status: RatioStatus
    long_short_ratio: Optional[Decimal] = None
    long_percent: Optional[Decimal] = None
    short_percent: Optional[Decimal] = None
    message: Optional[str] = None
    raw_info: RawInfo = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_figures(self.status, {
            "long_short_ratio": self.long_short_ratio,
            "long_percent": self.long_percent,
            "short_percent": self.short_percent,
        })

    @classmethod
    def success(
        cls,
        exchange: str,
        long_percent: Decimal,
        short_percent: Decimal,
        long_short_ratio: Optional[Decimal] = None,
        raw_info: RawInfo = None,
    ) -> "NormalizedRatio":
        return cls(
            exchange=exchange,
            status=RatioStatus.SUCCESS,
            long_short_ratio=long_short_ratio,
            long_percent=long_percent,
            short_percent=short_percent,
            raw_info=raw_info,
        )

    @classmethod
    def not_supported(cls, exchange: str, message: Optional[str] = None) -> "NormalizedRatio":
        return cls(exchange=exchange, status=RatioStatus.NOT_SUPPORTED, message=message)

    @classmethod
    def error(cls, exchange: str, message: str) -> "NormalizedRatio":
        return cls(exchange=exchange, status=RatioStatus.ERROR, message=message)

    @property
    def is_success(self) -> bool:
        return self.status == RatioStatus.SUCCESS

    def percent_sum(self) -> Optional[Decimal]:
        """long_percent + short_percent, or None for non-success records."""
        if not self.is_success:
            return None
        return self.long_percent + self.short_percent

    def to_dict(self, include_raw: bool = True) -> dict[str, Any]:
        """JSON-ready camelCase dict. Absent fields are omitted."""
        data: dict[str, Any] = {
            "exchange": self.exchange,
            "status": self.status.value,
            "longShortRatio": _to_float(self.long_short_ratio),
            "longPercent": _to_float(self.long_percent),
            "shortPercent": _to_float(self.short_percent),
            "message": self.message,
        }
        if include_raw:
            data["rawInfo"] = self.raw_info
        return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class TakerVolume:
    """
    Taker buy/sell volume for one source and one timeframe.

    Same status rules as NormalizedRatio: figures only on success.
    """
    source: str
    timeframe: Timeframe
    status: RatioStatus
    buy_volume: Optional[Decimal] = None
    sell_volume: Optional[Decimal] = None
    buy_sell_ratio: Optional[Decimal] = None
    long_percent: Optional[Decimal] = None
    short_percent: Optional[Decimal] = None
    message: Optional[str] = None
    raw_info: RawInfo = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_figures(self.status, {
            "buy_volume": self.buy_volume,
            "sell_volume": self.sell_volume,
            "buy_sell_ratio": self.buy_sell_ratio,
            "long_percent": self.long_percent,
            "short_percent": self.short_percent,
        })
        if self.status == RatioStatus.SUCCESS and (
            self.buy_volume is None or self.sell_volume is None
        ):
            raise ValueError("Success record requires buy_volume, sell_volume")

    @classmethod
    def not_supported(
        cls, source: str, timeframe: Timeframe, message: Optional[str] = None
    ) -> "TakerVolume":
        return cls(source=source, timeframe=timeframe,
                   status=RatioStatus.NOT_SUPPORTED, message=message)

    @classmethod
    def error(cls, source: str, timeframe: Timeframe, message: str) -> "TakerVolume":
        return cls(source=source, timeframe=timeframe,
                   status=RatioStatus.ERROR, message=message)

    @property
    def is_success(self) -> bool:
        return self.status == RatioStatus.SUCCESS

    @property
    def total_volume(self) -> Optional[Decimal]:
        if not self.is_success:
            return None
        return self.buy_volume + self.sell_volume

    def percent_sum(self) -> Optional[Decimal]:
        if not self.is_success:
            return None
        return self.long_percent + self.short_percent

    def to_dict(self, include_raw: bool = True) -> dict[str, Any]:
        """JSON-ready dict; longs/shorts/totalVolume match the summary cards."""
        data: dict[str, Any] = {
            "source": self.source,
            "timeframe": self.timeframe.value,
            "status": self.status.value,
            "totalVolume": _to_float(self.total_volume),
            "longs": _to_float(self.buy_volume),
            "shorts": _to_float(self.sell_volume),
            "buySellRatio": _to_float(self.buy_sell_ratio),
            "longPercent": _to_float(self.long_percent),
            "shortPercent": _to_float(self.short_percent),
            "message": self.message,
        }
        if include_raw:
            data["rawInfo"] = self.raw_info
        return {key: value for key, value in data.items() if value is not None}
