"""
Ratio derivation - turns exchange figures into long/short percentages.

Each exchange family reports sentiment differently:

- direct percentage: long and short fractions (0-1)
- ratio only:        a single long:short ratio R
- raw volume:        buy and sell amounts that are not fractions
- time series:       parallel arrays of historical points

All functions here are pure and work on Decimal. Inputs are parsed with
to_decimal(), which raises DataShapeError for absent or malformed values.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from long_short_ratio.exceptions import DataShapeError


HUNDRED = Decimal("100")
ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass(frozen=True)
class RatioFigures:
    """Derived figures shared by every strategy."""
    long_short_ratio: Decimal
    long_percent: Decimal
    short_percent: Decimal


def to_decimal(
    value: Any,
    field_name: str,
    source_name: Optional[str] = None,
) -> Decimal:
    """
    Parse an upstream number (string, int or float) into a Decimal.

    Raises:
        DataShapeError: If the value is missing, empty or not a finite number
    """
    if value is None or value == "":
        raise DataShapeError(
            f"Missing field '{field_name}'",
            source_name=source_name,
            field_name=field_name,
        )
    if isinstance(value, bool):
        raise DataShapeError(
            f"Malformed field '{field_name}': {value!r}",
            source_name=source_name,
            field_name=field_name,
            raw_data=value,
        )
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise DataShapeError(
            f"Malformed field '{field_name}': {value!r}",
            source_name=source_name,
            field_name=field_name,
            raw_data=value,
            original_error=e,
        )
    if not result.is_finite():
        raise DataShapeError(
            f"Malformed field '{field_name}': {value!r}",
            source_name=source_name,
            field_name=field_name,
            raw_data=value,
        )
    return result


def _safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    return numerator / denominator if denominator > 0 else ZERO


def from_fractions(
    long_fraction: Decimal,
    short_fraction: Decimal,
    long_short_ratio: Optional[Decimal] = None,
) -> RatioFigures:
    """
    Direct-percentage strategy.

    {long: 0.63, short: 0.37} -> 63.0 / 37.0. When the exchange does not
    send its own ratio, long/short is used (0 when short is 0).
    """
    if long_short_ratio is None:
        long_short_ratio = _safe_ratio(long_fraction, short_fraction)
    return RatioFigures(
        long_short_ratio=long_short_ratio,
        long_percent=long_fraction * HUNDRED,
        short_percent=short_fraction * HUNDRED,
    )


def from_ratio(ratio: Decimal) -> RatioFigures:
    """
    Ratio-only strategy.

    With R = long/short and long + short = 1:
    short = 1 / (R + 1), long = 1 - short.
    """
    if ratio < 0:
        raise DataShapeError(f"Negative long/short ratio: {ratio}", field_name="ratio")
    short_fraction = ONE / (ratio + ONE)
    long_fraction = ONE - short_fraction
    return RatioFigures(
        long_short_ratio=ratio,
        long_percent=long_fraction * HUNDRED,
        short_percent=short_fraction * HUNDRED,
    )


def from_volumes(buy: Decimal, sell: Decimal) -> RatioFigures:
    """
    Raw-volume strategy.

    {buy: 300, sell: 100} -> 75 / 25, ratio 3. A zero total gives 0 / 0
    and a zero sell side gives ratio 0.
    """
    if buy < 0 or sell < 0:
        raise DataShapeError(f"Negative volume: buy={buy} sell={sell}", field_name="volume")
    total = buy + sell
    return RatioFigures(
        long_short_ratio=_safe_ratio(buy, sell),
        long_percent=_safe_ratio(buy, total) * HUNDRED,
        short_percent=_safe_ratio(sell, total) * HUNDRED,
    )


def _last(series: Optional[Sequence[Any]], field_name: str) -> Any:
    if not isinstance(series, (list, tuple)) or not series:
        raise DataShapeError(
            f"Empty or missing series '{field_name}'",
            field_name=field_name,
            raw_data=series,
        )
    return series[-1]


def from_series(
    long_series: Sequence[Any],
    short_series: Sequence[Any],
    ratio_series: Optional[Sequence[Any]] = None,
) -> RatioFigures:
    """
    Time-series strategy.

    Takes the most recent (last) point of each parallel array. Percents are
    scaled by 100 only when both arrive as fractions; the ratio falls back
    to long/short when no ratio series is sent.
    """
    long_value = to_decimal(_last(long_series, "longPercent"), "longPercent")
    short_value = to_decimal(_last(short_series, "shortPercent"), "shortPercent")

    if long_value <= ONE and short_value <= ONE:
        long_value *= HUNDRED
        short_value *= HUNDRED

    if ratio_series:
        ratio = to_decimal(ratio_series[-1], "ratio")
    else:
        ratio = _safe_ratio(long_value, short_value)

    return RatioFigures(
        long_short_ratio=ratio,
        long_percent=long_value,
        short_percent=short_value,
    )
