"""
Tests for the ratio derivation strategies.

============================================================
TEST PRINCIPLES:
- Every strategy yields percents summing to 100 on clean input
- Zero denominators never raise
- Malformed input raises DataShapeError
============================================================
"""

from decimal import Decimal

import pytest

from long_short_ratio.derivation import (
    from_fractions,
    from_ratio,
    from_series,
    from_volumes,
    to_decimal,
)
from long_short_ratio.exceptions import DataShapeError


# ============================================================
# to_decimal
# ============================================================

class TestToDecimal:

    def test_parses_strings_and_numbers(self):
        assert to_decimal("0.6347", "x") == Decimal("0.6347")
        assert to_decimal(3, "x") == Decimal("3")
        assert to_decimal(1.5, "x") == Decimal("1.5")

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "inf", True, [1]])
    def test_rejects_missing_or_malformed(self, value):
        with pytest.raises(DataShapeError) as exc_info:
            to_decimal(value, "longAccount", "binanceusdm")
        assert exc_info.value.field_name == "longAccount"
        assert exc_info.value.source_name == "binanceusdm"


# ============================================================
# DIRECT PERCENTAGE
# ============================================================

class TestFromFractions:

    def test_scales_fractions(self):
        figures = from_fractions(Decimal("0.63"), Decimal("0.37"), Decimal("1.7027"))
        assert figures.long_percent == Decimal("63.00")
        assert figures.short_percent == Decimal("37.00")
        assert figures.long_short_ratio == Decimal("1.7027")

    def test_derives_ratio_when_absent(self):
        figures = from_fractions(Decimal("0.75"), Decimal("0.25"))
        assert figures.long_short_ratio == Decimal("3")

    def test_zero_short_gives_zero_ratio(self):
        figures = from_fractions(Decimal("1"), Decimal("0"))
        assert figures.long_short_ratio == 0
        assert figures.long_percent == 100


# ============================================================
# RATIO ONLY
# ============================================================

class TestFromRatio:

    def test_ratio_two_and_a_half(self):
        figures = from_ratio(Decimal("2.5"))
        assert figures.long_percent.quantize(Decimal("0.01")) == Decimal("71.43")
        assert figures.short_percent.quantize(Decimal("0.01")) == Decimal("28.57")
        assert figures.long_short_ratio == Decimal("2.5")

    def test_ratio_two(self):
        figures = from_ratio(Decimal("2"))
        assert abs(figures.long_percent - Decimal("66.6667")) < Decimal("0.001")
        assert abs(figures.short_percent - Decimal("33.3333")) < Decimal("0.001")
        assert figures.long_short_ratio == Decimal("2")

    def test_ratio_one_is_even(self):
        figures = from_ratio(Decimal("1"))
        assert figures.long_percent == 50
        assert figures.short_percent == 50

    def test_ratio_zero_is_all_short(self):
        figures = from_ratio(Decimal("0"))
        assert figures.long_percent == 0
        assert figures.short_percent == 100

    def test_sums_to_hundred(self):
        figures = from_ratio(Decimal("1.2345"))
        assert abs(figures.long_percent + figures.short_percent - 100) < Decimal("1e-20")

    def test_negative_ratio_rejected(self):
        with pytest.raises(DataShapeError):
            from_ratio(Decimal("-1"))


# ============================================================
# RAW VOLUME
# ============================================================

class TestFromVolumes:

    def test_normalizes_by_total(self):
        figures = from_volumes(Decimal("300"), Decimal("100"))
        assert figures.long_percent == 75
        assert figures.short_percent == 25
        assert figures.long_short_ratio == 3

    def test_zero_total(self):
        figures = from_volumes(Decimal("0"), Decimal("0"))
        assert figures.long_percent == 0
        assert figures.short_percent == 0
        assert figures.long_short_ratio == 0

    def test_zero_sell_side(self):
        figures = from_volumes(Decimal("5"), Decimal("0"))
        assert figures.long_percent == 100
        assert figures.long_short_ratio == 0

    def test_negative_volume_rejected(self):
        with pytest.raises(DataShapeError):
            from_volumes(Decimal("-1"), Decimal("2"))


# ============================================================
# TIME SERIES
# ============================================================

class TestFromSeries:

    def test_takes_last_point(self):
        figures = from_series([55.0, 60.5], [45.0, 39.5], [1.22, 1.5316])
        assert figures.long_percent == Decimal("60.5")
        assert figures.short_percent == Decimal("39.5")
        assert figures.long_short_ratio == Decimal("1.5316")

    def test_last_fraction_point_scaled(self):
        figures = from_series([0.4, 0.45], [0.6, 0.55])
        assert figures.long_percent == Decimal("45")
        assert figures.short_percent == Decimal("55")
        assert figures.long_short_ratio.quantize(Decimal("0.0001")) == Decimal("0.8182")

    def test_scales_fractions(self):
        figures = from_series([0.6], [0.4])
        assert figures.long_percent == Decimal("60.0")
        assert figures.short_percent == Decimal("40.0")
        assert figures.long_short_ratio == Decimal("1.5")

    @pytest.mark.parametrize("long_series", [None, [], "60"])
    def test_missing_series_rejected(self, long_series):
        with pytest.raises(DataShapeError):
            from_series(long_series, [40])
