"""
Tests for facet/engine/exact.py — 192-bit overflow checks and truncating
decimal conversion.
"""

from __future__ import annotations

from fractions import Fraction

import pytest

from facet.engine.exact import (
    U192_MAX,
    check_u192,
    checked_add,
    checked_mul,
    checked_pow,
    to_decimal,
    to_float,
    to_fraction,
)


class TestOverflow:
    def test_max_fits(self):
        assert check_u192(U192_MAX) == U192_MAX
        assert U192_MAX == 2**192 - 1

    def test_one_past_max(self):
        with pytest.raises(OverflowError, match="192 bits"):
            check_u192(U192_MAX + 1)

    def test_negative_rejected(self):
        with pytest.raises(OverflowError):
            check_u192(-1)

    def test_checked_mul_and_add(self):
        assert checked_mul(15, 400) == 6000
        assert checked_add(3, 4) == 7
        with pytest.raises(OverflowError):
            checked_mul(U192_MAX, 2)
        with pytest.raises(OverflowError):
            checked_add(U192_MAX, 1)

    def test_deepest_budget_that_fits(self):
        # 20**44 < 2**192 < 20**45
        assert checked_pow(20, 44) == 20**44
        with pytest.raises(OverflowError):
            checked_pow(20, 45)

    def test_negative_exponent(self):
        with pytest.raises(ValueError):
            checked_pow(20, -1)


class TestToDecimal:
    def test_truncates(self):
        assert to_decimal(2, 3, 4) == "0.6666"

    def test_one(self):
        assert to_decimal(1, 1, 2) == "1.00"

    def test_zero_precision(self):
        assert to_decimal(1, 8, 0) == "0"
        assert to_decimal(8, 8, 0) == "1"

    def test_leading_zeros_kept(self):
        assert to_decimal(1, 400, 6) == "0.002500"

    def test_zero(self):
        assert to_decimal(0, 20**30, 6) == "0.000000"

    def test_never_rounds_up(self):
        assert to_decimal(9_999_999, 10**7, 6) == "0.999999"

    def test_invalid_denominator(self):
        with pytest.raises(ValueError, match="Denominator"):
            to_decimal(1, 0)

    def test_invalid_precision(self):
        with pytest.raises(ValueError, match="Precision"):
            to_decimal(1, 2, -1)


class TestConversions:
    def test_to_fraction_reduces(self):
        assert to_fraction(105, 400) == Fraction(21, 80)

    def test_to_float(self):
        assert to_float(15, 20) == 0.75
        assert to_float(1, 3, 3) == 0.333
