"""
Tests for core utility functions
"""

import pytest

from core.utils import decimal_difference, round_half_up, safe_divide, to_decimal, truncate_text


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, decimals, expected",
        [
            (2.675, 2, 2.68),
            (1.005, 2, 1.01),
            (0.125, 2, 0.13),
            (-0.125, 2, -0.13),
            (2.5, 0, 3.0),
            (70.0, 2, 70.0),
            (1e20, 2, 1e20),
        ],
    )
    def test_rounding(self, value, decimals, expected):
        assert round_half_up(value, decimals) == expected

    def test_idempotent(self):
        once = round_half_up(12.34567, 2)
        assert round_half_up(once, 2) == once


class TestDecimalHelpers:
    def test_to_decimal_uses_shortest_repr(self):
        assert str(to_decimal(0.1)) == "0.1"

    def test_difference_without_float_noise(self):
        assert decimal_difference(0.3, 0.1) == 0.2
        assert 0.3 - 0.1 != 0.2

    def test_missing_side_counts_as_zero(self):
        assert decimal_difference(None, 0.4) == -0.4
        assert decimal_difference(0.4, None) == 0.4


class TestMisc:
    def test_safe_divide(self):
        assert safe_divide(1, 4) == 0.25
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 0, default=-1.0) == -1.0

    def test_truncate_text(self):
        assert truncate_text("short", 10) == "short"
        assert truncate_text("a" * 20, 10) == "aaaaaaa..."
