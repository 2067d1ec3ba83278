"""Tests for fixed-point amount helpers"""

from decimal import Decimal

import pytest
from cointrace.amounts import format_decimal, format_minor_units, is_numeric_amount, to_minor_units


class TestMinorUnits:
    """Test parsing and formatting of 8-decimal amounts"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1.00000000", 100000000),
            ("0.00000001", 1),
            ("0.1", 10000000),
            (" 2.5 ", 250000000),
            (3, 300000000),
        ],
    )
    def test_to_minor_units(self, value, expected):
        assert to_minor_units(value) == expected

    @pytest.mark.parametrize("value", ["Error", "Check Explorer", "", None, True, "NaN", "Infinity"])
    def test_sentinels_are_not_amounts(self, value):
        assert to_minor_units(value) is None
        assert not is_numeric_amount(value)

    def test_format(self):
        assert format_minor_units(0) == "0.00000000"
        assert format_minor_units(123456789) == "1.23456789"
        assert format_minor_units(-5) == "-0.00000005"
        assert format_minor_units(42, decimals=0) == "42"

    def test_format_decimal_rounds_half_up(self):
        assert format_decimal(Decimal("1234.565"), 2) == "1234.57"
        assert format_decimal(Decimal("3"), 6) == "3.000000"
