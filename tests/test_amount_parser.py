"""Tests for amount parsing."""

import pytest
from decimal import Decimal

from hisab.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("₹1,500", Decimal("1500")),
        ("Rs 500", Decimal("500")),
        ("rs.750", Decimal("750")),
        ("-200", Decimal("-200")),
    ],
)
def test_parse_amount_formats(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_empty():
    with pytest.raises(ValueError, match="Empty amount"):
        parse_amount("   ")


def test_parse_amount_invalid():
    with pytest.raises(ValueError, match="Could not parse amount"):
        parse_amount("twelve")
