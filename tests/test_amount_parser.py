"""Tests for amount parsing and coercion."""

import pytest
from decimal import Decimal
from budgetline.utils.amount_parser import parse_amount, to_decimal


@pytest.mark.parametrize(
    "text,expected",
    [
        ("123.45", Decimal("123.45")),
        ("$123.45", Decimal("123.45")),
        ("1,234.56", Decimal("1234.56")),
        ("(123.45)", Decimal("-123.45")),
        ("  42 ", Decimal("42")),
        ("-7.5", Decimal("-7.5")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity", "1.2.3"])
def test_parse_amount_rejects_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("1.50"), Decimal("1.50")),
        (3, Decimal("3")),
        (0.1, Decimal("0.1")),
        ("2,000", Decimal("2000")),
        (None, None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        (Decimal("NaN"), None),
        ("twelve", None),
        ([1], None),
    ],
)
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected
