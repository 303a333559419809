"""Tests for price parsing."""

from decimal import Decimal

import pytest

from product_scraper.extract.price import find_price_in_text, parse_price


@pytest.mark.parametrize(
    "value,expected",
    [
        ("24.99", Decimal("24.99")),
        ("$1,299.99", Decimal("1299.99")),
        ("€ 24,99", Decimal("24.99")),
        ("1.299,99 €", Decimal("1299.99")),
        ("USD 10 - 20", Decimal("10")),
        (19, Decimal("19")),
        (19.5, Decimal("19.5")),
    ],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


@pytest.mark.parametrize("value", [None, "", "Free", True, float("nan"), -5])
def test_parse_price_rejects(value):
    assert parse_price(value) is None


def test_find_price_in_text():
    html = "<div>Was <s>$39.99</s> now <b>$24.99</b></div>"
    assert find_price_in_text(html) == Decimal("39.99")


def test_find_price_with_thousands_separator():
    assert find_price_in_text("Only £1,250.00 today") == Decimal("1250.00")


def test_find_price_requires_currency_symbol():
    assert find_price_in_text("Item 12345, size 10") is None
    assert find_price_in_text("") is None


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Preis: €1.299,99 inkl. MwSt.", Decimal("1299.99")),
        ("Now $1,299.99.", Decimal("1299.99")),
        ("£5", Decimal("5")),
    ],
)
def test_find_price_keeps_whole_amount(text, expected):
    assert find_price_in_text(text) == expected
