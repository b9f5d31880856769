"""Tests for currency formatting."""

import pytest
from decimal import Decimal

from stash.services.formatting import (
    CURRENCY_STYLES,
    format_amount,
    format_currency,
    locale_for_currency,
)
from stash.services.formatting.currency import NARROW_NBSP, NBSP


class TestFormatCurrency:
    """Tests for locale-aware display strings."""

    @pytest.mark.parametrize("symbol, expected", [
        ("£", "£1,234.56"),
        ("$", "$1,234.56"),
        ("€", f"1{NARROW_NBSP}234,56{NBSP}€"),
        ("¥", "¥1,235"),
        ("CHF", "1'234.56 CHF"),
    ])
    def test_supported_currencies(self, symbol, expected):
        """Test each symbol is formatted like its home locale."""
        assert format_currency(Decimal("1234.56"), symbol) == expected

    def test_rupee_uses_indian_grouping(self):
        """Test lakh/crore digit grouping."""
        assert format_currency(Decimal("123456.78"), "₹") == "₹1,23,456.78"
        assert format_currency(Decimal("12345678"), "₹") == "₹1,23,45,678.00"
        assert format_currency(Decimal("999"), "₹") == "₹999.00"

    def test_negative_amounts_put_sign_first(self):
        """Test that the sign leads the whole string."""
        assert format_currency(Decimal("-1234.56"), "£") == "-£1,234.56"
        assert format_currency(Decimal("-1234.56"), "CHF") == "-1'234.56 CHF"

    def test_unknown_symbol_falls_back(self):
        """Test the generic '<symbol> 1,234.56' format."""
        assert format_currency(Decimal("1234.5"), "BTC") == "BTC 1,234.50"

    def test_rounding_is_half_even(self):
        """Test banker's rounding, as platform formatters do."""
        assert format_currency(Decimal("0.125"), "£") == "£0.12"
        assert format_currency(Decimal("0.135"), "£") == "£0.14"
        assert format_currency(Decimal("2.5"), "¥") == "¥2"

    def test_accepts_floats_and_ints(self):
        """Test that non-Decimal numbers format without binary noise."""
        assert format_currency(0.1, "$") == "$0.10"
        assert format_currency(1000000, "$") == "$1,000,000.00"

    def test_zero_and_tiny_negative(self):
        """A value that rounds to zero has no minus sign."""
        assert format_currency(Decimal("0"), "£") == "£0.00"
        assert format_currency(Decimal("-0.001"), "£") == "£0.00"


class TestFormatAmount:
    """Tests for the symbol-less number formatting."""

    def test_small_numbers_not_grouped(self):
        """Test amounts below a thousand."""
        assert format_amount(Decimal("12.3"), CURRENCY_STYLES["£"]) == "12.30"

    def test_locale_lookup(self):
        """Test the locale identifiers behind each symbol."""
        assert locale_for_currency("€") == "fr_FR"
        assert locale_for_currency("₹") == "hi_IN"
        assert locale_for_currency("BTC") == "default"
