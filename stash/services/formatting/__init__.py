"""Display formatting package."""

from stash.services.formatting.currency import (
    CURRENCY_STYLES,
    CurrencyStyle,
    format_amount,
    format_currency,
    locale_for_currency,
)

__all__ = [
    "CURRENCY_STYLES",
    "CurrencyStyle",
    "format_amount",
    "format_currency",
    "locale_for_currency",
]
