"""
Currency Formatting

Pure function from (amount, currency symbol) to a display string,
formatted the way the symbol's home locale writes money:

    £  en_GB  £1,234.56
    €  fr_FR  1 234,56 €
    $  en_US  $1,234.56
    ¥  ja_JP  ¥1,235
    ₹  hi_IN  ₹1,23,456.78   (lakh/crore grouping)
    CHF de_CH 1'234.56 CHF

Any other symbol falls back to "<symbol> 1,234.56".
Rounding is half-even, like platform number formatters.
"""

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict


NARROW_NBSP = "\u202f"
NBSP = "\u00a0"

Number = Union[Decimal, int, float, str]


class CurrencyStyle(BaseModel):
    """How one locale writes amounts in its currency."""
    model_config = ConfigDict(frozen=True)

    locale: str
    symbol: str
    group_separator: str = ","
    decimal_separator: str = "."
    decimals: int = 2
    symbol_first: bool = True
    symbol_spacing: str = ""
    indian_grouping: bool = False


CURRENCY_STYLES: dict[str, CurrencyStyle] = {
    "£": CurrencyStyle(locale="en_GB", symbol="£"),
    "$": CurrencyStyle(locale="en_US", symbol="$"),
    "€": CurrencyStyle(
        locale="fr_FR",
        symbol="€",
        group_separator=NARROW_NBSP,
        decimal_separator=",",
        symbol_first=False,
        symbol_spacing=NBSP,
    ),
    "¥": CurrencyStyle(locale="ja_JP", symbol="¥", decimals=0),
    "₹": CurrencyStyle(locale="hi_IN", symbol="₹", indian_grouping=True),
    "CHF": CurrencyStyle(
        locale="de_CH",
        symbol="CHF",
        group_separator="'",
        symbol_first=False,
        symbol_spacing=" ",
    ),
}


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    # str() first so floats like 0.1 don't drag binary noise along
    return Decimal(str(amount))


def _group(digits: str, separator: str, indian: bool) -> str:
    """Insert group separators into a string of integer digits."""
    if indian and len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        return separator.join(groups + [tail])

    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return separator.join(groups)


def format_amount(amount: Number, style: CurrencyStyle) -> str:
    """Format a number (without symbol) using a locale style."""
    value = _to_decimal(amount)
    quantum = Decimal(1).scaleb(-style.decimals)
    value = value.quantize(quantum, rounding=ROUND_HALF_EVEN)

    negative = value < 0
    integer_part, _, fraction_part = f"{abs(value):f}".partition(".")

    text = _group(integer_part, style.group_separator, style.indian_grouping)
    if style.decimals:
        text += style.decimal_separator + fraction_part.ljust(style.decimals, "0")
    return ("-" if negative else "") + text


def format_currency(amount: Number, symbol: str) -> str:
    """
    Format `amount` for display in the currency identified by `symbol`.

    The sign goes in front of everything: -£1,234.56, -1'234.56 CHF.
    """
    style = CURRENCY_STYLES.get(symbol)
    if style is None:
        value = _to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)
        return f"{symbol} {value:,.2f}"

    number = format_amount(amount, style)
    negative = number.startswith("-")
    number = number.lstrip("-")
    sign = "-" if negative else ""

    if style.symbol_first:
        return f"{sign}{style.symbol}{style.symbol_spacing}{number}"
    return f"{sign}{number}{style.symbol_spacing}{style.symbol}"


def locale_for_currency(symbol: str) -> str:
    """Locale identifier used for a symbol, 'default' if unknown."""
    style = CURRENCY_STYLES.get(symbol)
    return style.locale if style else "default"
