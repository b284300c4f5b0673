"""Currency and date display helpers (en-GB conventions)."""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

DEFAULT_CURRENCY_CODE = "GBP"

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True)
class Currency:
    """A display currency offered in the currency picker.

    Attributes:
        code: ISO 4217 code
        symbol: Symbol shown in the picker and form inputs
        name: Human readable name
        display_prefix: Prefix used when formatting amounts for en-GB
        decimals: Minor unit digits
    """
    code: str
    symbol: str
    name: str
    display_prefix: str
    decimals: int = 2


CURRENCIES = {
    "USD": Currency("USD", "$", "US Dollar", "US$"),
    "EUR": Currency("EUR", "€", "Euro", "€"),
    "GBP": Currency("GBP", "£", "British Pound", "£"),
    "JPY": Currency("JPY", "¥", "Japanese Yen", "JP¥", decimals=0),
    "CNY": Currency("CNY", "¥", "Chinese Yuan", "CN¥"),
}


def get_currency(code: Optional[str]) -> Currency:
    """Look up a supported currency by code.

    Raises:
        ValueError: If the code is not supported.
    """
    currency = CURRENCIES.get((code or "").strip().upper())
    if currency is None:
        raise ValueError(f"Unsupported currency: {code}")
    return currency


class CurrencyFormatter:
    """Formats amounts like ``Intl.NumberFormat('en-GB', currency)``."""

    def __init__(self, currency: Optional[Currency] = None):
        self.currency = currency or CURRENCIES[DEFAULT_CURRENCY_CODE]

    def format(self, amount: Any) -> str:
        value = Decimal(str(amount))
        exponent = Decimal(1).scaleb(-self.currency.decimals)
        value = value.quantize(exponent, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        digits = f"{abs(value):,.{self.currency.decimals}f}"
        return f"{sign}{self.currency.display_prefix}{digits}"


def format_date(value: date) -> str:
    """Render a date as e.g. "5 Jan 2025"."""
    return f"{value.day} {_MONTH_ABBR[value.month - 1]} {value.year}"
