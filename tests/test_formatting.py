"""Tests for currency and date display helpers."""

from datetime import date
from decimal import Decimal

import pytest

from recurring_bills.formatting import CURRENCIES, CurrencyFormatter, format_date, get_currency


class TestCurrencyFormatter:
    """Tests for CurrencyFormatter."""

    def test_default_is_pounds(self):
        assert CurrencyFormatter().format(Decimal('1234.5')) == '£1,234.50'

    def test_rounds_half_up(self):
        assert CurrencyFormatter().format('2.345') == '£2.35'

    def test_negative_amount(self):
        assert CurrencyFormatter().format(-5) == '-£5.00'

    def test_zero_decimal_currency(self):
        formatter = CurrencyFormatter(CURRENCIES['JPY'])

        assert formatter.format(Decimal('1234.5')) == 'JP¥1,235'

    @pytest.mark.parametrize("code,expected", [
        ('USD', 'US$15.99'),
        ('EUR', '€15.99'),
        ('CNY', 'CN¥15.99'),
    ])
    def test_prefixes(self, code, expected):
        assert CurrencyFormatter(CURRENCIES[code]).format('15.99') == expected


class TestGetCurrency:
    def test_case_insensitive(self):
        assert get_currency('eur').code == 'EUR'

    @pytest.mark.parametrize("code", ['XYZ', '', None])
    def test_unsupported(self, code):
        with pytest.raises(ValueError, match="Unsupported currency"):
            get_currency(code)


def test_format_date():
    assert format_date(date(2025, 1, 5)) == '5 Jan 2025'
    assert format_date(date(2024, 9, 30)) == '30 Sep 2024'
