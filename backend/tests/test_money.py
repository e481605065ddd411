# Overview: Pytest coverage for amount parsing at the API boundary.

from decimal import Decimal

import pytest

from tenantpos.errors import InvalidAmountError
from tenantpos.money import MAX_AMOUNT_CENTS, cents_to_decimal, cents_to_json, to_cents


class TestToCents:
    @pytest.mark.parametrize("value,expected", [
        ("100.00", 10000),
        (25.5, 2550),
        (10, 1000),
        (Decimal("0.005"), 1),
        ("0.004", 0),
        (" 7.10 ", 710),
    ])
    def test_valid(self, value, expected):
        assert to_cents(value, "amount") == expected

    @pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "Infinity", "-0.01", "-0.004", -3])
    def test_invalid(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_cents(value, "amount")
        assert exc_info.value.field == "amount"

    def test_upper_bound(self):
        assert to_cents(MAX_AMOUNT_CENTS / 100, "amount") == MAX_AMOUNT_CENTS
        with pytest.raises(InvalidAmountError):
            to_cents("10000000.00", "amount")

    @pytest.mark.parametrize("value", ["1e30", 1e30, "9" * 40])
    def test_huge_values_are_out_of_range(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_cents(value, "amount")
        assert "cannot exceed" in exc_info.value.message

    def test_zero_can_be_refused(self):
        with pytest.raises(InvalidAmountError):
            to_cents(0, "price", allow_zero=False)


class TestRendering:
    def test_decimal(self):
        assert cents_to_decimal(18550) == Decimal("185.50")
        assert cents_to_decimal(None) is None

    def test_json(self):
        assert cents_to_json(-550) == -5.5
        assert cents_to_json(None) is None
