"""
Unit tests for payments.money module.

These tests are CRITICAL for preventing penny drift: every persisted amount
and every amount sent to the provider passes through these helpers.
"""
import pytest
from decimal import Decimal

from payments.money import currency_exponent, from_minor, percent_of, quantize, to_minor


class TestCurrencyExponent:
    def test_naira_exponent(self):
        assert currency_exponent("NGN") == 2

    def test_zero_decimal_currency(self):
        assert currency_exponent("XOF") == 0

    def test_case_insensitive(self):
        assert currency_exponent("ngn") == 2

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2


class TestQuantize:
    def test_half_rounds_up(self):
        assert quantize("10.125") == Decimal("10.13")

    def test_below_half_rounds_down(self):
        assert quantize("1.2049") == Decimal("1.20")

    def test_float_input_has_no_binary_noise(self):
        assert quantize(0.1 + 0.2) == Decimal("0.30")

    def test_zero_decimal_currency(self):
        assert quantize("150.5", "XOF") == Decimal("151")


class TestPercentOf:
    def test_tax_on_worked_example(self):
        assert percent_of("24.00", 5) == Decimal("1.20")

    def test_fractional_rate(self):
        assert percent_of("33.33", "12.5") == Decimal("4.17")


class TestMinorUnits:
    @pytest.mark.parametrize(
        "amount,minor",
        [("30.20", 3020), ("0.01", 1), ("1999.995", 200000), (Decimal("5"), 500)],
    )
    def test_to_minor(self, amount, minor):
        assert to_minor(amount) == minor

    def test_from_minor(self):
        assert from_minor(3020) == Decimal("30.20")
