"""
Monetary precision helpers.

Every amount that is persisted or sent to the payment provider goes through
these helpers, so rounding happens in exactly one place.

Key Principles:
1. NEVER use float for money
2. Quantize Decimals BEFORE converting to minor units
3. Round half away from zero (ROUND_HALF_UP), matching how menu prices,
   tax and fees are presented to customers
"""

from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Union

# Set high precision for intermediate calculations
getcontext().prec = 28

DEFAULT_CURRENCY = "NGN"

ZERO = Decimal("0.00")

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "NGN": 2,  # Naira (kobo)
    "GHS": 2,  # Cedi (pesewa)
    "KES": 2,  # Shilling (cents)
    "ZAR": 2,  # Rand (cents)
    "USD": 2,  # United States Dollar (cents)
    "EUR": 2,
    "GBP": 2,
    # Zero-decimal currencies
    "JPY": 0,
    "XOF": 0,  # CFA franc
}

Amount = Union[Decimal, str, int, float]


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency (2 when unknown).

        >>> currency_exponent("NGN")
        2
        >>> currency_exponent("XOF")
        0
    """
    return CURRENCY_EXPONENT.get((currency or DEFAULT_CURRENCY).upper(), 2)


def to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # Convert float to string first to avoid binary precision noise
        return Decimal(str(amount))
    return Decimal(amount)


def quantize(amount: Amount, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
    Round to the currency's minor unit, half away from zero.

        >>> quantize("10.125")
        Decimal('10.13')
        >>> quantize("1.2049")
        Decimal('1.20')
    """
    exponent = Decimal(10) ** -currency_exponent(currency)
    return to_decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)


def percent_of(amount: Amount, rate_percent: Amount, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
    `rate_percent` percent of `amount`, quantized.

        >>> percent_of("24.00", 5)
        Decimal('1.20')
    """
    return quantize(to_decimal(amount) * to_decimal(rate_percent) / Decimal(100), currency)


def to_minor(amount: Amount, currency: str = DEFAULT_CURRENCY) -> int:
    """
    Convert to integer minor units (kobo, cents) after quantization.

    The payment provider expects all amounts in minor units.

        >>> to_minor("30.20")
        3020
    """
    quantized = quantize(amount, currency)
    return int(quantized * (10 ** currency_exponent(currency)))


def from_minor(minor: int, currency: str = DEFAULT_CURRENCY) -> Decimal:
    """
        >>> from_minor(3020)
        Decimal('30.20')
    """
    return quantize(Decimal(minor) / (10 ** currency_exponent(currency)), currency)
