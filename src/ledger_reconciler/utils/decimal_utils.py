"""Decimal utilities for ledger amounts.

All monetary values are Decimal. Comparisons between ledgers happen at
two-decimal precision, the same precision used for display.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

CENT = Decimal("0.01")

# Anything below half of the smallest currency unit counts as zero
ZERO_TOLERANCE = Decimal("0.005")

# Any whitespace, including the non-breaking spaces banks use as thousands separators
WHITESPACE_PATTERN = re.compile(r"\s+")


def parse_amount(raw_amount: str) -> Decimal:
    """Parse a ledger amount string into a signed Decimal.

    Handles the notations found in bank and bookkeeping exports:
    - Decimal comma: -1234,56
    - Decimal point: 1234.56
    - Thousands separated by whitespace: 1 234,56

    Args:
        raw_amount: The raw amount string.

    Returns:
        Signed amount.

    Raises:
        ValueError: If the amount is empty, not numeric, or not finite.
    """
    if raw_amount is None:
        raise ValueError("Empty amount string")

    amount_str = WHITESPACE_PATTERN.sub("", raw_amount)
    if not amount_str:
        raise ValueError("Empty amount string")

    # Only the first comma is a decimal separator
    amount_str = amount_str.replace(",", ".", 1)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{raw_amount}': {e}") from e

    if not amount.is_finite():
        raise ValueError(f"Amount is not finite: '{raw_amount}'")

    return amount


def parse_optional_amount(raw_amount: str | None) -> Decimal:
    """Parse an amount column where a blank cell means zero.

    Args:
        raw_amount: The raw amount string, possibly blank.

    Returns:
        Parsed amount, or zero for a blank cell.

    Raises:
        ValueError: If a non-blank value cannot be parsed.
    """
    if raw_amount is None or not raw_amount.strip():
        return Decimal("0")
    return parse_amount(raw_amount)


def quantize_amount(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round an amount half-up to a fixed number of decimal places."""
    exponent = Decimal(1).scaleb(-decimal_places)
    return amount.quantize(exponent, rounding=ROUND_HALF_UP)


def amounts_equal(a: Decimal, b: Decimal) -> bool:
    """Check whether two amounts agree at two-decimal precision.

    Args:
        a: First amount.
        b: Second amount.

    Returns:
        True if both round to the same cent.
    """
    return quantize_amount(a) == quantize_amount(b)


def is_effectively_zero(amount: Decimal) -> bool:
    """Check whether an amount is below half of the smallest currency unit."""
    return abs(amount) < ZERO_TOLERANCE


def normalize_zero(amount: Decimal) -> Decimal:
    """Replace near-zero values with a positive zero.

    Args:
        amount: Amount to normalize.

    Returns:
        Decimal("0.00") if the amount is effectively zero, else the amount.
    """
    if is_effectively_zero(amount):
        return Decimal("0.00")
    return amount


def format_currency(
    amount: Decimal,
    decimal_places: int = 2,
    currency_symbol: str = "",
) -> str:
    """Format an amount for display.

    Near-zero values are shown as zero and never carry a minus sign.

    Args:
        amount: The amount to format.
        decimal_places: Number of decimal places.
        currency_symbol: Optional symbol appended after the number.

    Returns:
        Formatted string like "-1234.56" or "1234.56 zł".
    """
    rounded = quantize_amount(normalize_zero(amount), decimal_places)
    if rounded == 0:
        rounded = abs(rounded)
    text = str(rounded)
    return f"{text} {currency_symbol}" if currency_symbol else text


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimal amounts, starting from a Decimal zero.

    Args:
        amounts: Amounts to sum.

    Returns:
        Sum as Decimal.
    """
    total = Decimal("0")
    for amount in amounts:
        total += amount
    return total
