"""Sanitization utilities for safe report output."""

from decimal import Decimal
from typing import Optional

# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Prefix formula-triggering text with a single quote.

    Ledger descriptions are free text typed by third parties, so they are
    escaped before landing in a spreadsheet cell.

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if value is None:
        return None

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value


def sanitize_cell(value: object) -> object:
    """Sanitize a report cell, leaving numbers untouched.

    Negative amounts start with "-" but are numbers, not formulas.

    Args:
        value: Cell value of any type.

    Returns:
        The value, with text passed through sanitize_for_csv.
    """
    if isinstance(value, (Decimal, int, float)) or value is None:
        return value
    return sanitize_for_csv(str(value))
