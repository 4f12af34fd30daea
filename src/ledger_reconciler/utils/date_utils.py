"""Date parsing and normalization utilities."""

import math
import re
from datetime import date, datetime

# Date notations accepted by the ledger exports
#
# Each ledger source tries its own notations in a fixed priority order:
# - Bank statements use day-first, period-separated dates (15.01.2024).
# - Bookkeeping exports use ISO dates, often with single-digit month or day
#   (2024-1-5), and fall back to the day-first notation.
#
ISO_DATE = "iso"
DOTTED_DATE = "dotted"

DATE_PATTERNS = {
    ISO_DATE: (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$"), "%Y-%m-%d"),
    DOTTED_DATE: (re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$"), "%d.%m.%Y"),
}


def parse_date(raw_date: str, notations: tuple[str, ...] = (ISO_DATE, DOTTED_DATE)) -> date:
    """Parse a raw date string using the given notations in order.

    Args:
        raw_date: The raw date string to parse.
        notations: Keys of DATE_PATTERNS to try, highest priority first.

    Returns:
        Parsed date object.

    Raises:
        ValueError: If no notation yields a valid calendar date.
    """
    if not raw_date:
        raise ValueError("Empty date string")

    date_str = raw_date.strip()
    if not date_str:
        raise ValueError("Empty date string after stripping whitespace")

    for notation in notations:
        pattern, fmt = DATE_PATTERNS[notation]
        if pattern.match(date_str):
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                # Pattern matched but the date is impossible (e.g. 31.02.2024)
                continue

    raise ValueError(f"Cannot parse date: '{raw_date}'")


def safe_parse_date(
    raw_date: str | None,
    notations: tuple[str, ...] = (ISO_DATE, DOTTED_DATE),
    default: date | None = None,
) -> date | None:
    """Parse a date string, returning default on failure.

    Args:
        raw_date: The raw date string to parse.
        notations: Notations to try, highest priority first.
        default: Value returned when parsing fails.

    Returns:
        Parsed date or default.
    """
    if not raw_date:
        return default

    try:
        return parse_date(raw_date, notations)
    except ValueError:
        return default


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD)."""
    return d.isoformat()


def days_between(first: date | None, second: date | None) -> float:
    """Absolute distance in days between two dates.

    A missing date is infinitely far from everything so that it sorts last.

    Args:
        first: First date.
        second: Second date.

    Returns:
        Number of days, or math.inf if either date is missing.
    """
    if first is None or second is None:
        return math.inf
    return float(abs((second - first).days))
