"""Totals, filters and derived views over the two ledgers.

Everything here is a pure function of the entry collections and the
active filters; nothing is cached or mutated.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable

from ledger_reconciler.models.entry import EntryStatus, TransactionEntry
from ledger_reconciler.utils.decimal_utils import is_effectively_zero, normalize_zero, sum_amounts


class FilterMode(Enum):
    """Which entries count towards totals and views."""

    ALL = "all"
    INCOME = "income"  # amount > 0
    EXPENSES = "expenses"  # amount < 0


@dataclass(frozen=True)
class BalanceSummary:
    """Per-side totals and their difference after mode filtering.

    Attributes:
        bank_total: Sum of bank amounts.
        other_total: Sum of bookkeeping amounts.
        difference: bank_total - other_total.
    """

    bank_total: Decimal
    other_total: Decimal
    difference: Decimal

    @property
    def is_balanced(self) -> bool:
        """True when the difference is below half of the smallest currency unit."""
        return is_effectively_zero(self.difference)

    @property
    def display_difference(self) -> Decimal:
        """Difference with floating noise collapsed to a positive zero."""
        return normalize_zero(self.difference)


def filter_by_mode(entries: Iterable[TransactionEntry], mode: FilterMode) -> list[TransactionEntry]:
    """Keep entries that fall under a filter mode.

    Args:
        entries: Entries to filter.
        mode: ALL keeps everything, INCOME keeps positive amounts,
            EXPENSES keeps negative amounts.

    Returns:
        Filtered entries in their original order.
    """
    if mode == FilterMode.INCOME:
        return [e for e in entries if e.amount > 0]
    if mode == FilterMode.EXPENSES:
        return [e for e in entries if e.amount < 0]
    return list(entries)


def search_entries(entries: Iterable[TransactionEntry], query: str) -> list[TransactionEntry]:
    """Case-insensitive substring search over description, amount and date.

    Args:
        entries: Entries to search.
        query: Search text. Blank text matches everything.

    Returns:
        Matching entries in their original order.
    """
    if not query or not query.strip():
        return list(entries)

    needle = query.lower()
    return [
        e
        for e in entries
        if needle in e.description.lower()
        or needle in str(e.amount).lower()
        or needle in e.iso_date.lower()
    ]


def sort_entries_by_date(entries: Iterable[TransactionEntry]) -> list[TransactionEntry]:
    """Stable ascending sort by date."""
    return sorted(entries, key=lambda e: e.date)


def side_total(entries: Iterable[TransactionEntry], mode: FilterMode = FilterMode.ALL) -> Decimal:
    """Sum of amounts after mode filtering."""
    return sum_amounts(e.amount for e in filter_by_mode(entries, mode))


def compute_balance_summary(
    bank_entries: Iterable[TransactionEntry],
    other_entries: Iterable[TransactionEntry],
    mode: FilterMode = FilterMode.ALL,
) -> BalanceSummary:
    """Compute both totals and their difference.

    Args:
        bank_entries: Bank ledger entries.
        other_entries: Bookkeeping ledger entries.
        mode: Filter applied to each side before summing.

    Returns:
        BalanceSummary for the filtered entries.
    """
    bank_total = side_total(bank_entries, mode)
    other_total = side_total(other_entries, mode)
    return BalanceSummary(
        bank_total=bank_total,
        other_total=other_total,
        difference=bank_total - other_total,
    )


def displayed_entries(
    entries: Iterable[TransactionEntry],
    mode: FilterMode = FilterMode.ALL,
    query: str = "",
) -> list[TransactionEntry]:
    """Entries of one ledger as shown in its table: mode filter, then search."""
    return search_entries(filter_by_mode(entries, mode), query)


def unmatched_combined(
    bank_entries: Iterable[TransactionEntry],
    other_entries: Iterable[TransactionEntry],
    mode: FilterMode = FilterMode.ALL,
    query: str = "",
) -> list[TransactionEntry]:
    """Unmatched entries from both ledgers in one date-sorted list.

    Args:
        bank_entries: Bank ledger entries.
        other_entries: Bookkeeping ledger entries.
        mode: Filter applied to each side first.
        query: Search text applied after the mode filter.

    Returns:
        Bank entries then bookkeeping entries, stably sorted by date.
    """
    bank = [e for e in displayed_entries(bank_entries, mode, query) if e.status == EntryStatus.UNMATCHED]
    other = [e for e in displayed_entries(other_entries, mode, query) if e.status == EntryStatus.UNMATCHED]
    return sort_entries_by_date(bank + other)


def all_entries_matched(
    bank_entries: list[TransactionEntry],
    other_entries: list[TransactionEntry],
) -> bool:
    """True when there is at least one entry and every entry is matched."""
    if not bank_entries and not other_entries:
        return False
    return all(e.status == EntryStatus.MATCHED for e in bank_entries) and all(
        e.status == EntryStatus.MATCHED for e in other_entries
    )
