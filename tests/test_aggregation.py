"""Tests for totals, filters and derived views."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_reconciler.models.entry import LedgerSource, TransactionEntry
from ledger_reconciler.processing.aggregation import (
    BalanceSummary,
    FilterMode,
    all_entries_matched,
    compute_balance_summary,
    displayed_entries,
    filter_by_mode,
    search_entries,
    side_total,
    sort_entries_by_date,
    unmatched_combined,
)


def create_entry(
    amount: str,
    day: int = 1,
    description: str = "Entry",
    source: LedgerSource = LedgerSource.BANK,
) -> TransactionEntry:
    """Helper to create a test entry dated March 2024."""
    return TransactionEntry(
        date=date(2024, 3, day),
        description=description,
        amount=Decimal(amount),
        source=source,
    )


def book(amount: str, day: int = 1, description: str = "Entry") -> TransactionEntry:
    return create_entry(amount, day, description, LedgerSource.BOOKKEEPING)


class TestFilterByMode:
    """Tests for income/expense filtering."""

    def test_modes(self) -> None:
        """Test each mode and that zero amounts only appear under ALL."""
        entries = [create_entry("10"), create_entry("-4"), create_entry("0")]

        assert len(filter_by_mode(entries, FilterMode.ALL)) == 3
        assert [e.amount for e in filter_by_mode(entries, FilterMode.INCOME)] == [Decimal("10")]
        assert [e.amount for e in filter_by_mode(entries, FilterMode.EXPENSES)] == [Decimal("-4")]


class TestSearchEntries:
    """Tests for case-insensitive search."""

    @pytest.fixture
    def entries(self) -> list[TransactionEntry]:
        return [
            create_entry("-49.99", 5, "Faktura PRĄD"),
            create_entry("120.00", 12, "Składki"),
        ]

    def test_blank_query_returns_all(self, entries: list[TransactionEntry]) -> None:
        """Test that empty and whitespace queries do not filter."""
        assert search_entries(entries, "") == entries
        assert search_entries(entries, "   ") == entries

    def test_description_case_insensitive(self, entries: list[TransactionEntry]) -> None:
        """Test description search ignores case."""
        assert [e.description for e in search_entries(entries, "prąd")] == ["Faktura PRĄD"]

    def test_amount_text(self, entries: list[TransactionEntry]) -> None:
        """Test search against the amount's text form."""
        assert [e.amount for e in search_entries(entries, "49.9")] == [Decimal("-49.99")]

    def test_iso_date(self, entries: list[TransactionEntry]) -> None:
        """Test search against the ISO date."""
        assert [e.description for e in search_entries(entries, "2024-03-12")] == ["Składki"]

    def test_no_hits(self, entries: list[TransactionEntry]) -> None:
        """Test a query that matches nothing."""
        assert search_entries(entries, "paliwo") == []


class TestSorting:
    """Tests for date sorting."""

    def test_sort_is_stable(self) -> None:
        """Test entries with equal dates keep their relative order."""
        first = create_entry("1", 5, "first")
        second = create_entry("2", 5, "second")
        earlier = create_entry("3", 1, "earlier")

        assert sort_entries_by_date([first, second, earlier]) == [earlier, first, second]


class TestBalanceSummary:
    """Tests for totals and the difference."""

    def test_totals_per_mode(self) -> None:
        """Test totals and difference under every filter mode."""
        bank = [create_entry("100.00"), create_entry("-50.00"), create_entry("-5.00")]
        other = [book("100.00"), book("-50.00")]

        summary = compute_balance_summary(bank, other)
        assert summary.bank_total == Decimal("45.00")
        assert summary.other_total == Decimal("50.00")
        assert summary.difference == Decimal("-5.00")
        assert not summary.is_balanced

        income = compute_balance_summary(bank, other, FilterMode.INCOME)
        assert income.difference == Decimal("0.00")
        assert income.is_balanced

        expenses = compute_balance_summary(bank, other, FilterMode.EXPENSES)
        assert expenses.bank_total == Decimal("-55.00")
        assert expenses.other_total == Decimal("-50.00")

    def test_empty_sides(self) -> None:
        """Test that empty ledgers total zero."""
        summary = compute_balance_summary([], [])
        assert summary.bank_total == 0
        assert summary.is_balanced

    @pytest.mark.parametrize("difference", ["0.004", "-0.004", "0"])
    def test_near_zero_difference_is_balanced(self, difference: str) -> None:
        """Test that sub-half-cent differences display as a positive zero."""
        summary = BalanceSummary(Decimal("0"), Decimal("0"), Decimal(difference))

        assert summary.is_balanced
        assert str(summary.display_difference) == "0.00"

    def test_half_cent_is_not_balanced(self) -> None:
        """Test the tolerance boundary."""
        summary = BalanceSummary(Decimal("0"), Decimal("0"), Decimal("0.005"))
        assert not summary.is_balanced

    def test_side_total(self) -> None:
        """Test a single side's sum."""
        assert side_total([create_entry("1.10"), create_entry("2.20")]) == Decimal("3.30")


class TestViews:
    """Tests for the displayed and unmatched views."""

    def test_displayed_entries_filters_then_searches(self) -> None:
        """Test that mode and query combine."""
        entries = [
            create_entry("10", 1, "Składka A"),
            create_entry("-10", 2, "Składka B"),
            create_entry("20", 3, "Dotacja"),
        ]

        shown = displayed_entries(entries, FilterMode.INCOME, "składka")
        assert [e.description for e in shown] == ["Składka A"]

    def test_unmatched_combined(self) -> None:
        """Test that matched entries are excluded and both sides merge by date."""
        b_late = create_entry("1", 9, "bank late")
        b_same = create_entry("2", 4, "bank same day")
        o_same = book("3", 4, "book same day")
        o_early = book("4", 1, "book early")
        b_matched = create_entry("5", 2, "matched").with_match("auto-x", (o_early.snapshot(),))

        combined = unmatched_combined([b_late, b_same, b_matched], [o_same, o_early])

        assert [e.description for e in combined] == [
            "book early",
            "bank same day",
            "book same day",
            "bank late",
        ]

    def test_unmatched_combined_respects_filters(self) -> None:
        """Test that the mode filter applies before merging."""
        combined = unmatched_combined(
            [create_entry("-1", 1)], [book("2", 1)], FilterMode.EXPENSES
        )
        assert [e.amount for e in combined] == [Decimal("-1")]

    def test_all_entries_matched(self) -> None:
        """Test the all-matched flag, which is false for empty ledgers."""
        b = create_entry("1")
        o = book("1")
        matched_b = b.with_match("auto-1", (o.snapshot(),))
        matched_o = o.with_match("auto-1", (b.snapshot(),))

        assert all_entries_matched([], []) is False
        assert all_entries_matched([matched_b], [matched_o]) is True
        assert all_entries_matched([matched_b], [o]) is False
