"""Reconciliation session: owns both ledgers and their match groups."""

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from ledger_reconciler.config import Config
from ledger_reconciler.models.entry import EntryStatus, LedgerSource, TransactionEntry
from ledger_reconciler.models.match import MatchGroup, is_discrepancy
from ledger_reconciler.parsers import get_parser
from ledger_reconciler.processing.aggregation import (
    BalanceSummary,
    FilterMode,
    all_entries_matched,
    compute_balance_summary,
    displayed_entries,
    sort_entries_by_date,
    unmatched_combined,
)
from ledger_reconciler.processing.auto_matcher import AutoMatcher
from ledger_reconciler.processing.manual_matcher import manual_match, unmatch
from ledger_reconciler.processing.match_registry import MatchRegistry
from ledger_reconciler.utils.decimal_utils import sum_amounts
from ledger_reconciler.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class LoadReport:
    """What a load produced."""

    bank_count: int
    bookkeeping_count: int
    auto_match_count: int

    @property
    def is_empty(self) -> bool:
        return self.bank_count == 0 and self.bookkeeping_count == 0


@dataclass(frozen=True)
class ManualMatchProposal:
    """A manual selection with its sums, awaiting confirmation.

    A discrepant proposal is meant to be confirmed by the user before it
    is committed with ReconciliationSession.confirm().
    """

    bank_ids: tuple[str, ...]
    bookkeeping_ids: tuple[str, ...]
    bank_sum: Decimal
    bookkeeping_sum: Decimal

    @property
    def is_discrepancy(self) -> bool:
        return is_discrepancy(self.bank_sum, self.bookkeeping_sum)

    @property
    def difference(self) -> Decimal:
        return self.bank_sum - self.bookkeeping_sum


class ReconciliationSession:
    """Single owner of the two entry collections and the match registry.

    Every operation runs to completion before returning. Collections are
    replaced wholesale with the results of the pure matching functions, so
    a failed operation leaves the previous state in place.

    Note: This class is NOT thread-safe.
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize an empty session.

        Args:
            config: Application configuration (defaults if None).
        """
        self.config = config or Config()
        self.bank_entries: list[TransactionEntry] = []
        self.bookkeeping_entries: list[TransactionEntry] = []
        self.registry = MatchRegistry()
        self.filter_mode = FilterMode.ALL
        self.search_query = ""

    # Loading

    def load(
        self,
        bank_text: str,
        bookkeeping_text: str,
        progress: Optional[ProgressCallback] = None,
    ) -> LoadReport:
        """Parse both exports and run the automatic matching pass.

        Args:
            bank_text: Bank statement export text.
            bookkeeping_text: Bookkeeping export text.
            progress: Optional callback receiving percentages 0-100.

        Returns:
            LoadReport with entry and match counts.

        Raises:
            FormatError: If either export lacks its required headers. The
                session keeps its previous state.
        """
        report = _Progress(progress)
        max_size = self.config.parsing.max_file_size_bytes

        with LogContext(logger, "load"):
            report(10)
            bank = get_parser(LedgerSource.BANK, max_size).parse(bank_text)
            report(20)
            bookkeeping = get_parser(LedgerSource.BOOKKEEPING, max_size).parse(bookkeeping_text)
            report(40)
            return self._install(bank, bookkeeping, report)

    def load_files(
        self,
        bank_path: Path,
        bookkeeping_path: Path,
        progress: Optional[ProgressCallback] = None,
    ) -> LoadReport:
        """Read both exports from disk and load them.

        Raises:
            FileNotFoundError: If a file is missing.
            ParseError: If a file is too large or lacks its required headers.
        """
        report = _Progress(progress)
        max_size = self.config.parsing.max_file_size_bytes

        with LogContext(logger, "load_files", bank=bank_path.name, bookkeeping=bookkeeping_path.name):
            report(10)
            bank = get_parser(LedgerSource.BANK, max_size).parse_file(bank_path)
            report(20)
            bookkeeping = get_parser(LedgerSource.BOOKKEEPING, max_size).parse_file(bookkeeping_path)
            report(40)
            return self._install(bank, bookkeeping, report)

    def _install(
        self,
        bank: list[TransactionEntry],
        bookkeeping: list[TransactionEntry],
        report: "_Progress",
    ) -> LoadReport:
        if not bank:
            logger.warning("No entries found in the bank export")
        if not bookkeeping:
            logger.warning("No entries found in the bookkeeping export")

        bank = sort_entries_by_date(bank)
        bookkeeping = sort_entries_by_date(bookkeeping)
        groups: list[MatchGroup] = []

        if bank and bookkeeping:
            report(60)
            result = AutoMatcher(self.config.matching.tie_break).match(bank, bookkeeping)
            bank = sort_entries_by_date(result.bank_entries)
            bookkeeping = sort_entries_by_date(result.other_entries)
            groups = result.match_groups
            report(80)

        self.bank_entries = bank
        self.bookkeeping_entries = bookkeeping
        self.registry = MatchRegistry(groups)
        self.filter_mode = FilterMode.ALL
        self.search_query = ""
        report(100)

        logger.info(
            f"Loaded {len(bank)} bank and {len(bookkeeping)} bookkeeping entries, "
            f"{len(groups)} matched automatically"
        )
        return LoadReport(
            bank_count=len(bank),
            bookkeeping_count=len(bookkeeping),
            auto_match_count=len(groups),
        )

    # Manual matching

    def propose_manual_match(
        self, bank_ids: Sequence[str], bookkeeping_ids: Sequence[str]
    ) -> Optional[ManualMatchProposal]:
        """Sum a selection before committing it.

        Only currently unmatched entries of the selection count.

        Args:
            bank_ids: Selected bank entry ids.
            bookkeeping_ids: Selected bookkeeping entry ids.

        Returns:
            Proposal, or None if either side has no unmatched selected entry.
        """
        bank = _select_unmatched(self.bank_entries, bank_ids)
        bookkeeping = _select_unmatched(self.bookkeeping_entries, bookkeeping_ids)
        if not bank or not bookkeeping:
            logger.info("Manual match needs unmatched entries from both ledgers")
            return None

        return ManualMatchProposal(
            bank_ids=tuple(e.id for e in bank),
            bookkeeping_ids=tuple(e.id for e in bookkeeping),
            bank_sum=sum_amounts(e.amount for e in bank),
            bookkeeping_sum=sum_amounts(e.amount for e in bookkeeping),
        )

    def manual_match(
        self,
        bank_ids: Sequence[str],
        bookkeeping_ids: Sequence[str],
        bank_sum: Optional[Decimal] = None,
        bookkeeping_sum: Optional[Decimal] = None,
    ) -> Optional[MatchGroup]:
        """Match a selection of entries from both ledgers.

        Args:
            bank_ids: Selected bank entry ids.
            bookkeeping_ids: Selected bookkeeping entry ids.
            bank_sum: Sum shown to the user for the bank side; computed
                from the selection when omitted.
            bookkeeping_sum: Same for the bookkeeping side.

        Returns:
            The new group, or None if the selection cannot be matched.
        """
        if bank_sum is None:
            selected_bank = set(bank_ids)
            bank_sum = sum_amounts(e.amount for e in self.bank_entries if e.id in selected_bank)
        if bookkeeping_sum is None:
            selected_bookkeeping = set(bookkeeping_ids)
            bookkeeping_sum = sum_amounts(
                e.amount for e in self.bookkeeping_entries if e.id in selected_bookkeeping
            )

        result = manual_match(
            bank_ids,
            bookkeeping_ids,
            self.bank_entries,
            self.bookkeeping_entries,
            bank_sum,
            bookkeeping_sum,
        )
        if result.match_group is None:
            return None

        self.registry.add(result.match_group)
        self.bank_entries = sort_entries_by_date(result.bank_entries)
        self.bookkeeping_entries = sort_entries_by_date(result.other_entries)
        return result.match_group

    def confirm(self, proposal: ManualMatchProposal) -> Optional[MatchGroup]:
        """Commit a proposal, discrepant or not."""
        return self.manual_match(
            proposal.bank_ids,
            proposal.bookkeeping_ids,
            proposal.bank_sum,
            proposal.bookkeeping_sum,
        )

    # Unmatching

    def unmatch(self, match_id: str) -> bool:
        """Dissolve one match group.

        Returns:
            True if a registered group was removed.
        """
        result = unmatch(match_id, self.bank_entries, self.bookkeeping_entries)
        self.bank_entries = result.bank_entries
        self.bookkeeping_entries = result.other_entries
        return self.registry.remove(match_id) is not None

    def unmatch_selected(self, entry_ids: Iterable[str]) -> int:
        """Dissolve every group that a selected entry belongs to.

        Args:
            entry_ids: Ids from either ledger; unmatched ids are ignored.

        Returns:
            Number of groups dissolved.
        """
        wanted = set(entry_ids)
        match_ids: list[str] = []
        for entry in self.bank_entries + self.bookkeeping_entries:
            if entry.id in wanted and entry.match_id and entry.match_id not in match_ids:
                match_ids.append(entry.match_id)

        if not match_ids:
            logger.info("No matched entries selected, nothing to unmatch")
            return 0

        bank, bookkeeping = self.bank_entries, self.bookkeeping_entries
        for match_id in match_ids:
            result = unmatch(match_id, bank, bookkeeping)
            bank, bookkeeping = result.bank_entries, result.other_entries

        self.bank_entries = sort_entries_by_date(bank)
        self.bookkeeping_entries = sort_entries_by_date(bookkeeping)
        for match_id in match_ids:
            self.registry.remove(match_id)

        logger.info(f"Unmatched {len(match_ids)} group(s)")
        return len(match_ids)

    def reset(self) -> None:
        """Drop all entries, groups and view state."""
        self.bank_entries = []
        self.bookkeeping_entries = []
        self.registry.clear()
        self.filter_mode = FilterMode.ALL
        self.search_query = ""
        logger.info("Session reset")

    # Views

    @property
    def match_groups(self) -> list[MatchGroup]:
        return self.registry.groups

    @property
    def displayed_bank_entries(self) -> list[TransactionEntry]:
        return displayed_entries(self.bank_entries, self.filter_mode, self.search_query)

    @property
    def displayed_bookkeeping_entries(self) -> list[TransactionEntry]:
        return displayed_entries(self.bookkeeping_entries, self.filter_mode, self.search_query)

    @property
    def unmatched_combined(self) -> list[TransactionEntry]:
        return unmatched_combined(
            self.bank_entries, self.bookkeeping_entries, self.filter_mode, self.search_query
        )

    @property
    def balance_summary(self) -> BalanceSummary:
        return compute_balance_summary(self.bank_entries, self.bookkeeping_entries, self.filter_mode)

    @property
    def all_matched(self) -> bool:
        return all_entries_matched(self.bank_entries, self.bookkeeping_entries)

    @property
    def is_empty(self) -> bool:
        return not self.bank_entries and not self.bookkeeping_entries


class _Progress:
    """Forwards percentages to an optional callback."""

    def __init__(self, callback: Optional[ProgressCallback]):
        self.callback = callback

    def __call__(self, percent: int) -> None:
        if self.callback is not None:
            self.callback(percent)


def _select_unmatched(entries: list[TransactionEntry], ids: Sequence[str]) -> list[TransactionEntry]:
    wanted = set(ids)
    return [e for e in entries if e.id in wanted and e.status == EntryStatus.UNMATCHED]
