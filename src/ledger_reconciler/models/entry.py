"""Transaction entry models for the two reconciled ledgers."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from ledger_reconciler.utils.date_utils import date_to_iso


class LedgerSource(Enum):
    """Ledger an entry was parsed from."""

    BANK = "bank"
    BOOKKEEPING = "bookkeeping"  # The "other" ledger (Ziher export)


class EntryStatus(Enum):
    """Reconciliation status of an entry.

    CANDIDATE is reserved for pre-selection in a user interface; the
    matching engine only ever assigns UNMATCHED and MATCHED.
    """

    UNMATCHED = "unmatched"
    MATCHED = "matched"
    CANDIDATE = "candidate"


def generate_entry_id(source: LedgerSource) -> str:
    """Generate a session-unique entry id tagged with its source."""
    return f"{source.value}-{uuid.uuid4()}"


@dataclass(frozen=True)
class EntrySnapshot:
    """Copy of a partner entry's display fields, taken at match time."""

    id: str
    date: date
    description: str
    amount: Decimal
    source: LedgerSource


@dataclass(frozen=True)
class TransactionEntry:
    """One parsed row from either ledger.

    Entries are immutable. Matching operations return updated copies
    produced with ``with_match`` and ``cleared``.

    Attributes:
        date: Calendar date of the transaction.
        description: Free-text narrative.
        amount: Signed amount (positive=inflow, negative=outflow).
        source: Ledger this entry came from.
        id: Unique identifier, "<source>-<uuid>".
        status: Reconciliation status.
        match_id: Owning match group id, set only while matched.
        matched_entry_details: Snapshots of every entry this one is matched with.
        original_row_data: Parsed field values of the source row, for audit.
        source_line: Line number of the row in its source text.
    """

    date: date
    description: str
    amount: Decimal
    source: LedgerSource
    id: str = ""
    status: EntryStatus = EntryStatus.UNMATCHED
    match_id: str | None = None
    matched_entry_details: tuple[EntrySnapshot, ...] = ()
    original_row_data: tuple[str, ...] = field(default=(), repr=False)
    source_line: int | None = None

    def __post_init__(self) -> None:
        if not self.id:
            object.__setattr__(self, "id", generate_entry_id(self.source))

    @property
    def iso_date(self) -> str:
        """Date in ISO 8601 form."""
        return date_to_iso(self.date)

    @property
    def is_matched(self) -> bool:
        return self.status == EntryStatus.MATCHED

    @property
    def is_unmatched(self) -> bool:
        return self.status == EntryStatus.UNMATCHED

    @property
    def is_consistent(self) -> bool:
        """Check the matched/match_id/details invariant.

        Returns:
            True if status, match_id and matched_entry_details agree.
        """
        matched = self.status == EntryStatus.MATCHED
        return matched == (self.match_id is not None) == bool(self.matched_entry_details)

    def snapshot(self) -> EntrySnapshot:
        """Snapshot of this entry for a partner's matched_entry_details."""
        return EntrySnapshot(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            source=self.source,
        )

    def with_match(self, match_id: str, partners: tuple[EntrySnapshot, ...]) -> "TransactionEntry":
        """Return a matched copy of this entry.

        Args:
            match_id: Id of the owning match group.
            partners: Snapshots of every other member of the group.

        Returns:
            New entry with status MATCHED.
        """
        return replace(
            self,
            status=EntryStatus.MATCHED,
            match_id=match_id,
            matched_entry_details=tuple(partners),
        )

    def cleared(self) -> "TransactionEntry":
        """Return an unmatched copy with all match fields cleared."""
        return replace(
            self,
            status=EntryStatus.UNMATCHED,
            match_id=None,
            matched_entry_details=(),
        )

    def __repr__(self) -> str:
        return (
            f"TransactionEntry(id={self.id!r}, date={self.iso_date}, "
            f"description={self.description[:30]!r}, amount={self.amount}, "
            f"status={self.status.value})"
        )
