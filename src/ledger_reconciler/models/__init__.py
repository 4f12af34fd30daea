"""Data models for ledger entries and match groups."""

from ledger_reconciler.models.entry import (
    EntrySnapshot,
    EntryStatus,
    LedgerSource,
    TransactionEntry,
)
from ledger_reconciler.models.match import MatchGroup, MatchType

__all__ = [
    "EntrySnapshot",
    "EntryStatus",
    "LedgerSource",
    "TransactionEntry",
    "MatchGroup",
    "MatchType",
]
