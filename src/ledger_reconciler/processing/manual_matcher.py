"""Manual matching and unmatching of ledger entries."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from ledger_reconciler.models.entry import EntryStatus, TransactionEntry
from ledger_reconciler.models.match import MatchGroup, MatchType
from ledger_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ManualMatchResult:
    """Outcome of a manual match attempt.

    When the preconditions fail, ``match_group`` is None and both
    collections are the caller's own lists, unchanged.
    """

    bank_entries: list[TransactionEntry]
    other_entries: list[TransactionEntry]
    match_group: MatchGroup | None = None


@dataclass
class UnmatchResult:
    """Collections after an unmatch, with the number of entries reset."""

    bank_entries: list[TransactionEntry]
    other_entries: list[TransactionEntry]
    reset_count: int = 0


def _all_unmatched(selected_ids: Sequence[str], entries: list[TransactionEntry]) -> bool:
    by_id = {entry.id: entry for entry in entries}
    return all(
        entry_id in by_id and by_id[entry_id].status == EntryStatus.UNMATCHED
        for entry_id in selected_ids
    )


def manual_match(
    selected_bank_ids: Sequence[str],
    selected_other_ids: Sequence[str],
    bank_entries: list[TransactionEntry],
    other_entries: list[TransactionEntry],
    bank_sum: Decimal,
    other_sum: Decimal,
) -> ManualMatchResult:
    """Match a hand-picked set of entries from both ledgers.

    Any number of entries per side may form one group. The sums are the
    caller's snapshot taken when the selection was made; they are stored
    on the group and decide its discrepancy flag without being recomputed.

    The call does nothing and returns no group unless both selections are
    non-empty and every selected id names an unmatched entry on its side.

    Args:
        selected_bank_ids: Ids of bank entries to match.
        selected_other_ids: Ids of bookkeeping entries to match.
        bank_entries: Bank ledger entries.
        other_entries: Bookkeeping ledger entries.
        bank_sum: Sum of the selected bank amounts.
        other_sum: Sum of the selected bookkeeping amounts.

    Returns:
        ManualMatchResult with updated collections and the new group, or
        the unchanged inputs and None.
    """
    if not selected_bank_ids or not selected_other_ids:
        logger.info("Manual match rejected: both ledgers need at least one selected entry")
        return ManualMatchResult(bank_entries, other_entries, None)

    if not _all_unmatched(selected_bank_ids, bank_entries) or not _all_unmatched(
        selected_other_ids, other_entries
    ):
        logger.info("Manual match rejected: selection contains unknown or already matched entries")
        return ManualMatchResult(bank_entries, other_entries, None)

    bank_ids = list(dict.fromkeys(selected_bank_ids))
    other_ids = list(dict.fromkeys(selected_other_ids))

    group = MatchGroup.create(MatchType.MANUAL, bank_ids, other_ids, bank_sum, other_sum)

    selected = set(bank_ids) | set(other_ids)
    snapshots = [e.snapshot() for e in bank_entries if e.id in selected]
    snapshots += [e.snapshot() for e in other_entries if e.id in selected]

    def _apply(entry: TransactionEntry) -> TransactionEntry:
        if entry.id not in selected:
            return entry
        partners = tuple(s for s in snapshots if s.id != entry.id)
        return entry.with_match(group.id, partners)

    updated_bank = [_apply(entry) for entry in bank_entries]
    updated_other = [_apply(entry) for entry in other_entries]

    if group.is_discrepancy:
        logger.warning(
            f"Manual match {group.id} has a discrepancy: "
            f"bank={bank_sum}, bookkeeping={other_sum}"
        )
    else:
        logger.info(f"Manual match {group.id}: {len(bank_ids)} bank, {len(other_ids)} bookkeeping entries")

    return ManualMatchResult(updated_bank, updated_other, group)


def unmatch(
    match_id: str,
    bank_entries: list[TransactionEntry],
    other_entries: list[TransactionEntry],
) -> UnmatchResult:
    """Reset every entry that belongs to a match group.

    The group record itself is not touched; removing it from the registry
    is the caller's job. An unknown id resets nothing.

    Args:
        match_id: Id of the group to dissolve.
        bank_entries: Bank ledger entries.
        other_entries: Bookkeeping ledger entries.

    Returns:
        UnmatchResult with new collections.
    """
    if not match_id:
        return UnmatchResult(bank_entries, other_entries, 0)

    reset_count = 0

    def _reset(entry: TransactionEntry) -> TransactionEntry:
        nonlocal reset_count
        if entry.match_id != match_id:
            return entry
        reset_count += 1
        return entry.cleared()

    updated_bank = [_reset(entry) for entry in bank_entries]
    updated_other = [_reset(entry) for entry in other_entries]

    logger.debug(f"Unmatched {match_id}: {reset_count} entries reset")
    return UnmatchResult(updated_bank, updated_other, reset_count)
