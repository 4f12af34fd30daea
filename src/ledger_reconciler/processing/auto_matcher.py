"""Automatic matching of bank entries to bookkeeping entries."""

from dataclasses import dataclass, field

from ledger_reconciler.models.entry import EntryStatus, TransactionEntry
from ledger_reconciler.models.match import MatchGroup, MatchType
from ledger_reconciler.processing.tie_breakers import TieBreak, select_best_candidate
from ledger_reconciler.utils.decimal_utils import amounts_equal
from ledger_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class AutoMatchResult:
    """Outcome of an automatic matching pass.

    Attributes:
        bank_entries: Full bank collection, with newly matched entries replaced.
        other_entries: Full bookkeeping collection, with newly matched entries replaced.
        match_groups: Groups created by this pass, in creation order.
    """

    bank_entries: list[TransactionEntry]
    other_entries: list[TransactionEntry]
    match_groups: list[MatchGroup] = field(default_factory=list)


def _release_candidate(entry: TransactionEntry) -> TransactionEntry:
    if entry.status == EntryStatus.CANDIDATE:
        return entry.cleared()
    return entry


class AutoMatcher:
    """Pairs bank and bookkeeping entries with equal amounts.

    The pass is greedy and single-shot: bank entries are visited in their
    given order, each takes the best remaining equal-amount bookkeeping
    entry, and a pairing is never revisited. Entries that are already
    matched on either side are left alone. Candidate entries are treated as
    unmatched and come back as UNMATCHED unless they get paired.

    Inputs are never modified; the result carries new collections.
    """

    def __init__(self, tie_break: TieBreak = TieBreak.DATE_PROXIMITY):
        """Initialize auto matcher.

        Args:
            tie_break: Heuristic for choosing among several equal-amount candidates.
        """
        self.tie_break = tie_break

    def match(
        self,
        bank_entries: list[TransactionEntry],
        other_entries: list[TransactionEntry],
    ) -> AutoMatchResult:
        """Run one automatic matching pass.

        Args:
            bank_entries: Bank ledger entries.
            other_entries: Bookkeeping ledger entries.

        Returns:
            AutoMatchResult with updated collections and the new groups.
        """
        # Candidate pre-selection is dropped; everything not matched is eligible
        updated_bank = [_release_candidate(entry) for entry in bank_entries]
        updated_other = [_release_candidate(entry) for entry in other_entries]
        new_groups: list[MatchGroup] = []

        # Indices of bookkeeping entries still available, in original order
        available = [i for i, entry in enumerate(updated_other) if entry.status != EntryStatus.MATCHED]

        for bank_idx, bank_entry in enumerate(updated_bank):
            if bank_entry.status == EntryStatus.MATCHED:
                continue

            pool = [i for i in available if amounts_equal(updated_other[i].amount, bank_entry.amount)]
            if not pool:
                continue

            best = select_best_candidate(
                bank_entry,
                [updated_other[i] for i in pool],
                self.tie_break,
            )
            if best is None:
                continue
            other_idx = next(i for i in pool if updated_other[i] is best)

            group = MatchGroup.create(
                MatchType.AUTO,
                [bank_entry.id],
                [best.id],
                bank_entry.amount,
                best.amount,
            )
            updated_bank[bank_idx] = bank_entry.with_match(group.id, (best.snapshot(),))
            updated_other[other_idx] = best.with_match(group.id, (bank_entry.snapshot(),))
            available.remove(other_idx)
            new_groups.append(group)

            logger.debug(
                f"Auto-matched {bank_entry.id} with {best.id} "
                f"(amount={bank_entry.amount}, candidates={len(pool)})"
            )

        logger.info(
            f"Auto-matched {len(new_groups)} pairs using {self.tie_break.value} tie-break"
        )
        return AutoMatchResult(
            bank_entries=updated_bank,
            other_entries=updated_other,
            match_groups=new_groups,
        )


def auto_match(
    bank_entries: list[TransactionEntry],
    other_entries: list[TransactionEntry],
    tie_break: TieBreak = TieBreak.DATE_PROXIMITY,
) -> AutoMatchResult:
    """Convenience function to run an automatic matching pass.

    Args:
        bank_entries: Bank ledger entries.
        other_entries: Bookkeeping ledger entries.
        tie_break: Heuristic for choosing among several equal-amount candidates.

    Returns:
        AutoMatchResult with updated collections and the new groups.
    """
    return AutoMatcher(tie_break).match(bank_entries, other_entries)
