"""Tie-break heuristics for choosing between equal-amount candidates."""

import re
from enum import Enum
from typing import Sequence

from ledger_reconciler.models.entry import TransactionEntry
from ledger_reconciler.utils.date_utils import days_between

# Unicode-aware, so Polish letters survive normalization
_NON_ALPHANUMERIC = re.compile(r"[\W_]")


class TieBreak(Enum):
    """Heuristic used when several candidates share the bank entry's amount."""

    DATE_PROXIMITY = "date_proximity"
    DESCRIPTION_SIMILARITY = "description_similarity"


def normalize_description(text: str) -> str:
    """Lowercase a description and drop everything but letters and digits."""
    return _NON_ALPHANUMERIC.sub("", text.lower())


def trigrams(text: str) -> set[str]:
    """Set of overlapping three-character substrings of a normalized string."""
    return {text[i : i + 3] for i in range(len(text) - 2)}


def trigram_similarity(first: str, second: str) -> float:
    """Jaccard similarity of the trigram sets of two descriptions.

    Both strings are normalized first. Identical normalized strings score
    1.0 and an empty string scores 0.0 against anything.

    Args:
        first: First description.
        second: Second description.

    Returns:
        |common trigrams| / |union of trigrams|, between 0 and 1.
    """
    a = normalize_description(first)
    b = normalize_description(second)

    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    grams_a = trigrams(a)
    grams_b = trigrams(b)
    union = grams_a | grams_b
    if not union:
        # Both shorter than three characters and different
        return 0.0
    return len(grams_a & grams_b) / len(union)


def select_best_candidate(
    bank_entry: TransactionEntry,
    candidates: Sequence[TransactionEntry],
    tie_break: TieBreak = TieBreak.DATE_PROXIMITY,
) -> TransactionEntry | None:
    """Pick the candidate that best fits a bank entry.

    Ties keep the earliest candidate in iteration order.

    Args:
        bank_entry: Bank entry being matched.
        candidates: Equal-amount bookkeeping entries, in original order.
        tie_break: Heuristic to rank several candidates.

    Returns:
        The chosen candidate, or None if there are none.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    if tie_break == TieBreak.DESCRIPTION_SIMILARITY:
        # min() keeps the first of equal keys, so negate to prefer higher scores
        return min(
            candidates,
            key=lambda c: -trigram_similarity(bank_entry.description, c.description),
        )

    return min(candidates, key=lambda c: days_between(bank_entry.date, c.date))
