"""Matching engine, match registry and aggregation views."""

from ledger_reconciler.processing.aggregation import (
    BalanceSummary,
    FilterMode,
    all_entries_matched,
    compute_balance_summary,
    displayed_entries,
    filter_by_mode,
    search_entries,
    sort_entries_by_date,
    unmatched_combined,
)
from ledger_reconciler.processing.auto_matcher import (
    AutoMatcher,
    AutoMatchResult,
    auto_match,
)
from ledger_reconciler.processing.manual_matcher import (
    ManualMatchResult,
    UnmatchResult,
    manual_match,
    unmatch,
)
from ledger_reconciler.processing.match_registry import MatchRegistry, RegistryError
from ledger_reconciler.processing.tie_breakers import (
    TieBreak,
    select_best_candidate,
    trigram_similarity,
)

__all__ = [
    "AutoMatcher",
    "AutoMatchResult",
    "auto_match",
    "ManualMatchResult",
    "UnmatchResult",
    "manual_match",
    "unmatch",
    "MatchRegistry",
    "RegistryError",
    "TieBreak",
    "select_best_candidate",
    "trigram_similarity",
    "BalanceSummary",
    "FilterMode",
    "all_entries_matched",
    "compute_balance_summary",
    "displayed_entries",
    "filter_by_mode",
    "search_entries",
    "sort_entries_by_date",
    "unmatched_combined",
]
