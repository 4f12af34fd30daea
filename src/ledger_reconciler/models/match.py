"""Match group model for reconciliation pairings."""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger_reconciler.utils.decimal_utils import amounts_equal


class MatchType(Enum):
    """How a match group was created."""

    AUTO = "auto"
    MANUAL = "manual"


def generate_match_id(match_type: MatchType) -> str:
    """Generate a match group id prefixed with its origin."""
    return f"{match_type.value}-{uuid.uuid4()}"


def is_discrepancy(bank_sum: Decimal, other_sum: Decimal) -> bool:
    """Check whether two side sums differ at two-decimal precision."""
    return not amounts_equal(bank_sum, other_sum)


@dataclass(frozen=True)
class MatchGroup:
    """A set of bank and bookkeeping entries declared equivalent.

    Groups are never modified. Unmatching removes a group and a new
    match creates a new group with a new id.

    Attributes:
        id: Unique id prefixed with "auto-" or "manual-".
        match_type: Whether the group was created automatically or by hand.
        bank_entry_ids: Member ids from the bank ledger, in selection order.
        other_entry_ids: Member ids from the bookkeeping ledger, in selection order.
        bank_sum_in_match: Sum of bank member amounts when the match was made.
        other_sum_in_match: Sum of bookkeeping member amounts when the match was made.
        is_discrepancy: True if the two sums differ at two-decimal precision.
    """

    id: str
    match_type: MatchType
    bank_entry_ids: tuple[str, ...]
    other_entry_ids: tuple[str, ...]
    bank_sum_in_match: Decimal
    other_sum_in_match: Decimal
    is_discrepancy: bool = False

    @classmethod
    def create(
        cls,
        match_type: MatchType,
        bank_entry_ids: tuple[str, ...] | list[str],
        other_entry_ids: tuple[str, ...] | list[str],
        bank_sum: Decimal,
        other_sum: Decimal,
    ) -> "MatchGroup":
        """Create a group with a fresh id and a computed discrepancy flag."""
        return cls(
            id=generate_match_id(match_type),
            match_type=match_type,
            bank_entry_ids=tuple(bank_entry_ids),
            other_entry_ids=tuple(other_entry_ids),
            bank_sum_in_match=bank_sum,
            other_sum_in_match=other_sum,
            is_discrepancy=is_discrepancy(bank_sum, other_sum),
        )

    @property
    def entry_ids(self) -> tuple[str, ...]:
        """All member ids, bank side first."""
        return self.bank_entry_ids + self.other_entry_ids

    @property
    def difference(self) -> Decimal:
        """Bank sum minus bookkeeping sum."""
        return self.bank_sum_in_match - self.other_sum_in_match
