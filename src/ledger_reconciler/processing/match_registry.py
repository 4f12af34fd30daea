"""Registry of the match groups in a reconciliation session."""

from typing import Iterable, Iterator

from ledger_reconciler.models.match import MatchGroup, MatchType
from ledger_reconciler.utils.logging_config import get_logger

logger = get_logger(__name__)


class RegistryError(Exception):
    """Exception raised when a group would break registry consistency."""

    pass


class MatchRegistry:
    """Ordered set of match groups keyed by id.

    The registry guarantees that no entry belongs to more than one group.
    Groups are stored as given and never modified; removing a group is the
    only way to release its entries.

    Note: This class is NOT thread-safe. It is owned by a single session.
    """

    def __init__(self, groups: Iterable[MatchGroup] = ()):
        self._groups: dict[str, MatchGroup] = {}
        self._entry_index: dict[str, str] = {}
        self.extend(groups)

    def add(self, group: MatchGroup) -> None:
        """Register a new group.

        Args:
            group: Group to add.

        Raises:
            RegistryError: If the id is taken or a member already has a group.
        """
        if group.id in self._groups:
            raise RegistryError(f"Match group {group.id} is already registered")

        for entry_id in group.entry_ids:
            owner = self._entry_index.get(entry_id)
            if owner is not None:
                raise RegistryError(
                    f"Entry {entry_id} already belongs to match group {owner}"
                )

        self._groups[group.id] = group
        for entry_id in group.entry_ids:
            self._entry_index[entry_id] = group.id

    def extend(self, groups: Iterable[MatchGroup]) -> None:
        """Register several groups in order."""
        for group in groups:
            self.add(group)

    def remove(self, match_id: str) -> MatchGroup | None:
        """Remove a group.

        Args:
            match_id: Id of the group to remove.

        Returns:
            The removed group, or None if no such group exists.
        """
        group = self._groups.pop(match_id, None)
        if group is None:
            logger.debug(f"No match group {match_id} to remove")
            return None

        for entry_id in group.entry_ids:
            self._entry_index.pop(entry_id, None)
        return group

    def get(self, match_id: str) -> MatchGroup | None:
        return self._groups.get(match_id)

    def find_by_entry(self, entry_id: str) -> MatchGroup | None:
        """Find the group an entry belongs to."""
        match_id = self._entry_index.get(entry_id)
        return self._groups.get(match_id) if match_id else None

    def clear(self) -> None:
        self._groups.clear()
        self._entry_index.clear()

    @property
    def groups(self) -> list[MatchGroup]:
        """All groups in registration order."""
        return list(self._groups.values())

    @property
    def discrepancies(self) -> list[MatchGroup]:
        """Groups whose two sides' sums differ."""
        return [g for g in self._groups.values() if g.is_discrepancy]

    def count_by_type(self) -> dict[MatchType, int]:
        """Number of groups per match type."""
        counts = {match_type: 0 for match_type in MatchType}
        for group in self._groups.values():
            counts[group.match_type] += 1
        return counts

    def __contains__(self, match_id: object) -> bool:
        return match_id in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[MatchGroup]:
        return iter(list(self._groups.values()))
