"""User selection of tag identifiers."""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Iterable, Iterator, Set

from ..exceptions import StaleSelectionError


class SelectionSet:
    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: Set[str] = set(ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, tag_id: object) -> bool:
        return tag_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self._ids)

    def toggle(self, tag_id: str) -> bool:
        """Flip membership of *tag_id*; return whether it is now selected."""

        if tag_id in self._ids:
            self._ids.remove(tag_id)
            return False
        self._ids.add(tag_id)
        return True

    def select_all(self, ids: Iterable[str]) -> None:
        self._ids = set(ids)

    def discard(self, tag_id: str) -> None:
        self._ids.discard(tag_id)

    def clear(self) -> None:
        self._ids.clear()

    def validate_against(self, current_ids: AbstractSet[str]) -> None:
        # Any missing id invalidates the whole batch, not just the stale part.
        stale = self._ids - set(current_ids)
        if stale:
            self.clear()
            raise StaleSelectionError(len(stale))
