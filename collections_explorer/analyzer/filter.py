"""Type-name allow-set used to decide which matched nodes are recorded."""
from typing import FrozenSet, Iterable

from collections_explorer.errors import FilterFrozenError


class TypeFilter:
    """Allow-set of simple type names.

    An empty allow-set permits every name. A non-empty one permits exactly its
    members: no prefix matching, no qualified names, no case folding.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names = set()
        self._frozen = False
        for name in names:
            self.add(name)

    def add(self, name: str) -> None:
        """Add a simple type name to the allow-set.

        Raises:
            FilterFrozenError: If processing has already started
        """
        if self._frozen:
            raise FilterFrozenError(f"Cannot add '{name}': filter is in use")
        self._names.add(name)

    def freeze(self) -> 'TypeFilter':
        """Mark the start of processing; the allow-set is read-only afterwards."""
        self._frozen = True
        return self

    def matches(self, name: str) -> bool:
        if not self._names:
            return True
        return name in self._names

    @property
    def names(self) -> FrozenSet[str]:
        return frozenset(self._names)

    @property
    def is_empty(self) -> bool:
        return not self._names

    def __repr__(self) -> str:
        return f"TypeFilter({sorted(self._names)!r})"
