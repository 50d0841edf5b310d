# rasoi_revive/core/leftovers.py
from __future__ import annotations

from typing import Iterator, List


class LeftoverList:
    """
    Free-text leftover items in the order the user entered them.

    No deduplication and no normalization beyond trimming surrounding whitespace.
    """

    def __init__(self) -> None:
        self._items: List[str] = []

    def append(self, raw: str) -> bool:
        """Add a trimmed item. Blank input is ignored; returns whether anything was added."""
        item = raw.strip()
        if not item:
            return False
        self._items.append(item)
        return True

    def remove(self, index: int) -> str:
        # Positions come from the rendered chip list, so negatives are never valid.
        if index < 0 or index >= len(self._items):
            raise IndexError(f"No leftover at position {index}")
        return self._items.pop(index)

    def clear(self) -> None:
        self._items.clear()

    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))
