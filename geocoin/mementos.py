"""
MementoStore interface for keeping geocache state across eviction.

Geocache objects only exist while their cell is near the player. When a cell
leaves the neighborhood its cache is dropped, and the memento saved here is
the only thing that survives. The next time the cell becomes active the
session restores the cache from this store instead of regenerating it.

Key responsibilities:
- Save a memento for a cell, overwriting any previous one
- Load the latest memento for a cell (read-after-write consistent)
- Forget everything on a full game reset

Stores are keyed by the cell's composite ``"i,j"`` key, so a memento stays
reachable even when the board hands out a fresh Cell instance after a reset.

Usage pattern:
    store = InMemoryMementoStore()
    store.save(cell, cache.to_memento())
    memento = store.load(cell)  # None if the cell was never saved
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterator, Optional

from .grid.board import Cell


class MementoStore(ABC):
    """Abstract base class for geocache memento storage.

    The session depends on this interface only, so a caller can swap in a
    store with different bookkeeping (for example one that records every
    write for replay) without touching the engine.

    Method categories:
    1. Writes: save(), discard(), clear()
    2. Reads: load(), keys(), ``in``, ``len()``
    """

    @abstractmethod
    def save(self, cell: Cell, memento: str) -> None:
        """
        Store ``memento`` as the latest state for ``cell``.

        Args:
            cell: Cell whose geocache was serialized
            memento: Opaque serialized state from ``Geocache.to_memento()``
        """

    @abstractmethod
    def load(self, cell: Cell) -> Optional[str]:
        """
        Return the latest memento for ``cell``.

        Returns:
            The memento string, or None if nothing was saved for this cell
        """

    @abstractmethod
    def discard(self, cell: Cell) -> None:
        """Forget the memento for ``cell``. Safe to call if none exists."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every memento."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate the composite keys of all saved cells."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def __contains__(self, cell: object) -> bool:
        if not isinstance(cell, Cell):
            return False
        return self.load(cell) is not None


class InMemoryMementoStore(MementoStore):
    """Dict-backed memento store; contents are lost when the process exits.

    Storage structure:
    - mementos: Dict[str, str] - memento text by ``"i,j"`` cell key

    Performance characteristics:
    - Save: O(1) dict insert
    - Load: O(1) dict lookup
    - Memory: one short string per cell ever spawned, until clear()
    """

    def __init__(self) -> None:
        self.mementos: Dict[str, str] = {}

    def save(self, cell: Cell, memento: str) -> None:
        self.mementos[cell.key] = memento

    def load(self, cell: Cell) -> Optional[str]:
        return self.mementos.get(cell.key)

    def discard(self, cell: Cell) -> None:
        self.mementos.pop(cell.key, None)

    def clear(self) -> None:
        self.mementos.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self.mementos))

    def __len__(self) -> int:
        return len(self.mementos)
