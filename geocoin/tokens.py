"""Token serial policies and the player's carried inventory.

How serial numbers are assigned to collected tokens is a policy decision,
so it is pluggable:

- ``LifetimeSerialPolicy`` keeps one counter per cell for the whole session.
  Serials from a given cell never repeat until the game is reset.
- ``PerVisitSerialPolicy`` restarts a cell's counter every time its geocache
  spawns (the player walked away and came back).

Both start counting at 0.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, Iterator, List, Optional

from .errors import EmptyInventoryError
from .grid.board import Cell
from .grid.schemas import Token


class SerialPolicy(ABC):
    """Decides the serial number of each newly collected token."""

    @abstractmethod
    def next_serial(self, cell: Cell) -> int:
        """Return the serial for the next token collected from ``cell``."""

    def on_spawn(self, cell: Cell) -> None:
        """Hook called whenever the geocache at ``cell`` (re)spawns."""

    @abstractmethod
    def reset(self) -> None:
        """Forget all counters (full game reset)."""


class LifetimeSerialPolicy(SerialPolicy):
    """One monotonically increasing counter per cell, for the session lifetime."""

    def __init__(self) -> None:
        self._next: Dict[str, int] = {}

    def next_serial(self, cell: Cell) -> int:
        serial = self._next.get(cell.key, 0)
        self._next[cell.key] = serial + 1
        return serial

    def reset(self) -> None:
        self._next.clear()


class PerVisitSerialPolicy(LifetimeSerialPolicy):
    """Counter restarts each time the cell's geocache spawns."""

    def on_spawn(self, cell: Cell) -> None:
        self._next.pop(cell.key, None)


class Inventory:
    """Last-in-first-out stack of carried tokens."""

    def __init__(self) -> None:
        self._tokens: List[Token] = []

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        # Bottom of the stack first.
        return iter(list(self._tokens))

    def push(self, token: Token) -> None:
        self._tokens.append(token)

    def pop(self) -> Token:
        if not self._tokens:
            raise EmptyInventoryError()
        return self._tokens.pop()

    def peek(self) -> Optional[Token]:
        return self._tokens[-1] if self._tokens else None

    def clear(self) -> None:
        self._tokens.clear()

    def counts_by_cell(self) -> Dict[str, int]:
        """Number of carried tokens per origin cell key."""

        return dict(Counter(token.cell_key for token in self._tokens))
