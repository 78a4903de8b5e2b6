"""Per-cell geocache state and its memento encoding.

A geocache holds nothing but a coin count. Its memento is the decimal text
of that count, which is all a caller needs to evict the object and rebuild
it later with identical state.

Unlike a bare ``int(text)``, :meth:`Geocache.from_memento` rejects anything
that is not a plain non-negative integer and leaves the cache untouched, so
a corrupted memento can never turn into a nonsense coin count.

Coin counts are capped at MAX_COIN_COUNT (4300 decimal digits), the longest
integer CPython converts to and from text by default, so every count has a
memento that reads back exactly.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .errors import EmptyCacheError, InvalidMementoError

if TYPE_CHECKING:  # pragma: no cover
    from .grid.board import Cell

_MEMENTO_PATTERN = re.compile(r"\s*(\d+)\s*", re.ASCII)

MAX_MEMENTO_DIGITS = 4300
MAX_COIN_COUNT = 10**MAX_MEMENTO_DIGITS - 1


class Geocache:
    """Mutable coin count attached to one cell."""

    def __init__(self, cell: "Cell", num_coins: int = 0) -> None:
        if num_coins < 0:
            raise ValueError("num_coins must be non-negative")
        if num_coins > MAX_COIN_COUNT:
            raise ValueError(f"num_coins must have at most {MAX_MEMENTO_DIGITS} digits")
        self.cell = cell
        self.num_coins = num_coins

    def __repr__(self) -> str:
        return f"Geocache(cell={self.cell.key!r}, num_coins={self.num_coins})"

    @classmethod
    def restore(cls, cell: "Cell", memento: str) -> "Geocache":
        """Rebuild a geocache for ``cell`` from a saved memento."""

        cache = cls(cell)
        cache.from_memento(memento)
        return cache

    @property
    def is_empty(self) -> bool:
        return self.num_coins == 0

    def to_memento(self) -> str:
        return str(self.num_coins)

    def from_memento(self, memento: str) -> None:
        """Overwrite the coin count from ``memento``.

        Raises:
            InvalidMementoError: If ``memento`` is not the decimal text of a
                non-negative integer. The coin count is not modified.
        """

        if not isinstance(memento, str):
            raise InvalidMementoError(memento)
        match = _MEMENTO_PATTERN.fullmatch(memento)
        if match is None:
            raise InvalidMementoError(memento)
        digits = match.group(1)
        if len(digits) > MAX_MEMENTO_DIGITS:
            raise InvalidMementoError(memento)
        try:
            self.num_coins = int(digits)
        except ValueError as exc:
            raise InvalidMementoError(memento) from exc

    def collect_one(self) -> int:
        """Remove one coin and return the remaining count.

        Raises:
            EmptyCacheError: If the cache has no coins.
        """

        if self.num_coins <= 0:
            raise EmptyCacheError(self.cell)
        self.num_coins -= 1
        return self.num_coins

    def deposit_one(self) -> int:
        """Add one coin and return the new count.

        Raises:
            ValueError: If the cache already holds MAX_COIN_COUNT coins.
        """

        if self.num_coins >= MAX_COIN_COUNT:
            raise ValueError(f"Geocache at {self.cell} is full")
        self.num_coins += 1
        return self.num_coins
