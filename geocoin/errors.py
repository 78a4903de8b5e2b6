"""Exceptions raised by the grid/cache engine.

Every error here is local and recoverable: the engine reports it to the
calling layer (usually a UI event handler) and leaves its own state exactly
as it was before the failed call.
"""

from __future__ import annotations

from typing import Any


class GeocoinError(Exception):
    """Base class for all geocoin errors."""


class InvalidMementoError(GeocoinError, ValueError):
    """Memento text is not a valid non-negative integer."""

    def __init__(self, memento: Any) -> None:
        self.memento = memento
        super().__init__(f"Invalid geocache memento: {memento!r}")


class EmptyCacheError(GeocoinError):
    """A coin was requested from a geocache that has none left."""

    def __init__(self, cell: Any) -> None:
        self.cell = cell
        super().__init__(f"Geocache at {cell} has no coins to collect")


class UnknownCellError(GeocoinError, KeyError):
    """An operation referenced a cell the board never produced.

    Also raised when the cell is known but currently has no live geocache
    (it is outside the player's neighborhood or never spawned one).
    """

    def __init__(self, cell: Any, reason: str = "was never canonicalized by the board") -> None:
        self.cell = cell
        self.reason = reason
        super().__init__(f"Cell {cell} {reason}")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return self.args[0]


class EmptyInventoryError(GeocoinError):
    """A deposit was attempted while the player carries no tokens."""

    def __init__(self) -> None:
        super().__init__("No tokens to deposit")
