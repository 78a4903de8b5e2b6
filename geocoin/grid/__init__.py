"""Grid tier: cells, the board, and geographic value types."""

from .board import Board, Cell, SPAWN_PROBABILITY
from .schemas import LatLng, LatLngBounds, SessionEvent, Token

__all__ = [
    "Board",
    "Cell",
    "SPAWN_PROBABILITY",
    "LatLng",
    "LatLngBounds",
    "SessionEvent",
    "Token",
]
