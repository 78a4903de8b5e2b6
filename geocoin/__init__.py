"""
Geocoin - deterministic geocache grid engine for location-based coin games.

Turn lat/lng positions into canonical grid cells, decide from a pure hash
which cells hold a geocache, and keep each cache's coin count alive across
eviction with mementos.

No rendering, no I/O, no global state. The UI layer owns a GameSession and
calls into it in response to player input.
"""

__version__ = "0.1.0"

# Grid tier
from .grid import (
    Board,
    Cell,
    LatLng,
    LatLngBounds,
    SessionEvent,
    Token,
    SPAWN_PROBABILITY,
)

# Cache state
from .geocache import Geocache
from .mementos import MementoStore, InMemoryMementoStore
from .tokens import SerialPolicy, LifetimeSerialPolicy, PerVisitSerialPolicy, Inventory
from .luck import seeded_luck, initial_coin_count

# Session
from .session import GameSession, build_session_from_config, DIRECTIONS

# Errors
from .errors import (
    GeocoinError,
    InvalidMementoError,
    EmptyCacheError,
    UnknownCellError,
    EmptyInventoryError,
)

__all__ = [
    # Grid
    "Board",
    "Cell",
    "LatLng",
    "LatLngBounds",
    "SessionEvent",
    "Token",
    "SPAWN_PROBABILITY",
    # Cache state
    "Geocache",
    "MementoStore",
    "InMemoryMementoStore",
    "SerialPolicy",
    "LifetimeSerialPolicy",
    "PerVisitSerialPolicy",
    "Inventory",
    # Generation
    "seeded_luck",
    "initial_coin_count",
    # Session
    "GameSession",
    "build_session_from_config",
    "DIRECTIONS",
    # Errors
    "GeocoinError",
    "InvalidMementoError",
    "EmptyCacheError",
    "UnknownCellError",
    "EmptyInventoryError",
]
