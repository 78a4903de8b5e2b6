"""
Game session: the single owner of all mutable game state.

Holds no module-level globals. Everything a running game needs lives on one
GameSession instance that the UI layer keeps a reference to:
- the Board (canonical cell registry + grid configuration)
- the MementoStore (serialized geocache state, survives eviction)
- the live Geocache objects for cells near the player
- the carried token Inventory and the serial policy that numbers tokens

Respawn flow (``move_to``):
1. Ask the board which cells near the new position hold a geocache
2. Flush caches for cells that left the neighborhood and drop them
3. For each newly active cell, restore from its memento if one exists,
   otherwise generate the initial coin count and save it right away
4. Notify listeners

Player actions (``collect`` / ``deposit``) mutate the live cache and
re-serialize it into the memento store before returning, so a later read of
the memento always reflects the mutation.

All calls run to completion synchronously; repeated calls with the same
position are idempotent.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import Config
from .errors import UnknownCellError
from .geocache import Geocache
from .grid.board import Board, Cell
from .grid.schemas import EventKind, LatLng, SessionEvent, Token
from .logging_utils import log_action, log_deterministic, log_error, log_info, verbose_enabled
from .luck import initial_coin_count, seeded_luck
from .mementos import InMemoryMementoStore, MementoStore
from .tokens import Inventory, LifetimeSerialPolicy, PerVisitSerialPolicy, SerialPolicy

SessionListener = Callable[[SessionEvent], None]

NULL_ISLAND = LatLng(lat=0.0, lng=0.0)

# (d_lat, d_lng) in tiles
DIRECTIONS = {
    "north": (1, 0),
    "south": (-1, 0),
    "east": (0, 1),
    "west": (0, -1),
}


class GameSession:
    """Coordinates the board, geocaches, mementos, and the player's tokens."""

    def __init__(
        self,
        board: Board,
        *,
        mementos: Optional[MementoStore] = None,
        serial_policy: Optional[SerialPolicy] = None,
        start: Optional[LatLng] = None,
        max_coins: int = 100,
        listeners: Optional[Iterable[SessionListener]] = None,
        verbose: Optional[bool] = None,
    ) -> None:
        """Create a session and spawn the caches around the start position.

        Args:
            board: Grid used for cell lookup and cache placement.
            mementos: Store for serialized cache state. Defaults to a fresh
                in-memory store.
            serial_policy: Token numbering policy. Defaults to one counter per
                cell for the session lifetime.
            start: Initial player position (also where reset() returns to).
            max_coins: Exclusive upper bound for generated coin counts.
            listeners: Callables notified with a SessionEvent after each
                state change.
            verbose: Print trace lines; defaults to GEOCOIN_VERBOSE.
        """
        self.board = board
        self.mementos = mementos if mementos is not None else InMemoryMementoStore()
        self.serial_policy = serial_policy or LifetimeSerialPolicy()
        self.inventory = Inventory()
        self.start = start or NULL_ISLAND
        self.position = self.start
        self.max_coins = max_coins
        self.verbose = verbose_enabled() if verbose is None else verbose

        self.listeners: List[SessionListener] = list(listeners or [])
        # Live caches, keyed by cell (value equality on (i, j)). Insertion
        # order follows the board's row-major scan.
        self._active: Dict[Cell, Geocache] = {}

        self.move_to(self.start)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> None:
        self.listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        """Stop notifying ``listener``. Safe to call if it was never subscribed."""
        if listener in self.listeners:
            self.listeners.remove(listener)

    def _emit(self, kind: EventKind, cell: Optional[Cell] = None, **fields) -> None:
        event = SessionEvent(kind=kind, cell_key=cell.key if cell else None, **fields)
        # Listener failures are logged but never undo a completed action.
        for listener in list(self.listeners):
            try:
                listener(event)
            except Exception as exc:
                log_error(f"[Session] Listener failed on {kind}: {exc}")

    # ------------------------------------------------------------------
    # Movement and respawn
    # ------------------------------------------------------------------

    def move_to(self, point: LatLng) -> List[Cell]:
        """Place the player at ``point`` and respawn nearby geocaches.

        Every incoming cache is loaded before anything changes, so if a
        stored memento is invalid the session keeps its previous position
        and caches.

        Returns:
            Cells with a live geocache after the move, in board scan order.

        Raises:
            InvalidMementoError: If a newly active cell has a corrupt memento
        """
        nearby = self.board.get_cells_near_point(point)
        nearby_set = set(nearby)
        incoming = {cell: self._load_cache(cell) for cell in nearby if cell not in self._active}

        self.position = point
        for cell in [cell for cell in self._active if cell not in nearby_set]:
            self._despawn(cell)

        for cache, generated in incoming.values():
            self._spawn(cache, generated)

        # Rebuild in scan order so active_cells() matches the board.
        self._active = {cell: self._active[cell] for cell in nearby}

        self._emit("move", position=point)
        return nearby

    def refresh(self) -> List[Cell]:
        """Respawn around the current position (e.g. right after reset())."""
        return self.move_to(self.position)

    def step(self, direction: str, count: int = 1) -> List[Cell]:
        """Move ``count`` tiles north, south, east, or west.

        Raises:
            ValueError: If ``direction`` is not one of the four compass names
        """
        try:
            d_i, d_j = DIRECTIONS[direction.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown direction {direction!r}; expected one of {', '.join(DIRECTIONS)}"
            ) from None
        width = self.board.tile_width
        return self.move_to(self.position.shifted(d_i * width * count, d_j * width * count))

    def _load_cache(self, cell: Cell) -> Tuple[Geocache, bool]:
        """Restore ``cell``'s cache from its memento, or generate a fresh one.

        Returns the cache and whether it was generated. Touches no state.
        """
        memento = self.mementos.load(cell)
        if memento is None:
            return Geocache(cell, initial_coin_count(self.board.luck, cell, self.max_coins)), True
        return Geocache.restore(cell, memento), False

    def _spawn(self, cache: Geocache, generated: bool) -> None:
        cell = cache.cell
        if generated:
            self.mementos.save(cell, cache.to_memento())
        self._active[cell] = cache
        self.serial_policy.on_spawn(cell)
        if self.verbose:
            origin = "generated" if generated else "restored"
            log_deterministic(f"[Spawn] {cell.key}: {cache.num_coins} coins ({origin})")
        self._emit("spawn", cell, num_coins=cache.num_coins)

    def _despawn(self, cell: Cell) -> None:
        cache = self._active.pop(cell)
        self.mementos.save(cell, cache.to_memento())
        if self.verbose:
            log_deterministic(f"[Despawn] {cell.key}: {cache.num_coins} coins saved")
        self._emit("despawn", cell, num_coins=cache.num_coins)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_cells(self) -> List[Cell]:
        return list(self._active)

    def cache_at(self, cell: Cell) -> Geocache:
        """Return the live geocache for ``cell``.

        Raises:
            UnknownCellError: If the board never produced ``cell`` or the
                cell has no live geocache right now
        """
        canonical = self.board.require_known(cell)
        cache = self._active.get(canonical)
        if cache is None:
            raise UnknownCellError(cell, "has no active geocache")
        return cache

    def coins_at(self, cell: Cell) -> int:
        return self.cache_at(cell).num_coins

    @property
    def points(self) -> int:
        """Number of collected tokens the player is carrying."""
        return len(self.inventory)

    def status_text(self) -> str:
        if self.points < 1:
            return "No points yet..."
        return f"{self.points} points accumulated"

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def collect(self, cell: Cell) -> Token:
        """Take one coin from the cache at ``cell`` and carry it as a token.

        Raises:
            UnknownCellError: If ``cell`` has no live geocache
            EmptyCacheError: If the cache has no coins left
        """
        cache = self.cache_at(cell)
        cache.collect_one()
        cell = cache.cell
        token = Token(i=cell.i, j=cell.j, serial=self.serial_policy.next_serial(cell))
        self.inventory.push(token)
        self.mementos.save(cache.cell, cache.to_memento())

        if self.verbose:
            log_action(f"[Collect] {token} from {cache.cell.key} ({cache.num_coins} left)")
        self._emit("collect", cache.cell, num_coins=cache.num_coins, token=token)
        return token

    def deposit(self, cell: Cell) -> Token:
        """Put the most recently collected token into the cache at ``cell``.

        Raises:
            UnknownCellError: If ``cell`` has no live geocache
            EmptyInventoryError: If the player carries no tokens
            ValueError: If the cache is already full; the token stays carried
        """
        cache = self.cache_at(cell)
        token = self.inventory.pop()
        try:
            cache.deposit_one()
        except ValueError:
            self.inventory.push(token)
            raise
        self.mementos.save(cache.cell, cache.to_memento())

        if self.verbose:
            log_action(f"[Deposit] {token} into {cache.cell.key} ({cache.num_coins} now)")
        self._emit("deposit", cache.cell, num_coins=cache.num_coins, token=token)
        return token

    def reset(self, *, respawn: bool = False) -> None:
        """Discard all game state and return the player to the start.

        Clears mementos, live caches, the board registry, the inventory, and
        serial counters. With ``respawn=False`` the memento store is left
        empty until the next move or refresh(); every cell then regenerates
        its initial coin count.
        """
        self.mementos.clear()
        self._active.clear()
        self.board.clear()
        self.inventory.clear()
        self.serial_policy.reset()
        self.position = self.start

        if self.verbose:
            log_info("[Session] Game reset")
        self._emit("reset", position=self.start)

        if respawn:
            self.refresh()


def build_session_from_config(
    config: type = Config,
    *,
    listeners: Optional[Iterable[SessionListener]] = None,
) -> GameSession:
    """Construct a ready-to-play session from ``Config`` values.

    Raises:
        ValueError: If the configuration is out of range
    """
    config.validate()
    board = Board(
        config.TILE_DEGREES,
        config.NEIGHBORHOOD_SIZE,
        luck=seeded_luck(config.WORLD_SEED),
        spawn_probability=config.SPAWN_PROBABILITY,
    )
    policy: SerialPolicy = (
        PerVisitSerialPolicy() if config.SERIAL_POLICY == "per_visit" else LifetimeSerialPolicy()
    )
    return GameSession(
        board,
        serial_policy=policy,
        start=LatLng(lat=config.START_LAT, lng=config.START_LNG),
        max_coins=config.MAX_COINS,
        listeners=listeners,
    )
