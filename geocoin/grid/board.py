"""Discrete grid over geographic coordinates.

The board turns continuous lat/lng points into canonical cells, reports the
rectangle each cell covers, and decides (deterministically) which cells near
a point hold a geocache.

Cell identity policy: cells compare and hash by value on ``(i, j)``. The
board additionally interns them, so while the registry lives every lookup
for the same indices returns the very same object. After ``clear()`` new
instances are created, but they still compare equal to the old ones, so
dictionaries keyed by cells keep working across a reset.
"""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass
from typing import Dict, List

from ..errors import UnknownCellError
from ..luck import LuckFunction, luck as default_luck
from .schemas import LatLng, LatLngBounds

SPAWN_PROBABILITY = 0.1


@dataclass(frozen=True)
class Cell:
    """One grid square, identified by integer indices."""

    i: int
    j: int

    @property
    def key(self) -> str:
        """Composite registry key, also used as the luck seed."""

        return f"{self.i},{self.j}"

    def __str__(self) -> str:
        return self.key


def _round_half_up(value: float) -> int:
    # Python's round() is half-to-even; cell boundaries need halves to go up.
    # floor(value + 0.5) would round 0.49999999999999994 up.
    whole = math.floor(value)
    return whole + (1 if value - whole >= 0.5 else 0)


class Board:
    """Registry of canonical cells plus the grid's fixed configuration.

    Args:
        tile_width: Size of one cell edge, in degrees.
        visibility_radius: Half-width, in cells, of the neighborhood scanned
            by :meth:`get_cells_near_point`.
        luck: Pure function mapping a string key to ``[0, 1)``.
        spawn_probability: Threshold below which a cell holds a geocache.
    """

    def __init__(
        self,
        tile_width: float,
        visibility_radius: int,
        *,
        luck: LuckFunction = default_luck,
        spawn_probability: float = SPAWN_PROBABILITY,
    ) -> None:
        if tile_width <= 0:
            raise ValueError("tile_width must be positive")
        if visibility_radius < 0:
            raise ValueError("visibility_radius must be non-negative")
        if not 0.0 <= spawn_probability <= 1.0:
            raise ValueError("spawn_probability must be within [0, 1]")

        self.tile_width = tile_width
        self.visibility_radius = visibility_radius
        self.luck = luck
        self.spawn_probability = spawn_probability
        self._known_cells: Dict[str, Cell] = {}

    def __len__(self) -> int:
        return len(self._known_cells)

    def get_canonical_cell(self, i: int, j: int) -> Cell:
        """Return the interned cell for ``(i, j)``, creating it on first use.

        Raises:
            TypeError: If ``i`` or ``j`` is not an integer (e.g. ``1.0``)
        """

        i, j = operator.index(i), operator.index(j)
        key = f"{i},{j}"
        cell = self._known_cells.get(key)
        if cell is None:
            cell = Cell(i, j)
            self._known_cells[key] = cell
        return cell

    def is_known(self, cell: Cell) -> bool:
        return cell.key in self._known_cells

    def require_known(self, cell: Cell) -> Cell:
        """Return the canonical instance for ``cell`` or raise ``UnknownCellError``."""

        try:
            return self._known_cells[cell.key]
        except KeyError:
            raise UnknownCellError(cell) from None

    def get_cell_for_point(self, point: LatLng) -> Cell:
        i = _round_half_up(point.lat / self.tile_width)
        j = _round_half_up(point.lng / self.tile_width)
        return self.get_canonical_cell(i, j)

    def get_cell_bounds(self, cell: Cell) -> LatLngBounds:
        """Rectangle from ``(i, j) * tile_width`` to ``(i + 1, j + 1) * tile_width``."""

        width = self.tile_width
        return LatLngBounds.from_corners(
            LatLng(lat=cell.i * width, lng=cell.j * width),
            LatLng(lat=(cell.i + 1) * width, lng=(cell.j + 1) * width),
        )

    def has_cache(self, i: int, j: int) -> bool:
        """Whether the cell at ``(i, j)`` holds a geocache. Pure; interns nothing."""

        return self.luck(f"{i},{j}") < self.spawn_probability

    def get_cells_near_point(self, point: LatLng) -> List[Cell]:
        """Cells holding a geocache in the square neighborhood of ``point``.

        The scan covers ``[origin - r, origin + r)`` on both axes, so the
        east/south edge is one cell narrower than the west/north edge.
        Results come back row by row (``i`` outer, ``j`` inner).
        """

        origin = self.get_cell_for_point(point)
        radius = self.visibility_radius
        result: List[Cell] = []
        for i in range(origin.i - radius, origin.i + radius):
            for j in range(origin.j - radius, origin.j + radius):
                if self.has_cache(i, j):
                    result.append(self.get_canonical_cell(i, j))
        return result

    def clear(self) -> None:
        """Forget every canonical cell (full game reset)."""

        self._known_cells.clear()
