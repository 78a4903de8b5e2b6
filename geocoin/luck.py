"""Deterministic pseudo-random numbers keyed by strings.

``luck`` is a pure hash: the same key yields the same float in ``[0, 1)``
on every call, in every process, regardless of ``PYTHONHASHSEED`` or of
which other keys were evaluated first. This is what lets the board decide
again, on every visit, which cells hold a geocache without storing that
decision anywhere.
"""

from __future__ import annotations

import hashlib
import math
from typing import Callable, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .grid.board import Cell

LuckFunction = Callable[[str], float]

# 53 bits is the full float mantissa, so the quotient is exact and never 1.0.
_MANTISSA_BITS = 53
_SCALE = float(2**_MANTISSA_BITS)

INITIAL_VALUE_SUFFIX = "initialValue"


def luck(key: str) -> float:
    """Map ``key`` to a stable float in ``[0, 1)`` using SHA-256."""

    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return (int.from_bytes(digest[:8], "big") >> (64 - _MANTISSA_BITS)) / _SCALE


def seeded_luck(seed: str) -> LuckFunction:
    """Return a luck function whose keys are salted with ``seed``.

    Two worlds with different seeds get independent cache layouts while
    each stays deterministic. An empty seed returns plain :func:`luck`.
    """

    if not seed:
        return luck

    def _luck(key: str) -> float:
        return luck(f"{seed}:{key}")

    return _luck


def initial_coin_count(luck_fn: LuckFunction, cell: "Cell", max_coins: int = 100) -> int:
    """Coins a freshly generated geocache starts with, in ``[0, max_coins)``."""

    if max_coins < 1:
        raise ValueError("max_coins must be at least 1")
    return math.floor(luck_fn(f"{cell.key},{INITIAL_VALUE_SUFFIX}") * max_coins)
