"""Pydantic schemas for geographic values and session records.

These models are the serializable surface the engine shares with its
callers: coordinates going in, bounding boxes and token receipts coming
out. Cells themselves live in ``board.py`` as lightweight dataclasses.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class LatLng(BaseModel):
    """A geographic coordinate in degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., allow_inf_nan=False, description="Latitude in degrees")
    lng: float = Field(..., allow_inf_nan=False, description="Longitude in degrees")

    def shifted(self, d_lat: float = 0.0, d_lng: float = 0.0) -> "LatLng":
        """Return a new coordinate offset by the given deltas."""

        return LatLng(lat=self.lat + d_lat, lng=self.lng + d_lng)


class LatLngBounds(BaseModel):
    """Axis-aligned geographic rectangle."""

    model_config = ConfigDict(frozen=True)

    south_west: LatLng
    north_east: LatLng

    @classmethod
    def from_corners(cls, a: LatLng, b: LatLng) -> "LatLngBounds":
        """Build bounds from any two opposite corners."""

        return cls(
            south_west=LatLng(lat=min(a.lat, b.lat), lng=min(a.lng, b.lng)),
            north_east=LatLng(lat=max(a.lat, b.lat), lng=max(a.lng, b.lng)),
        )


class Token(BaseModel):
    """Receipt for one collected coin that has not been deposited yet.

    ``serial`` distinguishes successive collections from the same cell; how
    it is assigned is decided by the session's serial policy.
    """

    model_config = ConfigDict(frozen=True)

    i: int
    j: int
    serial: int = Field(..., ge=0)

    @property
    def cell_key(self) -> str:
        return f"{self.i},{self.j}"

    def __str__(self) -> str:
        return f"{self.cell_key}#{self.serial}"


EventKind = Literal["spawn", "despawn", "collect", "deposit", "move", "reset"]


class SessionEvent(BaseModel):
    """Notification delivered to session listeners after a state change.

    Listeners should treat events as hints and query the session for
    current state rather than holding on to the values here.
    """

    kind: EventKind
    cell_key: Optional[str] = Field(None, description="Composite 'i,j' key of the affected cell")
    num_coins: Optional[int] = Field(None, description="Coin count after the change")
    token: Optional[Token] = None
    position: Optional[LatLng] = Field(None, description="Player position for move events")
