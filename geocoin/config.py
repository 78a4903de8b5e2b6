"""
Geocoin Configuration

Loads configuration from environment variables with sensible defaults.
The engine classes never read this directly; it feeds
``build_session_from_config`` and the example scripts.
"""

import os
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Grid geometry (degrees per cell edge, half-width of the neighborhood in cells)
    TILE_DEGREES: float = float(os.getenv("GEOCOIN_TILE_DEGREES", "1e-4"))
    NEIGHBORHOOD_SIZE: int = int(os.getenv("GEOCOIN_NEIGHBORHOOD_SIZE", "8"))

    # Generation
    SPAWN_PROBABILITY: float = float(os.getenv("GEOCOIN_SPAWN_PROBABILITY", "0.1"))
    MAX_COINS: int = int(os.getenv("GEOCOIN_MAX_COINS", "100"))
    # Salt for the luck function; empty keeps the unsalted world layout
    WORLD_SEED: str = os.getenv("GEOCOIN_WORLD_SEED", "")

    # Where the player starts (defaults to the classroom anchor)
    START_LAT: float = float(os.getenv("GEOCOIN_START_LAT", "36.9995"))
    START_LNG: float = float(os.getenv("GEOCOIN_START_LNG", "-122.0533"))

    # Serial policy for collected tokens: "lifetime" or "per_visit"
    SERIAL_POLICY: str = os.getenv("GEOCOIN_SERIAL_POLICY", "lifetime")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for out-of-range values."""
        if cls.TILE_DEGREES <= 0:
            raise ValueError("GEOCOIN_TILE_DEGREES must be positive")

        if cls.NEIGHBORHOOD_SIZE < 0:
            raise ValueError("GEOCOIN_NEIGHBORHOOD_SIZE must be non-negative")

        if not 0.0 <= cls.SPAWN_PROBABILITY <= 1.0:
            raise ValueError("GEOCOIN_SPAWN_PROBABILITY must be between 0 and 1")

        if cls.MAX_COINS < 1:
            raise ValueError("GEOCOIN_MAX_COINS must be at least 1")

        if not -90.0 <= cls.START_LAT <= 90.0 or not -180.0 <= cls.START_LNG <= 180.0:
            raise ValueError(
                "GEOCOIN_START_LAT/GEOCOIN_START_LNG must be a valid coordinate "
                "(lat within [-90, 90], lng within [-180, 180])"
            )

        if cls.SERIAL_POLICY not in ("lifetime", "per_visit"):
            raise ValueError(
                "GEOCOIN_SERIAL_POLICY must be 'lifetime' or 'per_visit', "
                f"got {cls.SERIAL_POLICY!r}"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Geocoin Configuration:",
            f"  Tile Size: {cls.TILE_DEGREES} deg",
            f"  Neighborhood: {cls.NEIGHBORHOOD_SIZE} cells",
            f"  Spawn Probability: {cls.SPAWN_PROBABILITY}",
            f"  Max Coins: {cls.MAX_COINS}",
            f"  World Seed: {cls.WORLD_SEED or '(none)'}",
            f"  Start: {cls.START_LAT}, {cls.START_LNG}",
            f"  Serial Policy: {cls.SERIAL_POLICY}",
        ]
        return "\n".join(lines)
