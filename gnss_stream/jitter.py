"""Per-stream random position perturbation."""

from __future__ import annotations

import numpy as np

from gnss_stream.errors import ConfigurationError
from gnss_stream.models import Waypoint


def jitter(magnitude: float, rng: np.random.Generator) -> float:
    """Draw one value uniformly from ``[0, magnitude)``."""

    if magnitude == 0.0:
        return 0.0
    return float(rng.uniform(0.0, magnitude))


class JitterGenerator:
    """Adds independent uniform offsets to latitude, longitude and altitude."""

    def __init__(
        self,
        lat_deg: float,
        lon_deg: float,
        alt_m: float,
        rng: np.random.Generator | None = None,
    ) -> None:
        for name, magnitude in (("lat_deg", lat_deg), ("lon_deg", lon_deg), ("alt_m", alt_m)):
            if magnitude < 0.0:
                raise ConfigurationError(f"jitter {name} must be >= 0, got {magnitude}")
        self.lat_deg = float(lat_deg)
        self.lon_deg = float(lon_deg)
        self.alt_m = float(alt_m)
        self._rng = rng if rng is not None else np.random.default_rng()

    def apply(self, waypoint: Waypoint) -> Waypoint:
        lat = waypoint.lat_deg + jitter(self.lat_deg, self._rng)
        lon = waypoint.lon_deg + jitter(self.lon_deg, self._rng)
        alt = waypoint.alt_m + jitter(self.alt_m, self._rng)
        if lon >= 180.0:
            lon = (lon + 180.0) % 360.0 - 180.0
        return Waypoint(lat_deg=float(np.clip(lat, -90.0, 90.0)), lon_deg=lon, alt_m=alt)


def spawn_jitter_generators(
    count: int,
    lat_deg: float,
    lon_deg: float,
    alt_m: float,
    seed: int | None = None,
) -> list[JitterGenerator]:
    """Return ``count`` generators with statistically independent RNGs."""

    children = np.random.SeedSequence(seed).spawn(count)
    return [
        JitterGenerator(lat_deg, lon_deg, alt_m, rng=np.random.default_rng(child))
        for child in children
    ]
