"""WGS-84 coordinate utilities."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class WGS84:
    """WGS-84 ellipsoid constants."""

    a: float = 6_378_137.0
    f: float = 1.0 / 298.257223563

    @property
    def b(self) -> float:
        return self.a * (1.0 - self.f)

    @property
    def e2(self) -> float:
        return self.f * (2.0 - self.f)


ELLIPSOID = WGS84()


def lla_to_ecef(lat_deg: float, lon_deg: float, alt_m: float) -> np.ndarray:
    """Convert geodetic latitude/longitude/altitude to ECEF.

    Args:
        lat_deg: Latitude in degrees, north positive.
        lon_deg: Longitude in degrees, east positive.
        alt_m: Altitude above the WGS-84 ellipsoid in meters.

    Returns:
        ECEF position (x, y, z) in meters.
    """

    lat = np.deg2rad(lat_deg)
    lon = np.deg2rad(lon_deg)
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)

    n = ELLIPSOID.a / np.sqrt(1.0 - ELLIPSOID.e2 * sin_lat**2)
    x = (n + alt_m) * cos_lat * np.cos(lon)
    y = (n + alt_m) * cos_lat * np.sin(lon)
    z = (n * (1.0 - ELLIPSOID.e2) + alt_m) * sin_lat
    return np.array([x, y, z], dtype=float)
