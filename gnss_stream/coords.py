"""Waypoint construction and geodetic/earth-fixed conversion."""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping
from typing import Any

from gnss_stream.errors import ConfigurationError, CoordinateError
from gnss_stream.models import EarthFixedPoint, Waypoint
from gnss_stream.utils.wgs84 import lla_to_ecef

_LAT_POLES = {"N": 1.0, "S": -1.0}
_LON_POLES = {"E": 1.0, "W": -1.0}

# Accepted spellings per field, first entry is the canonical name.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "lat": ("lat", "latitude", "lat_deg"),
    "lon": ("lon", "lng", "longitude", "lon_deg"),
    "alt": ("alt", "altitude", "height", "alt_m"),
    "lat_pole": ("lat_pole", "latPole"),
    "lon_pole": ("lon_pole", "lng_pole", "lonPole", "lngPole"),
}

_NUMBER_WITH_POLE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([A-Za-z]?)\s*$")


def _finite_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise CoordinateError(f"{name} must be a number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise CoordinateError(f"{name} must be finite, got {value!r}")
    return value


def _pole_sign(name: str, pole: str | None, poles: Mapping[str, float]) -> float:
    if pole is None or pole == "":
        return 1.0
    key = str(pole).upper()
    if key not in poles:
        raise CoordinateError(f"{name} must be one of {sorted(poles)}, got {pole!r}")
    return poles[key]


def normalize(
    lat: float,
    lat_pole: str | None,
    lon: float,
    lon_pole: str | None,
    alt: float,
) -> Waypoint:
    """Build a waypoint from signed or pole-lettered coordinates.

    South latitudes and west longitudes are negated so the result is
    always expressed north/east positive. Range checks happen in
    ``Waypoint`` itself.
    """

    lat_deg = _finite_number("lat", lat) * _pole_sign("lat_pole", lat_pole, _LAT_POLES)
    lon_deg = _finite_number("lon", lon) * _pole_sign("lon_pole", lon_pole, _LON_POLES)
    alt_m = _finite_number("alt", alt)
    return Waypoint(lat_deg=lat_deg, lon_deg=lon_deg, alt_m=alt_m)


def waypoint_from_mapping(raw: Mapping[str, Any]) -> Waypoint:
    """Build a waypoint from a mapping, accepting any single alias per field."""

    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Waypoint must be a mapping, got {type(raw).__name__}")

    known = {alias for aliases in _FIELD_ALIASES.values() for alias in aliases}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Unknown waypoint fields: {sorted(unknown)}")

    values: dict[str, Any] = {}
    for canonical, aliases in _FIELD_ALIASES.items():
        present = [alias for alias in aliases if alias in raw]
        if len(present) > 1:
            raise ConfigurationError(f"Ambiguous waypoint field '{canonical}': got {present}")
        if present:
            values[canonical] = raw[present[0]]

    missing = [name for name in ("lat", "lon", "alt") if name not in values]
    if missing:
        raise ConfigurationError(f"Waypoint missing required fields: {missing}")

    return normalize(
        values["lat"],
        values.get("lat_pole"),
        values["lon"],
        values.get("lon_pole"),
        values["alt"],
    )


def _split_pole(text: str, field: str) -> tuple[float, str | None]:
    match = _NUMBER_WITH_POLE.match(text)
    if match is None:
        raise CoordinateError(f"Cannot parse {field} from {text!r}")
    number, pole = match.groups()
    return float(number), (pole or None)


def parse_waypoint(text: str) -> Waypoint:
    """Parse ``lat[N|S],lon[E|W],alt`` such as ``37.42N,122.16W,30``."""

    parts = text.split(",")
    if len(parts) != 3:
        raise ConfigurationError(f"Waypoint {text!r} must have exactly lat,lon,alt")
    lat, lat_pole = _split_pole(parts[0], "latitude")
    lon, lon_pole = _split_pole(parts[1], "longitude")
    alt, alt_suffix = _split_pole(parts[2], "altitude")
    if alt_suffix is not None and alt_suffix.lower() != "m":
        raise CoordinateError(f"Unexpected altitude suffix {alt_suffix!r} in {text!r}")
    return normalize(lat, lat_pole, lon, lon_pole, alt)


def parse_route(text: str) -> tuple[Waypoint, ...]:
    """Parse semicolon-separated waypoints."""

    chunks = [chunk for chunk in text.split(";") if chunk.strip()]
    return tuple(parse_waypoint(chunk) for chunk in chunks)


def to_earth_fixed(waypoint: Waypoint) -> EarthFixedPoint:
    """Project a waypoint onto WGS-84 earth-fixed coordinates."""

    x, y, z = lla_to_ecef(waypoint.lat_deg, waypoint.lon_deg, waypoint.alt_m)
    return EarthFixedPoint(x_m=float(x), y_m=float(y), z_m=float(z))
