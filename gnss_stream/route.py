"""Piecewise-linear traversal of a waypoint route."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from gnss_stream.coords import waypoint_from_mapping
from gnss_stream.errors import ConfigurationError
from gnss_stream.models import Waypoint


@dataclass(frozen=True)
class RouteSegment:
    """Two bounding waypoints and the blend factor between them."""

    start: Waypoint
    end: Waypoint
    factor: float

    def interpolate(self) -> Waypoint:
        """Blend latitude, longitude and altitude independently."""

        f = self.factor
        return Waypoint(
            lat_deg=self.start.lat_deg + (self.end.lat_deg - self.start.lat_deg) * f,
            lon_deg=self.start.lon_deg + (self.end.lon_deg - self.start.lon_deg) * f,
            alt_m=self.start.alt_m + (self.end.alt_m - self.start.alt_m) * f,
        )


def coerce_waypoint(item: Any) -> Waypoint:
    if isinstance(item, Waypoint):
        return item
    return waypoint_from_mapping(item)


@dataclass(frozen=True)
class Route:
    """Ordered waypoints spread evenly over the run duration."""

    waypoints: tuple[Waypoint, ...]

    def __post_init__(self) -> None:
        if isinstance(self.waypoints, (str, bytes)) or not isinstance(self.waypoints, Iterable):
            raise ConfigurationError("route must be a sequence of waypoints")
        waypoints = tuple(coerce_waypoint(item) for item in self.waypoints)
        if len(waypoints) < 2:
            raise ConfigurationError(f"route needs at least 2 waypoints, got {len(waypoints)}")
        object.__setattr__(self, "waypoints", waypoints)

    def __len__(self) -> int:
        return len(self.waypoints)

    @property
    def first(self) -> Waypoint:
        return self.waypoints[0]

    @property
    def last(self) -> Waypoint:
        return self.waypoints[-1]

    def position_at(self, elapsed_ms: float, total_duration_ms: float) -> RouteSegment | None:
        """Locate the segment for ``elapsed_ms``.

        Returns None once the next waypoint index runs past the end of the
        route, which happens from ``elapsed_ms >= total_duration_ms`` on.
        """

        progress = elapsed_ms / total_duration_ms
        index = progress * (len(self.waypoints) - 1)
        current = math.floor(index)
        following = current + 1
        if current < 0 or following >= len(self.waypoints):
            return None
        return RouteSegment(
            start=self.waypoints[current],
            end=self.waypoints[following],
            factor=index - current,
        )

    def interpolate(self, elapsed_ms: float, total_duration_ms: float) -> Waypoint | None:
        segment = self.position_at(elapsed_ms, total_duration_ms)
        return segment.interpolate() if segment is not None else None
