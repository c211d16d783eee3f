"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from gnss_stream.models import Waypoint


@pytest.fixture
def two_point_route() -> tuple[Waypoint, Waypoint]:
    return (
        Waypoint(lat_deg=0.0, lon_deg=0.0, alt_m=0.0),
        Waypoint(lat_deg=1.0, lon_deg=1.0, alt_m=100.0),
    )
