"""Synthetic GNSS telemetry streams for exercising downstream consumers."""

from gnss_stream.config import SimulationConfig, load_config
from gnss_stream.coords import normalize, parse_route, to_earth_fixed, waypoint_from_mapping
from gnss_stream.errors import (
    ConfigurationError,
    CoordinateError,
    GnssStreamError,
    InvalidCoordinate,
    SchedulerStateError,
    StreamClosedError,
)
from gnss_stream.models import EarthFixedPoint, GpsClock, TelemetryFrame, Waypoint
from gnss_stream.runtime import FanoutAdapter, OutputStream, Scheduler, SchedulerState

__version__ = "0.3.0"

__all__ = [
    "ConfigurationError",
    "CoordinateError",
    "EarthFixedPoint",
    "FanoutAdapter",
    "GnssStreamError",
    "GpsClock",
    "InvalidCoordinate",
    "OutputStream",
    "Scheduler",
    "SchedulerState",
    "SchedulerStateError",
    "SimulationConfig",
    "StreamClosedError",
    "TelemetryFrame",
    "Waypoint",
    "load_config",
    "normalize",
    "parse_route",
    "to_earth_fixed",
    "waypoint_from_mapping",
]
