"""Exception hierarchy for GNSS telemetry streaming."""

from __future__ import annotations


class GnssStreamError(Exception):
    """Base class for all errors raised by gnss_stream."""


class ConfigurationError(GnssStreamError, ValueError):
    """Raised when a simulation configuration is malformed or incomplete."""


class CoordinateError(GnssStreamError, ValueError):
    """Raised when latitude/longitude/altitude values are not usable."""


InvalidCoordinate = CoordinateError


class StreamClosedError(GnssStreamError, RuntimeError):
    """Raised when writing to an output stream that has already ended."""


class SchedulerStateError(GnssStreamError, RuntimeError):
    """Raised on an invalid scheduler lifecycle transition."""
