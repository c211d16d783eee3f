"""Core data models and interfaces for synthetic GNSS telemetry."""

from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum
from typing import ClassVar, Mapping

from gnss_stream.errors import CoordinateError


@dataclass(frozen=True)
class Waypoint:
    """Geodetic position, always stored north-positive / east-positive.

    Latitude must lie in [-90, 90] and longitude in [-180, 180].
    """

    lat_deg: float
    lon_deg: float
    alt_m: float

    lat_pole: ClassVar[str] = "N"
    lon_pole: ClassVar[str] = "E"

    def __post_init__(self) -> None:
        for name in ("lat_deg", "lon_deg", "alt_m"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise CoordinateError(f"{name} must be a number, got {type(value).__name__}")
            value = float(value)
            if not math.isfinite(value):
                raise CoordinateError(f"{name} must be finite, got {value!r}")
            object.__setattr__(self, name, value)
        if not -90.0 <= self.lat_deg <= 90.0:
            raise CoordinateError(f"latitude {self.lat_deg} outside [-90, 90]")
        if not -180.0 <= self.lon_deg <= 180.0:
            raise CoordinateError(f"longitude {self.lon_deg} outside [-180, 180]")


@dataclass(frozen=True)
class EarthFixedPoint:
    """WGS-84 earth-centred, earth-fixed position in meters."""

    x_m: float
    y_m: float
    z_m: float


@dataclass(frozen=True)
class GpsClock:
    """GPS week number and time of week."""

    week_number: int
    tow_s: float


class MessageType(Enum):
    """Logical telemetry message identifiers handed to a codec."""

    CLOCK = "gps_time"
    GEO_POSITION = "pos_llh"
    ECEF_POSITION = "pos_ecef"


class _Message:
    message_type: ClassVar[MessageType]

    def as_record(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ClockMessage(_Message):
    """GPS time message: week, whole seconds of week and nanosecond remainder."""

    message_type: ClassVar[MessageType] = MessageType.CLOCK

    week_number: int
    tow_s: int
    ns: float
    flags: int = 0


@dataclass(frozen=True)
class GeoPositionMessage(_Message):
    """Geodetic position message with placeholder quality fields."""

    message_type: ClassVar[MessageType] = MessageType.GEO_POSITION

    tow_s: float
    lat_deg: float
    lon_deg: float
    height_m: float
    h_accuracy: int = 1
    v_accuracy: int = 1
    n_sats: int = 10
    flags: int = 0


@dataclass(frozen=True)
class EcefPositionMessage(_Message):
    """Earth-fixed position message with placeholder quality fields."""

    message_type: ClassVar[MessageType] = MessageType.ECEF_POSITION

    tow_s: float
    x_m: float
    y_m: float
    z_m: float
    accuracy: int = 1
    n_sats: int = 10
    flags: int = 0


@dataclass(frozen=True)
class TelemetryFrame:
    """Messages emitted for one tick on one stream."""

    clock: ClockMessage
    geo: GeoPositionMessage
    ecef: EcefPositionMessage

    @property
    def messages(self) -> tuple[ClockMessage, GeoPositionMessage, EcefPositionMessage]:
        return (self.clock, self.geo, self.ecef)


class MessageCodec(ABC):
    """Interface for wire-format encoders of logical telemetry messages."""

    name: ClassVar[str] = ""
    file_extension: ClassVar[str] = "bin"

    @abstractmethod
    def encode(self, message_type: MessageType, record: Mapping[str, float]) -> bytes:
        """Return the framed wire representation of one message."""
