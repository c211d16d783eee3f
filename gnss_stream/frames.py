"""Assembly of per-tick telemetry frames."""

from __future__ import annotations

import math

from gnss_stream.coords import to_earth_fixed
from gnss_stream.models import (
    ClockMessage,
    EarthFixedPoint,
    EcefPositionMessage,
    GeoPositionMessage,
    GpsClock,
    MessageCodec,
    TelemetryFrame,
    Waypoint,
)


def build_frame(
    gps_clock: GpsClock,
    position: Waypoint,
    earth_fixed: EarthFixedPoint | None = None,
) -> TelemetryFrame:
    """Build the clock, geodetic and earth-fixed messages for one tick."""

    if earth_fixed is None:
        earth_fixed = to_earth_fixed(position)
    tow_s = gps_clock.tow_s
    whole_s = math.floor(tow_s)

    clock = ClockMessage(
        week_number=gps_clock.week_number,
        tow_s=int(whole_s),
        ns=(tow_s - whole_s) * 1e9,
    )
    geo = GeoPositionMessage(
        tow_s=tow_s,
        lat_deg=position.lat_deg,
        lon_deg=position.lon_deg,
        height_m=position.alt_m,
    )
    ecef = EcefPositionMessage(
        tow_s=tow_s,
        x_m=earth_fixed.x_m,
        y_m=earth_fixed.y_m,
        z_m=earth_fixed.z_m,
    )
    return TelemetryFrame(clock=clock, geo=geo, ecef=ecef)


def encode_frame(codec: MessageCodec, frame: TelemetryFrame) -> bytes:
    """Encode all messages of a frame, clock first."""

    return b"".join(codec.encode(msg.message_type, msg.as_record()) for msg in frame.messages)
