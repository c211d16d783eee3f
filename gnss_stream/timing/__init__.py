"""GPS time models."""

from gnss_stream.timing.gps_time import (
    GPS_EPOCH,
    GPS_EPOCH_UNIX_S,
    SECONDS_PER_WEEK,
    gps_time_to_datetime,
    to_gps_time,
)

__all__ = [
    "GPS_EPOCH",
    "GPS_EPOCH_UNIX_S",
    "SECONDS_PER_WEEK",
    "gps_time_to_datetime",
    "to_gps_time",
]
