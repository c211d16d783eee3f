"""NMEA sentence formatting utilities."""

from .nmea_formatter import (
    build_gga,
    build_zda,
    format_lat,
    format_lon,
    format_time_of_day,
    nmea_checksum,
    wrap_sentence,
)

__all__ = [
    "nmea_checksum",
    "wrap_sentence",
    "format_lat",
    "format_lon",
    "format_time_of_day",
    "build_gga",
    "build_zda",
]
