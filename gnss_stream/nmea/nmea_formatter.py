"""Minimal NMEA 0183 formatter for GGA and ZDA sentences."""

from __future__ import annotations

from datetime import datetime


def nmea_checksum(payload: str) -> str:
    """Return the NMEA XOR checksum as a 2-digit uppercase hex string."""
    checksum = 0
    for char in payload:
        checksum ^= ord(char)
    return f"{checksum:02X}"


def wrap_sentence(payload: str) -> str:
    """Wrap a payload as a full NMEA sentence with checksum and CRLF."""
    return f"${payload}*{nmea_checksum(payload)}\r\n"


def _degrees_minutes(value_deg: float) -> tuple[int, float]:
    """Split into whole degrees and minutes rounded to 4 decimals, carrying 60' into degrees."""
    ten_thousandths = int(round(abs(value_deg) * 600_000.0))
    degrees, remainder = divmod(ten_thousandths, 600_000)
    return degrees, remainder / 10_000.0


def format_lat(lat_deg: float) -> tuple[str, str]:
    """Format latitude as ddmm.mmmm and hemisphere indicator."""
    hemisphere = "N" if lat_deg >= 0 else "S"
    degrees, minutes = _degrees_minutes(lat_deg)
    return f"{degrees:02d}{minutes:07.4f}", hemisphere


def format_lon(lon_deg: float) -> tuple[str, str]:
    """Format longitude as dddmm.mmmm and hemisphere indicator."""
    hemisphere = "E" if lon_deg >= 0 else "W"
    degrees, minutes = _degrees_minutes(lon_deg)
    return f"{degrees:03d}{minutes:07.4f}", hemisphere


def format_time_of_day(seconds_of_day: float) -> str:
    """Format seconds since midnight as hhmmss.ss."""
    hundredths_total = int(round(seconds_of_day * 100.0)) % (86_400 * 100)
    seconds_total, hundredths = divmod(hundredths_total, 100)
    minutes_total, second = divmod(seconds_total, 60)
    hour, minute = divmod(minutes_total, 60)
    return f"{hour:02d}{minute:02d}{second:02d}.{hundredths:02d}"


def build_gga(
    seconds_of_day: float,
    lat_deg: float,
    lon_deg: float,
    alt_m: float,
    valid: bool,
    num_sats: int = 8,
    hdop: float = 0.9,
    geoid_sep_m: float = 0.0,
    talker: str = "GN",
) -> str:
    """Build an NMEA GGA sentence with checksum and CRLF terminator."""
    lat_str, ns = format_lat(lat_deg)
    lon_str, ew = format_lon(lon_deg)
    time_str = format_time_of_day(seconds_of_day)
    fix_quality = 1 if valid else 0

    payload = (
        f"{talker}GGA,{time_str},{lat_str},{ns},{lon_str},{ew},{fix_quality},"
        f"{num_sats:02d},{hdop:.1f},{alt_m:.1f},M,{geoid_sep_m:.1f},M,,"
    )
    return wrap_sentence(payload)


def build_zda(t: datetime, talker: str = "GN") -> str:
    """Build an NMEA ZDA (time and date) sentence with zero zone offset."""
    seconds_of_day = t.hour * 3600 + t.minute * 60 + t.second + t.microsecond / 1e6
    time_str = format_time_of_day(seconds_of_day)
    payload = f"{talker}ZDA,{time_str},{t.day:02d},{t.month:02d},{t.year:04d},00,00"
    return wrap_sentence(payload)
