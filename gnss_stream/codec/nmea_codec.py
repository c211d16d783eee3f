"""NMEA 0183 text encoding of telemetry messages."""

from __future__ import annotations

from typing import ClassVar, Mapping

from gnss_stream.models import GpsClock, MessageCodec, MessageType
from gnss_stream.nmea.nmea_formatter import build_gga, build_zda
from gnss_stream.timing.gps_time import gps_time_to_datetime

SECONDS_PER_DAY = 86_400


class NmeaCodec(MessageCodec):
    """Clock messages become ZDA, geodetic positions GGA.

    NMEA has no earth-fixed sentence, so ECEF messages encode to nothing.
    Times are GPS time labelled as UTC (no leap-second correction).
    """

    name: ClassVar[str] = "nmea"
    file_extension: ClassVar[str] = "nmea"

    def __init__(self, talker: str = "GN") -> None:
        self.talker = talker

    def encode(self, message_type: MessageType, record: Mapping[str, float]) -> bytes:
        if message_type is MessageType.CLOCK:
            clock = GpsClock(
                week_number=int(record["week_number"]),
                tow_s=int(record["tow_s"]) + float(record["ns"]) / 1e9,
            )
            sentence = build_zda(gps_time_to_datetime(clock), talker=self.talker)
        elif message_type is MessageType.GEO_POSITION:
            sentence = build_gga(
                float(record["tow_s"]) % SECONDS_PER_DAY,
                float(record["lat_deg"]),
                float(record["lon_deg"]),
                float(record["height_m"]),
                valid=True,
                num_sats=int(record["n_sats"]),
                talker=self.talker,
            )
        elif message_type is MessageType.ECEF_POSITION:
            return b""
        else:
            raise KeyError(message_type)
        return sentence.encode("ascii")
