"""Swift Binary Protocol encoding via libsbp."""

from __future__ import annotations

from typing import Callable, ClassVar, Mapping

from sbp.msg import SBP, SENDER_ID
from sbp.navigation import MsgGPSTime, MsgPosECEF, MsgPosLLH

from gnss_stream.models import MessageCodec, MessageType
from gnss_stream.timing.gps_time import SECONDS_PER_WEEK

MS_PER_WEEK = SECONDS_PER_WEEK * 1000
_NS_PER_MS = 1_000_000


def tow_to_ms(tow_s: float) -> int:
    """Convert seconds of week to the protocol's integer milliseconds."""

    return int(round(tow_s * 1000.0)) % MS_PER_WEEK


def split_gps_time(week_number: int, tow_s: int, ns: float) -> tuple[int, int, int]:
    """Return ``(wn, tow_ms, ns_residual)`` with ``|ns_residual| <= 500000``."""

    total_ns = int(tow_s) * 1_000_000_000 + int(round(ns))
    tow_ms, ns_residual = divmod(total_ns, _NS_PER_MS)
    if ns_residual > _NS_PER_MS // 2:
        tow_ms += 1
        ns_residual -= _NS_PER_MS
    wn = int(week_number)
    if tow_ms >= MS_PER_WEEK:
        wn += 1
        tow_ms -= MS_PER_WEEK
    return wn, tow_ms, ns_residual


class SbpCodec(MessageCodec):
    """Encode logical messages as framed SBP (preamble, header, payload, CRC)."""

    name: ClassVar[str] = "sbp"
    file_extension: ClassVar[str] = "sbp"

    def __init__(self, sender: int = SENDER_ID) -> None:
        self.sender = sender
        self._builders: dict[MessageType, Callable[[Mapping[str, float]], SBP]] = {
            MessageType.CLOCK: self._gps_time,
            MessageType.GEO_POSITION: self._pos_llh,
            MessageType.ECEF_POSITION: self._pos_ecef,
        }

    def encode(self, message_type: MessageType, record: Mapping[str, float]) -> bytes:
        msg = self._builders[message_type](record)
        return bytes(msg.to_binary())

    def _gps_time(self, record: Mapping[str, float]) -> MsgGPSTime:
        wn, tow_ms, ns_residual = split_gps_time(record["week_number"], record["tow_s"], record["ns"])
        return MsgGPSTime(
            sender=self.sender,
            wn=wn,
            tow=tow_ms,
            ns_residual=ns_residual,
            flags=int(record["flags"]),
        )

    def _pos_llh(self, record: Mapping[str, float]) -> MsgPosLLH:
        return MsgPosLLH(
            sender=self.sender,
            tow=tow_to_ms(record["tow_s"]),
            lat=float(record["lat_deg"]),
            lon=float(record["lon_deg"]),
            height=float(record["height_m"]),
            h_accuracy=int(record["h_accuracy"]),
            v_accuracy=int(record["v_accuracy"]),
            n_sats=int(record["n_sats"]),
            flags=int(record["flags"]),
        )

    def _pos_ecef(self, record: Mapping[str, float]) -> MsgPosECEF:
        return MsgPosECEF(
            sender=self.sender,
            tow=tow_to_ms(record["tow_s"]),
            x=float(record["x_m"]),
            y=float(record["y_m"]),
            z=float(record["z_m"]),
            accuracy=int(record["accuracy"]),
            n_sats=int(record["n_sats"]),
            flags=int(record["flags"]),
        )
