"""Wire-format codecs for telemetry messages."""

from __future__ import annotations

from gnss_stream.codec.nmea_codec import NmeaCodec
from gnss_stream.codec.sbp_codec import SbpCodec
from gnss_stream.errors import ConfigurationError
from gnss_stream.models import MessageCodec

CODECS: dict[str, type[MessageCodec]] = {
    SbpCodec.name: SbpCodec,
    NmeaCodec.name: NmeaCodec,
}


def create_codec(name: str) -> MessageCodec:
    """Instantiate a codec by registry name."""

    try:
        codec_cls = CODECS[name.lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown codec: {name!r}; expected one of {sorted(CODECS)}") from None
    return codec_cls()


__all__ = ["CODECS", "NmeaCodec", "SbpCodec", "create_codec"]
