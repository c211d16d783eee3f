"""Utilities for GNSS telemetry streaming.

NOTE: Keep this package lightweight; it is imported by every runtime module.
"""

from gnss_stream.utils.logging import get_logger
from gnss_stream.utils.wgs84 import lla_to_ecef

__all__ = [
    "get_logger",
    "lla_to_ecef",
]
