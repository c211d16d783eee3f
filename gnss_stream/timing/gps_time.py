"""Wall-clock to GPS week / time-of-week conversion.

Leap seconds are ignored: the wall clock is treated as already running on
the GPS timescale.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from gnss_stream.models import GpsClock

GPS_EPOCH = datetime(1980, 1, 6, tzinfo=timezone.utc)
GPS_EPOCH_UNIX_S = 315_964_800
SECONDS_PER_WEEK = 604_800
_WEEK = timedelta(seconds=SECONDS_PER_WEEK)


def to_gps_time(instant: datetime | float) -> GpsClock:
    """Return the GPS week number and time of week for ``instant``.

    Args:
        instant: Aware or naive (assumed UTC) datetime, or POSIX seconds.
    """

    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        elapsed = instant - GPS_EPOCH
        week_number = elapsed // _WEEK
        tow_s = (elapsed - week_number * _WEEK).total_seconds()
        return GpsClock(week_number=int(week_number), tow_s=tow_s)

    elapsed_s = float(instant) - GPS_EPOCH_UNIX_S
    week_number = math.floor(elapsed_s / SECONDS_PER_WEEK)
    tow_s = elapsed_s - week_number * SECONDS_PER_WEEK
    return GpsClock(week_number=int(week_number), tow_s=tow_s)


def gps_time_to_datetime(clock: GpsClock) -> datetime:
    """Return the UTC-labelled datetime for a GPS week / time of week."""

    return GPS_EPOCH + clock.week_number * _WEEK + timedelta(seconds=clock.tow_s)
