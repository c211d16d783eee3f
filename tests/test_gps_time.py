from datetime import datetime, timedelta, timezone

import pytest

from gnss_stream.models import GpsClock
from gnss_stream.timing import GPS_EPOCH, GPS_EPOCH_UNIX_S, SECONDS_PER_WEEK, gps_time_to_datetime, to_gps_time


def test_gps_epoch_is_week_zero() -> None:
    assert to_gps_time(GPS_EPOCH) == GpsClock(week_number=0, tow_s=0.0)
    assert to_gps_time(float(GPS_EPOCH_UNIX_S)) == GpsClock(week_number=0, tow_s=0.0)


def test_one_week_after_epoch_is_week_one() -> None:
    assert to_gps_time(GPS_EPOCH + timedelta(weeks=1)) == GpsClock(week_number=1, tow_s=0.0)
    assert to_gps_time(GPS_EPOCH_UNIX_S + SECONDS_PER_WEEK) == GpsClock(week_number=1, tow_s=0.0)


def test_naive_datetime_is_treated_as_utc() -> None:
    aware = datetime(2024, 3, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)
    naive = aware.replace(tzinfo=None)

    assert to_gps_time(naive) == to_gps_time(aware)


def test_datetime_and_posix_seconds_agree() -> None:
    instant = datetime(2016, 6, 15, 8, 0, 1, 500000, tzinfo=timezone.utc)
    from_datetime = to_gps_time(instant)
    from_posix = to_gps_time(instant.timestamp())

    assert from_datetime.week_number == from_posix.week_number == 1901
    assert from_posix.tow_s == pytest.approx(from_datetime.tow_s, abs=1e-6)
    assert from_datetime.tow_s == pytest.approx(3 * 86400 + 8 * 3600 + 1.5)


def test_sub_second_time_of_week_is_preserved() -> None:
    clock = to_gps_time(GPS_EPOCH + timedelta(days=2, microseconds=123456))
    assert clock.tow_s == pytest.approx(2 * 86400 + 0.123456)


def test_gps_time_to_datetime_inverts_conversion() -> None:
    instant = datetime(2021, 11, 7, 23, 59, 59, tzinfo=timezone.utc)
    assert gps_time_to_datetime(to_gps_time(instant)) == instant
