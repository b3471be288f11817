from datetime import datetime, time, timedelta, timezone

import pytest

from attendance_guard.database.mysql_base import as_utc, load_json, time_column_to_hhmm, to_db_datetime


@pytest.mark.parametrize(
    "value, expected",
    [
        (timedelta(hours=9, minutes=30), "09:30"),
        (time(17, 5), "17:05"),
        ("08:15:00", "08:15"),
        (b"10:00:00", "10:00"),
        (None, None),
    ],
)
def test_time_column_to_hhmm(value, expected):
    assert time_column_to_hhmm(value) == expected


def test_naive_db_datetimes_are_utc():
    stored = to_db_datetime(datetime(2026, 2, 3, 9, 5, tzinfo=timezone(timedelta(hours=-5))))
    assert stored == datetime(2026, 2, 3, 14, 5)
    assert as_utc(stored) == datetime(2026, 2, 3, 14, 5, tzinfo=timezone.utc)


def test_load_json_accepts_bytes():
    assert load_json(b'{"reasons": ["Weekend attendance"]}') == {"reasons": ["Weekend attendance"]}
    assert load_json("") is None
