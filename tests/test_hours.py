from datetime import datetime, timedelta, timezone

import pytest

from solarplant.hours import (
    DateHour,
    from_iso,
    from_midnight,
    from_now,
    from_time,
    location_stockholm,
)


def test_string():
    assert str(DateHour("2025-01-01", 5)) == "2025-01-01 05"


def test_iso_string():
    assert DateHour("2025-01-01", 15).iso_string() == "2025-01-01T15:00:00Z"


@pytest.mark.parametrize(
    "start, hours, expected",
    [
        (DateHour("2025-01-01", 10), 2, DateHour("2025-01-01", 12)),
        (DateHour("2025-01-01", 23), 2, DateHour("2025-01-02", 1)),
        (DateHour("2025-01-01", 1), -2, DateHour("2024-12-31", 23)),
    ],
    ids=["same day", "crossing midnight", "negative"],
)
def test_add(start, hours, expected):
    assert start.add(hours) == expected


@pytest.mark.parametrize(
    "start, hours, expected",
    [
        (DateHour("2025-01-01", 10), 2, DateHour("2025-01-01", 8)),
        (DateHour("2025-01-01", 0), 1, DateHour("2024-12-31", 23)),
    ],
    ids=["same day", "crossing midnight"],
)
def test_sub(start, hours, expected):
    assert start.sub(hours) == expected


def test_add_on_unparsable_date_returns_same():
    dh = DateHour("garbage", 3)
    assert dh.add(5) == dh


def test_is_zero():
    assert DateHour().is_zero()
    assert not DateHour("2025-01-01", 0).is_zero()


def test_from_time():
    t = datetime(2025, 1, 1, 15, 30, tzinfo=timezone.utc)
    assert from_time(t) == DateHour("2025-01-01", 15)


def test_from_time_zero():
    assert from_time(None).is_zero()
    assert from_time(datetime(1, 1, 1, tzinfo=timezone.utc)).is_zero()


def test_from_now():
    now = datetime.now(timezone.utc)
    dh = from_now()
    assert dh.date == now.strftime("%Y-%m-%d")
    assert dh.hour == now.hour


def test_from_midnight():
    now = datetime.now(timezone.utc)
    dh = from_midnight()
    assert dh.date == now.strftime("%Y-%m-%d")
    assert dh.hour == 0


def test_from_iso():
    parsed = from_iso("2025-01-01T15:00:00Z")
    assert parsed == datetime(2025, 1, 1, 15, 0, 0, tzinfo=timezone.utc)


def test_from_iso_invalid():
    assert from_iso("not a valid iso date") is None


def test_location_stockholm_winter():
    t = location_stockholm(datetime(2025, 1, 1, 12, tzinfo=timezone.utc))
    assert t.utcoffset() == timedelta(seconds=3600)


def test_location_stockholm_summer():
    t = location_stockholm(datetime(2025, 7, 1, 12, tzinfo=timezone.utc))
    assert t.utcoffset() == timedelta(seconds=7200)