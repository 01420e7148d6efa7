"""Hour-resolution timestamps in UTC."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

_DATE_FORMAT = "%Y-%m-%d"
_HOUR_FORMAT = "%Y-%m-%d %H"
_STOCKHOLM = ZoneInfo("Europe/Stockholm")
_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, order=True)
class DateHour:
    """A UTC date (YYYY-MM-DD) and an hour of that day."""

    date: str = ""
    hour: int = 0

    def __str__(self) -> str:
        return f"{self.date} {self.hour:02d}"

    def iso_string(self) -> str:
        """The start of the hour as an RFC 3339 UTC timestamp."""
        return f"{self.date}T{self.hour:02d}:00:00Z"

    def add(self, hours: int) -> DateHour:
        """Return the date-hour ``hours`` later; unchanged if unparsable."""
        try:
            t = datetime.strptime(str(self), _HOUR_FORMAT)
        except ValueError:
            return self
        t += timedelta(hours=hours)
        return DateHour(t.strftime(_DATE_FORMAT), t.hour)

    def sub(self, hours: int) -> DateHour:
        """Return the date-hour ``hours`` earlier."""
        return self.add(-hours)

    def is_zero(self) -> bool:
        return self.date == "" and self.hour == 0


def _as_utc(t: datetime) -> datetime:
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t


def from_time(t: datetime | None) -> DateHour:
    """The UTC date-hour of ``t``; a zero DateHour for no time."""
    if t is None:
        return DateHour()
    t = _as_utc(t)
    if t == _ZERO_TIME:
        return DateHour()
    t = t.astimezone(timezone.utc)
    return DateHour(t.strftime(_DATE_FORMAT), t.hour)


def from_now() -> DateHour:
    """The current UTC date-hour."""
    now = datetime.now(timezone.utc)
    return DateHour(now.strftime(_DATE_FORMAT), now.hour)


def from_midnight() -> DateHour:
    """Midnight of the current UTC day."""
    now = datetime.now(timezone.utc)
    return DateHour(now.strftime(_DATE_FORMAT), 0)


def from_iso(text: str) -> datetime | None:
    """Parse an RFC 3339 timestamp into UTC, or None when it is not one."""
    candidate = text
    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"
    if len(candidate) < 11 or candidate[10] not in ("T", "t"):
        return None
    candidate = candidate[:10] + "T" + candidate[11:]
    try:
        t = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if t.tzinfo is None:
        return None
    return t.astimezone(timezone.utc)


def location_stockholm(t: datetime) -> datetime:
    """``t`` expressed in Stockholm local time."""
    return _as_utc(t).astimezone(_STOCKHOLM)