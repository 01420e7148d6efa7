"""Log entries stored in the database."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from solarplant.db.database import Database
from solarplant.hours import from_iso

log = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass(frozen=True)
class LogEntryRow:
    timestamp: datetime
    level: int
    message: str
    attrs: str = ""


class LogTable:
    """The log table, newest entries first."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, entry: LogEntryRow) -> None:
        """Store an entry; the timestamp is kept in UTC to the second."""
        ts = entry.timestamp.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
        with self._db.writing() as conn:
            conn.execute(
                "INSERT INTO log (timestamp, level, message, attrs) VALUES (?, ?, ?, ?)",
                (ts, entry.level, entry.message, entry.attrs),
            )

    def entries(self, min_level: int, page: int = 1, page_size: int = 10) -> list[LogEntryRow]:
        """One page of entries at ``min_level`` or above, newest first.

        Pages count from 1; a page below 1 means 1 and a size below 1 means 10.
        """
        page = max(page, 1)
        if page_size < 1:
            page_size = 10
        with self._db.reading() as conn:
            rows = conn.execute(
                """SELECT timestamp, level, message, attrs FROM log
                WHERE level >= ?
                ORDER BY id DESC
                LIMIT ? OFFSET ?""",
                (min_level, page_size, (page - 1) * page_size),
            ).fetchall()
        result = []
        for ts, level, message, attrs in rows:
            timestamp = from_iso(ts)
            if timestamp is None:
                raise ValueError(f"parsing timestamp: {ts!r}")
            result.append(LogEntryRow(timestamp, level, message, attrs))
        return result

    def purge(self, max_entries: int) -> int:
        """Keep only the ``max_entries`` newest entries; return how many were deleted."""
        log.debug("purging log")
        with self._db.writing() as conn:
            cur = conn.execute(
                """DELETE FROM log WHERE id <= (
                    SELECT id FROM log ORDER BY id DESC LIMIT 1 OFFSET ?
                )""",
                (max_entries,),
            )
        return cur.rowcount