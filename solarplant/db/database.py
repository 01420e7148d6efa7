"""SQLite storage with a single writer connection and a reader connection."""

from __future__ import annotations

import logging
import os
import re
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from solarplant.db.migrator import migrate
from solarplant.hours import from_time

log = logging.getLogger(__name__)

_INIT_SQL = """
    PRAGMA journal_mode = WAL;
    PRAGMA synchronous = NORMAL;
    PRAGMA temp_store = MEMORY;
    PRAGMA mmap_size = 30000000000;
    PRAGMA busy_timeout = 5000;
    PRAGMA automatic_index = true;
    PRAGMA foreign_keys = ON;
    PRAGMA analysis_limit = 1000;
    PRAGMA trusted_schema = OFF;
"""

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_MEMORY = ":memory:"


class NotFoundError(LookupError):
    """No row matched the query."""


class Database:
    """An SQLite database; writes are serialised through one connection.

    When ``migrations_dir`` is given, its numbered ``.sql`` files are applied
    on open.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        retention_days: int = 90,
        migrations_dir: str | os.PathLike | None = None,
    ) -> None:
        self.path = str(path)
        self.retention_days = retention_days
        self._closed = False
        self._write_lock = threading.RLock()
        self._write = self._open()
        try:
            if migrations_dir is not None:
                migrate(self._write, migrations_dir)
            if self.path == _MEMORY:
                # A private in-memory database exists only on its own connection.
                self._read = self._write
                self._read_lock = self._write_lock
            else:
                self._read = self._open()
                self._read_lock = threading.RLock()
        except BaseException:
            self._write.close()
            raise

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.path, isolation_level=None, check_same_thread=False, timeout=5.0
        )
        try:
            conn.executescript(_INIT_SQL)
        except BaseException:
            conn.close()
            raise
        return conn

    @contextmanager
    def reading(self) -> Iterator[sqlite3.Connection]:
        """The reader connection, held for the duration of the block."""
        with self._read_lock:
            yield self._read

    @contextmanager
    def writing(self) -> Iterator[sqlite3.Connection]:
        """The writer connection inside a transaction, committed when the block ends."""
        with self._write_lock:
            self._write.execute("BEGIN IMMEDIATE")
            try:
                yield self._write
            except BaseException:
                self._write.execute("ROLLBACK")
                raise
            self._write.execute("COMMIT")

    def purge(self, table: str) -> int:
        """Delete the rows of ``table`` older than the retention period; return how many."""
        if not _IDENTIFIER.match(table):
            raise ValueError(f"invalid table name: {table!r}")
        log.debug("purging table %s", table)
        cutoff = datetime.now(timezone.utc) - timedelta(days=self.retention_days)
        before = from_time(cutoff)
        with self.writing() as conn:
            cur = conn.execute(
                f"DELETE FROM {table} WHERE (date = ? AND hour < ?) OR date < ?",
                (before.date, before.hour, before.date),
            )
        log.debug("purged %d rows from %s", cur.rowcount, table)
        return cur.rowcount

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._read is not self._write:
            self._read.close()
        self._write.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *args) -> None:
        self.close()