"""Stored hourly snapshots of the Ferroamp system state."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from solarplant.db.database import Database
from solarplant.ferroamp.fa_data import FaData
from solarplant.hours import DateHour

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaSnapshotRow:
    when: DateHour
    data: FaData


class FaSnapshotTable:
    """The fa_snapshot table; the state is stored as JSON."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, row: FaSnapshotRow) -> None:
        log.debug("saving ferroamp snapshot for %s", row.when)
        text = json.dumps(row.data.to_json(), separators=(",", ":"))
        with self._db.writing() as conn:
            conn.execute(
                "INSERT INTO fa_snapshot (date, hour, data) VALUES (?, ?, ?)",
                (row.when.date, row.when.hour, text),
            )

    def get(self, dh: DateHour) -> FaSnapshotRow | None:
        """The snapshot taken for an hour, or None when there is none."""
        with self._db.reading() as conn:
            values = conn.execute(
                "SELECT date, hour, data FROM fa_snapshot WHERE date = ? AND hour = ?",
                (dh.date, dh.hour),
            ).fetchone()
        if values is None:
            return None
        try:
            data = FaData.from_json(values[2])
        except ValueError as err:
            log.error("error when decoding snapshot JSON: %s", err)
            raise
        return FaSnapshotRow(DateHour(values[0], values[1]), data)

    def purge(self) -> int:
        return self._db.purge("fa_snapshot")