"""A logging handler that stores records in the database log table."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from solarplant.db.database import Database
from solarplant.db.log import LogEntryRow, LogTable
from solarplant.log_levels import AttrFormat

_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _escape(value: str) -> str:
    return value.replace("=", "\\=").replace(";", "\\;")


class SQLiteHandler(logging.Handler):
    """Stores records at ``min_level`` or above, with their extra attributes."""

    def __init__(
        self,
        db: Database,
        min_level: int = logging.INFO,
        attrs_format: AttrFormat | str = AttrFormat.JSON,
    ) -> None:
        super().__init__(min_level)
        self.min_level = min_level
        value = attrs_format.value if isinstance(attrs_format, AttrFormat) else str(attrs_format)
        self.attrs_format = AttrFormat.TEXT if value.upper() == "TEXT" else AttrFormat.JSON
        self._table = LogTable(db)

    @staticmethod
    def _attrs(record: logging.LogRecord) -> list[tuple[str, str]]:
        return [
            (key, str(value))
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        ]

    def format_attrs(self, record: logging.LogRecord) -> str:
        """The record's extra attributes as stored: ``k=v; k2=v2`` or a JSON list."""
        attrs = self._attrs(record)
        if self.attrs_format is AttrFormat.TEXT:
            return "; ".join(f"{key}={_escape(value)}" for key, value in attrs)
        if not attrs:
            return ""
        return json.dumps(
            [{key: value} for key, value in attrs], separators=(",", ":"), ensure_ascii=False
        )

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno < self.min_level:
            return
        try:
            entry = LogEntryRow(
                timestamp=datetime.fromtimestamp(record.created, timezone.utc),
                level=record.levelno,
                message=record.getMessage(),
                attrs=self.format_attrs(record),
            )
            self._table.save(entry)
        except Exception:
            self.handleError(record)