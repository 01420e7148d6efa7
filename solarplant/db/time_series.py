"""Stored hourly measurements: weather, price, production, consumption and battery."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from solarplant.convert import two_decimals
from solarplant.db.database import Database
from solarplant.hours import DateHour

log = logging.getLogger(__name__)

_COLUMNS = (
    "date, hour, cloud_cover, temperature, precipitation, energy_price, "
    "production, production_lifetime, consumption, battery_level, battery_net_load"
)


@dataclass(frozen=True)
class TimeSeriesRow:
    when: DateHour
    cloud_cover: int = 0  # octas, 0-8
    temperature: float = 0.0  # °C
    precipitation: float = 0.0  # mm/h
    energy_price: float = 0.0  # SEK/kWh
    production: float = 0.0  # kWh during the hour
    production_lifetime: float = 0.0  # kWh
    consumption: float = 0.0  # kWh during the hour
    battery_level: float = 0.0  # %
    battery_net_load: float = 0.0  # kWh, discharge minus charge


@dataclass(frozen=True)
class TimeSeriesWithEstimationsRow(TimeSeriesRow):
    """A measured hour together with what was forecast for it, if anything."""

    estimated_consumption: float | None = None
    estimated_production: float | None = None


def _row(values) -> TimeSeriesRow:
    return TimeSeriesRow(DateHour(values[0], values[1]), *values[2:])


class TimeSeriesTable:
    """The time_series table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, row: TimeSeriesRow) -> None:
        """Insert a measured hour, rounding measurements to two decimals."""
        log.debug("saving time series: %s", row)
        with self._db.writing() as conn:
            conn.execute(
                f"INSERT INTO time_series ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    row.when.date,
                    row.when.hour,
                    row.cloud_cover,
                    two_decimals(row.temperature),
                    two_decimals(row.precipitation),
                    two_decimals(row.energy_price),
                    two_decimals(row.production),
                    two_decimals(row.production_lifetime),
                    two_decimals(row.consumption),
                    two_decimals(row.battery_level),
                    two_decimals(row.battery_net_load),
                ),
            )

    def for_hour(self, dh: DateHour) -> list[TimeSeriesRow]:
        """Rows for the same hour of day as ``dh``, on its date and later."""
        with self._db.reading() as conn:
            rows = conn.execute(
                f"""SELECT {_COLUMNS} FROM time_series
                WHERE date >= ? AND hour = ?
                ORDER BY date, hour""",
                (dh.date, dh.hour),
            ).fetchall()
        return [_row(r) for r in rows]

    def since_hour(self, dh: DateHour) -> list[TimeSeriesRow]:
        """Rows on or after the date of ``dh`` whose hour of day is at least its hour."""
        with self._db.reading() as conn:
            rows = conn.execute(
                f"""SELECT {_COLUMNS} FROM time_series
                WHERE date >= ? AND hour >= ?
                ORDER BY date, hour""",
                (dh.date, dh.hour),
            ).fetchall()
        return [_row(r) for r in rows]

    def with_estimations_from(self, dh: DateHour) -> list[TimeSeriesWithEstimationsRow]:
        """Rows from ``dh`` onwards joined with the energy forecast for the same hour."""
        with self._db.reading() as conn:
            rows = conn.execute(
                """SELECT
                    ts.date, ts.hour, ts.cloud_cover, ts.temperature, ts.precipitation,
                    ts.energy_price, ts.consumption, ef.consumption, ts.production,
                    ts.production_lifetime, ef.production, ts.battery_level,
                    ts.battery_net_load
                FROM time_series ts
                    LEFT OUTER JOIN energy_forecast ef
                    ON ef.date = ts.date AND ef.hour = ts.hour
                WHERE (ts.date > ?) OR (ts.date = ? AND ts.hour >= ?)
                ORDER BY ts.date, ts.hour""",
                (dh.date, dh.date, dh.hour),
            ).fetchall()
        return [
            TimeSeriesWithEstimationsRow(
                when=DateHour(r[0], r[1]),
                cloud_cover=r[2],
                temperature=r[3],
                precipitation=r[4],
                energy_price=r[5],
                consumption=r[6],
                estimated_consumption=r[7],
                production=r[8],
                production_lifetime=r[9],
                estimated_production=r[10],
                battery_level=r[11],
                battery_net_load=r[12],
            )
            for r in rows
        ]

    def purge(self) -> int:
        return self._db.purge("time_series")