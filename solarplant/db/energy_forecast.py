"""Stored hourly production and consumption forecasts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from solarplant.convert import two_decimals
from solarplant.db.database import Database, NotFoundError
from solarplant.hours import DateHour

_COLUMNS = "date, hour, production, consumption"


@dataclass(frozen=True)
class EnergyForecastRow:
    when: DateHour
    production: float  # kWh
    consumption: float  # kWh


def _row(values) -> EnergyForecastRow:
    return EnergyForecastRow(DateHour(values[0], values[1]), values[2], values[3])


class EnergyForecastTable:
    """The energy_forecast table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, rows: Iterable[EnergyForecastRow]) -> None:
        """Insert or replace forecasts, rounded to two decimals."""
        with self._db.writing() as conn:
            conn.executemany(
                """
                INSERT INTO energy_forecast (date, hour, production, consumption)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(date, hour) DO UPDATE SET
                    production = excluded.production,
                    consumption = excluded.consumption""",
                [
                    (
                        r.when.date,
                        r.when.hour,
                        two_decimals(r.production),
                        two_decimals(r.consumption),
                    )
                    for r in rows
                ],
            )

    def get(self, dh: DateHour) -> EnergyForecastRow:
        """The forecast for one hour; NotFoundError when there is none."""
        with self._db.reading() as conn:
            values = conn.execute(
                f"SELECT {_COLUMNS} FROM energy_forecast WHERE date = ? AND hour = ?",
                (dh.date, dh.hour),
            ).fetchone()
        if values is None:
            raise NotFoundError(f"no energy forecast for {dh}")
        return _row(values)

    def get_from(self, dh: DateHour) -> list[EnergyForecastRow]:
        """Forecasts from the given hour onwards, in time order."""
        with self._db.reading() as conn:
            rows = conn.execute(
                f"""SELECT {_COLUMNS} FROM energy_forecast
                WHERE (date = ? AND hour >= ?) OR date > ?
                ORDER BY date, hour""",
                (dh.date, dh.hour, dh.date),
            ).fetchall()
        return [_row(r) for r in rows]

    def purge(self) -> int:
        return self._db.purge("energy_forecast")