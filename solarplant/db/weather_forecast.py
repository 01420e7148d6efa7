"""Stored hourly weather forecasts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from solarplant.convert import two_decimals
from solarplant.db.database import Database, NotFoundError
from solarplant.hours import DateHour

log = logging.getLogger(__name__)

_COLUMNS = "date, hour, cloud_cover, temperature, precipitation"


@dataclass(frozen=True)
class WeatherForecastRow:
    when: DateHour
    cloud_cover: int = 0  # octas, 0-8
    temperature: float = 0.0  # °C
    precipitation: float = 0.0  # mm/h


def _row(values) -> WeatherForecastRow:
    return WeatherForecastRow(DateHour(values[0], values[1]), values[2], values[3], values[4])


class WeatherForecastTable:
    """The weather_forecast table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, rows: Iterable[WeatherForecastRow]) -> None:
        """Insert or replace forecasts, rounding measurements to two decimals."""
        rows = list(rows)
        for row in rows:
            log.debug("saving weather forecast: %s", row)
        with self._db.writing() as conn:
            conn.executemany(
                """
                INSERT INTO weather_forecast (date, hour, cloud_cover, temperature, precipitation)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(date, hour) DO UPDATE SET
                    cloud_cover = excluded.cloud_cover,
                    temperature = excluded.temperature,
                    precipitation = excluded.precipitation""",
                [
                    (
                        r.when.date,
                        r.when.hour,
                        r.cloud_cover,
                        two_decimals(r.temperature),
                        two_decimals(r.precipitation),
                    )
                    for r in rows
                ],
            )

    def get(self, dh: DateHour) -> WeatherForecastRow:
        """The forecast for one hour; NotFoundError when there is none."""
        with self._db.reading() as conn:
            values = conn.execute(
                f"SELECT {_COLUMNS} FROM weather_forecast WHERE date = ? AND hour = ?",
                (dh.date, dh.hour),
            ).fetchone()
        if values is None:
            raise NotFoundError(f"no weather forecast for {dh}")
        return _row(values)

    def get_from(self, dh: DateHour) -> list[WeatherForecastRow]:
        """Forecasts from the given hour onwards, in time order."""
        with self._db.reading() as conn:
            rows = conn.execute(
                f"""SELECT {_COLUMNS} FROM weather_forecast
                WHERE (date = ? AND hour >= ?) OR date > ?
                ORDER BY date, hour""",
                (dh.date, dh.hour, dh.date),
            ).fetchall()
        return [_row(r) for r in rows]

    def purge(self) -> int:
        return self._db.purge("weather_forecast")