"""Forecast hourly production and consumption from history and weather."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

from solarplant.convert import two_decimals
from solarplant.db.database import Database, NotFoundError
from solarplant.db.energy_forecast import EnergyForecastRow, EnergyForecastTable
from solarplant.db.time_series import TimeSeriesTable
from solarplant.db.weather_forecast import WeatherForecastRow, WeatherForecastTable
from solarplant.hours import DateHour, from_now

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryAverage:
    production: float = 0.0
    consumption: float = 0.0  # compensated for battery charging
    cloud_cover: float = 0.0
    temperature: float = 0.0


def history_average(db: Database, config, hour: DateHour) -> HistoryAverage:
    """Mean of the measured hours of the same hour of day, from ``historical_days`` back.

    Raises NotFoundError when there is no history.
    """
    start = hour.sub(24 * config.historical_days)
    rows = TimeSeriesTable(db).for_hour(start)
    if not rows:
        raise NotFoundError(f"no historical data found for {start}")
    count = len(rows)
    return HistoryAverage(
        production=sum(r.production for r in rows) / count,
        consumption=sum(r.consumption + r.battery_net_load for r in rows) / count,
        cloud_cover=sum(float(r.cloud_cover) for r in rows) / count,
        temperature=sum(r.temperature for r in rows) / count,
    )


def run_energy_forecast(db: Database, config, now: DateHour | None = None) -> list[EnergyForecastRow]:
    """Forecast the ``hours_ahead`` hours after ``now``, store and return the forecasts."""
    log.debug("running energy forecast task...")
    hour = now if now is not None else from_now()
    weather = WeatherForecastTable(db)
    rows = []
    for _ in range(config.hours_ahead):
        hour = hour.add(1)

        try:
            forecast = weather.get(hour)
        except NotFoundError:
            log.warning("energy forecast problem, forecast not found for %s", hour)
            forecast = WeatherForecastRow(hour)
        except sqlite3.Error as err:
            log.error("energy forecast error, can't fetch forecast: %s", err)
            forecast = WeatherForecastRow(hour)

        try:
            avg = history_average(db, config, hour)
        except (NotFoundError, sqlite3.Error) as err:
            log.error("energy forecast error, can't fetch history average: %s", err)
            avg = HistoryAverage()

        impact = config.cloud_cover_impact
        # Normalise to a clear sky, then adjust for the forecast cloud cover.
        clear_sky = avg.production + avg.production * impact * avg.cloud_cover / 8.0
        estimated = clear_sky - clear_sky * impact * float(forecast.cloud_cover) / 8.0

        rows.append(
            EnergyForecastRow(
                when=hour,
                production=two_decimals(estimated),
                consumption=two_decimals(avg.consumption),
            )
        )

    EnergyForecastTable(db).save(rows)
    log.debug("energy forecast task done, %d hours updated", len(rows))
    return rows