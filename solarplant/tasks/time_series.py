"""Record the measurements of the hour that just ended."""

from __future__ import annotations

import logging
import sqlite3

from solarplant.db.database import Database, NotFoundError
from solarplant.db.energy_price import EnergyPriceRow, EnergyPriceTable
from solarplant.db.fa_snapshot import FaSnapshotRow, FaSnapshotTable
from solarplant.db.time_series import TimeSeriesRow, TimeSeriesTable
from solarplant.db.weather_forecast import WeatherForecastRow, WeatherForecastTable
from solarplant.hours import DateHour, from_now

log = logging.getLogger(__name__)


def run_time_series_task(
    db: Database, live_data, now: DateHour | None = None
) -> TimeSeriesRow | None:
    """Snapshot the live state and store the previous hour's figures.

    The task runs at the start of each hour, so the snapshot belongs to the hour
    before ``now``. Nothing but the snapshot is stored when the hour before that
    has no snapshot; None is then returned.
    """
    log.debug("running time series task...")
    current = (now if now is not None else from_now()).sub(1)
    snapshots = FaSnapshotTable(db)
    snapshots.save(FaSnapshotRow(current, live_data.current_state()))

    try:
        previous = snapshots.get(current.sub(1))
    except (ValueError, sqlite3.Error) as err:
        log.error("error when fetching snapshot from previous hour: %s", err)
        previous = None
    if previous is None:
        log.info("don't save time series, no snapshot from previous hour...")
        return None

    try:
        weather = WeatherForecastTable(db).get(current)
    except (NotFoundError, sqlite3.Error) as err:
        log.error("error when fetching forecast hour: %s", err)
        weather = WeatherForecastRow(current)

    try:
        price = EnergyPriceTable(db).get(current)
    except (NotFoundError, sqlite3.Error) as err:
        log.error("error when fetching energy_price hour: %s", err)
        price = EnergyPriceRow(current, 0.0)

    since = previous.data
    row = TimeSeriesRow(
        when=current,
        cloud_cover=weather.cloud_cover,
        temperature=weather.temperature,
        precipitation=weather.precipitation,
        energy_price=price.price,
        production=live_data.produced_since(since),
        production_lifetime=live_data.production_lifetime(),
        consumption=live_data.consumed_since(since),
        battery_level=live_data.battery_level(),
        battery_net_load=live_data.battery_net_load_since(since),
    )
    TimeSeriesTable(db).save(row)
    log.info(
        "time series task done: production %s kWh, consumption %s kWh, lifetime %s kWh",
        row.production,
        row.consumption,
        row.production_lifetime,
    )
    return row