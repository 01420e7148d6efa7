import pytest

from solarplant.db.database import Database
from solarplant.db.energy_price import EnergyPriceRow, EnergyPriceTable
from solarplant.db.fa_snapshot import FaSnapshotRow, FaSnapshotTable
from solarplant.db.time_series import TimeSeriesTable
from solarplant.db.weather_forecast import WeatherForecastRow, WeatherForecastTable
from solarplant.ferroamp.fa_data import FaData
from solarplant.ferroamp.live_data import FaInMemData
from solarplant.hours import DateHour
from solarplant.tasks.time_series import run_time_series_task

SCHEMA = """
CREATE TABLE energy_price (date TEXT NOT NULL, hour INTEGER NOT NULL, price REAL,
    PRIMARY KEY (date, hour));
CREATE TABLE weather_forecast (date TEXT NOT NULL, hour INTEGER NOT NULL, cloud_cover INTEGER,
    temperature REAL, precipitation REAL, PRIMARY KEY (date, hour));
CREATE TABLE time_series (date TEXT NOT NULL, hour INTEGER NOT NULL, cloud_cover INTEGER,
    temperature REAL, precipitation REAL, energy_price REAL, production REAL,
    production_lifetime REAL, consumption REAL, battery_level REAL, battery_net_load REAL);
CREATE TABLE fa_snapshot (date TEXT NOT NULL, hour INTEGER NOT NULL, data TEXT);
"""

NOW = DateHour("2025-01-01", 12)
CURRENT = DateHour("2025-01-01", 11)
PREVIOUS = DateHour("2025-01-01", 10)


@pytest.fixture
def db(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_init.sql").write_text(SCHEMA)
    database = Database(":memory:", migrations_dir=migrations)
    yield database
    database.close()


def test_without_previous_snapshot_only_snapshot_is_saved(db):
    assert run_time_series_task(db, FaInMemData(), NOW) is None
    assert FaSnapshotTable(db).get(CURRENT) is not None
    assert TimeSeriesTable(db).for_hour(CURRENT) == []


def test_row_uses_weather_and_price_of_the_hour(db):
    FaSnapshotTable(db).save(FaSnapshotRow(PREVIOUS, FaData()))
    WeatherForecastTable(db).save([WeatherForecastRow(CURRENT, 4, 5.5, 0.25)])
    EnergyPriceTable(db).save([EnergyPriceRow(CURRENT, 1.25)])

    row = run_time_series_task(db, FaInMemData(), NOW)

    assert row.when == CURRENT
    assert (row.cloud_cover, row.temperature, row.precipitation) == (4, 5.5, 0.25)
    assert row.energy_price == 1.25
    assert row.production == 0.0
    assert TimeSeriesTable(db).for_hour(CURRENT) == [row]


def test_missing_weather_and_price_give_zeros(db):
    FaSnapshotTable(db).save(FaSnapshotRow(PREVIOUS, FaData()))

    row = run_time_series_task(db, FaInMemData(), NOW)

    assert (row.cloud_cover, row.temperature, row.energy_price) == (0, 0.0, 0.0)
    assert len(TimeSeriesTable(db).for_hour(CURRENT)) == 1


def test_consecutive_hours_chain(db):
    run_time_series_task(db, FaInMemData(), NOW)
    row = run_time_series_task(db, FaInMemData(), NOW.add(1))
    assert row.when == NOW