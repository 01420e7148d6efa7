import pytest

from solarplant.convert import two_decimals
from solarplant.db.database import Database
from solarplant.db.energy_forecast import EnergyForecastRow, EnergyForecastTable
from solarplant.db.time_series import TimeSeriesRow, TimeSeriesTable
from solarplant.hours import DateHour, from_now

SCHEMA = """
CREATE TABLE time_series (
    date TEXT NOT NULL,
    hour INTEGER NOT NULL,
    cloud_cover INTEGER NOT NULL,
    temperature REAL NOT NULL,
    precipitation REAL NOT NULL,
    energy_price REAL NOT NULL,
    production REAL NOT NULL,
    production_lifetime REAL NOT NULL,
    consumption REAL NOT NULL,
    battery_level REAL NOT NULL,
    battery_net_load REAL NOT NULL
);
CREATE TABLE energy_forecast (
    date TEXT NOT NULL,
    hour INTEGER NOT NULL,
    production REAL NOT NULL,
    consumption REAL NOT NULL,
    PRIMARY KEY (date, hour)
);
"""


@pytest.fixture
def db(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_schema.sql").write_text(SCHEMA)
    database = Database(tmp_path / "solar.db", retention_days=1, migrations_dir=migrations)
    yield database
    database.close()


@pytest.fixture
def table(db):
    return TimeSeriesTable(db)


def _row(date, hour, **kwargs):
    return TimeSeriesRow(DateHour(date, hour), **kwargs)


def test_save_rounds_and_reads_back(table):
    row = _row(
        "2025-01-01",
        5,
        cloud_cover=3,
        temperature=3.14159,
        precipitation=0.2,
        energy_price=1.25,
        production=2.5,
        production_lifetime=1000.0,
        consumption=1.75,
        battery_level=55.5,
        battery_net_load=-0.5,
    )
    table.save(row)
    [got] = table.for_hour(DateHour("2025-01-01", 5))
    assert got.when == DateHour("2025-01-01", 5)
    assert got.cloud_cover == 3
    assert got.temperature == two_decimals(3.14159)
    assert got.production == 2.5
    assert got.battery_net_load == -0.5


def test_for_hour_returns_same_hour_on_later_days(table):
    for date, hour in [("2024-12-31", 5), ("2025-01-01", 5), ("2025-01-01", 6), ("2025-01-02", 5)]:
        table.save(_row(date, hour, production=1.0))
    got = table.for_hour(DateHour("2025-01-01", 5))
    assert [r.when for r in got] == [DateHour("2025-01-01", 5), DateHour("2025-01-02", 5)]


def test_since_hour_filters_on_date_and_hour_of_day(table):
    for date, hour in [("2025-01-01", 5), ("2025-01-01", 8), ("2025-01-02", 3), ("2025-01-02", 9)]:
        table.save(_row(date, hour))
    got = table.since_hour(DateHour("2025-01-01", 6))
    assert [r.when for r in got] == [DateHour("2025-01-01", 8), DateHour("2025-01-02", 9)]


def test_with_estimations_joins_forecast(db, table):
    table.save(_row("2025-01-01", 5, production=1.0, consumption=2.0))
    table.save(_row("2025-01-01", 6, production=3.0, consumption=4.0))
    table.save(_row("2024-12-31", 23, production=9.0))
    EnergyForecastTable(db).save(
        [EnergyForecastRow(DateHour("2025-01-01", 6), production=2.5, consumption=3.5)]
    )
    got = table.with_estimations_from(DateHour("2025-01-01", 5))
    assert [r.when for r in got] == [DateHour("2025-01-01", 5), DateHour("2025-01-01", 6)]
    assert got[0].estimated_production is None
    assert got[0].estimated_consumption is None
    assert got[1].estimated_production == 2.5
    assert got[1].estimated_consumption == 3.5
    assert got[1].production == 3.0
    assert got[1].consumption == 4.0


def test_purge_removes_rows_older_than_retention(table):
    now = from_now()
    table.save(_row("2000-01-01", 3))
    table.save(TimeSeriesRow(now))
    assert table.purge() == 1
    remaining = table.since_hour(DateHour("2000-01-01", 0))
    assert [r.when for r in remaining] == [now]