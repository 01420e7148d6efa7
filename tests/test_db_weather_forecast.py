import pytest

from solarplant.convert import two_decimals
from solarplant.db.database import Database, NotFoundError
from solarplant.db.weather_forecast import WeatherForecastRow, WeatherForecastTable
from solarplant.hours import DateHour, from_now

SCHEMA = """
CREATE TABLE weather_forecast (
    date TEXT NOT NULL,
    hour INTEGER NOT NULL,
    cloud_cover INTEGER NOT NULL,
    temperature REAL NOT NULL,
    precipitation REAL NOT NULL,
    PRIMARY KEY (date, hour)
);
"""


@pytest.fixture
def table(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_init.sql").write_text(SCHEMA)
    with Database(tmp_path / "test.db", migrations_dir=migrations) as db:
        yield WeatherForecastTable(db)


def test_save_and_get_round_trip(table):
    dh = DateHour("2025-06-01", 12)
    row = WeatherForecastRow(dh, 4, 18.5, 0.25)
    table.save([row])
    assert table.get(dh) == row


def test_save_rounds_measurements(table):
    dh = DateHour("2025-06-01", 12)
    table.save([WeatherForecastRow(dh, 8, -3.14159, 1.23456)])
    row = table.get(dh)
    assert row.cloud_cover == 8
    assert row.temperature == two_decimals(-3.14159)
    assert row.precipitation == two_decimals(1.23456)


def test_save_replaces_existing_hour(table):
    dh = DateHour("2025-06-01", 12)
    table.save([WeatherForecastRow(dh, 1, 10.0, 0.0)])
    table.save([WeatherForecastRow(dh, 7, 12.0, 2.0)])
    assert table.get_from(dh) == [WeatherForecastRow(dh, 7, 12.0, 2.0)]


def test_get_missing_raises(table):
    with pytest.raises(NotFoundError):
        table.get(DateHour("2025-06-01", 12))


def test_get_from_returns_later_hours_in_order(table):
    start = DateHour("2025-06-01", 20)
    table.save([WeatherForecastRow(dh) for dh in (start.add(5), start.sub(1), start)])
    assert [r.when for r in table.get_from(start)] == [start, start.add(5)]


def test_purge_removes_old_rows(table):
    now = from_now()
    old = now.sub(24 * 100)
    table.save([WeatherForecastRow(now, 2), WeatherForecastRow(old, 3)])
    assert table.purge() == 1
    assert table.get_from(old) == [WeatherForecastRow(now, 2)]