import sqlite3

import pytest

from solarplant.db.database import Database
from solarplant.hours import from_now

SCHEMA = """
CREATE TABLE energy_price (
    date TEXT NOT NULL,
    hour INTEGER NOT NULL,
    price REAL NOT NULL,
    PRIMARY KEY (date, hour)
);
"""


@pytest.fixture
def migrations(tmp_path):
    directory = tmp_path / "migrations"
    directory.mkdir()
    (directory / "001_init.sql").write_text(SCHEMA)
    return directory


@pytest.fixture
def db(tmp_path, migrations):
    with Database(tmp_path / "test.db", migrations_dir=migrations) as database:
        yield database


def _insert(db, dh, price):
    with db.writing() as conn:
        conn.execute(
            "INSERT INTO energy_price (date, hour, price) VALUES (?, ?, ?)",
            (dh.date, dh.hour, price),
        )


def _stored(db):
    with db.reading() as conn:
        return {(r[0], r[1]) for r in conn.execute("SELECT date, hour FROM energy_price")}


def test_migrations_applied_on_open(db):
    with db.reading() as conn:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert version == 1
    assert "energy_price" in tables


def test_write_is_visible_to_reader(db):
    now = from_now()
    _insert(db, now, 1.5)
    assert _stored(db) == {(now.date, now.hour)}


def test_writing_rolls_back_on_error(db):
    now = from_now()
    with pytest.raises(RuntimeError):
        with db.writing() as conn:
            conn.execute(
                "INSERT INTO energy_price (date, hour, price) VALUES (?, ?, ?)",
                (now.date, now.hour, 1.0),
            )
            raise RuntimeError("boom")
    assert _stored(db) == set()


def test_purge_removes_rows_older_than_retention(db):
    now = from_now()
    old = now.sub(24 * 91)
    recent = now.sub(24 * 89)
    for dh in (now, old, recent):
        _insert(db, dh, 1.0)
    assert db.purge("energy_price") == 1
    assert _stored(db) == {(now.date, now.hour), (recent.date, recent.hour)}


def test_purge_honours_retention_days(tmp_path, migrations):
    with Database(tmp_path / "r.db", retention_days=1, migrations_dir=migrations) as database:
        now = from_now()
        _insert(database, now, 1.0)
        _insert(database, now.sub(48), 1.0)
        assert database.purge("energy_price") == 1
        assert _stored(database) == {(now.date, now.hour)}


def test_purge_rejects_bad_table_name(db):
    with pytest.raises(ValueError):
        db.purge("energy_price; DROP TABLE energy_price")


def test_in_memory_database_shares_connection(migrations):
    with Database(":memory:", migrations_dir=migrations) as database:
        now = from_now()
        _insert(database, now, 2.0)
        assert _stored(database) == {(now.date, now.hour)}


def test_closed_database_cannot_be_used(tmp_path, migrations):
    database = Database(tmp_path / "c.db", migrations_dir=migrations)
    database.close()
    database.close()
    with pytest.raises(sqlite3.ProgrammingError):
        with database.reading() as conn:
            conn.execute("SELECT 1")