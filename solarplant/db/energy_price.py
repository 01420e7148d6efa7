"""Stored hourly energy prices."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from solarplant.convert import round_float
from solarplant.db.database import Database, NotFoundError
from solarplant.hours import DateHour


@dataclass(frozen=True)
class EnergyPriceRow:
    when: DateHour
    price: float  # SEK/kWh


def _row(values) -> EnergyPriceRow:
    return EnergyPriceRow(DateHour(values[0], values[1]), values[2])


class EnergyPriceTable:
    """The energy_price table."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, rows: Iterable[EnergyPriceRow]) -> None:
        """Insert or replace prices, rounded to four decimals."""
        with self._db.writing() as conn:
            conn.executemany(
                """
                INSERT INTO energy_price (date, hour, price) VALUES (?, ?, ?)
                ON CONFLICT(date, hour) DO UPDATE SET price = excluded.price""",
                [(r.when.date, r.when.hour, round_float(r.price, 4)) for r in rows],
            )

    def get(self, dh: DateHour) -> EnergyPriceRow:
        """The price for one hour; NotFoundError when there is none."""
        with self._db.reading() as conn:
            values = conn.execute(
                "SELECT date, hour, price FROM energy_price WHERE date = ? AND hour = ?",
                (dh.date, dh.hour),
            ).fetchone()
        if values is None:
            raise NotFoundError(f"no energy price for {dh}")
        return _row(values)

    def get_from(self, dh: DateHour) -> list[EnergyPriceRow]:
        """Prices from the given hour onwards, in time order."""
        with self._db.reading() as conn:
            rows = conn.execute(
                """SELECT date, hour, price FROM energy_price
                WHERE (date = ? AND hour >= ?) OR date > ?
                ORDER BY date, hour""",
                (dh.date, dh.hour, dh.date),
            ).fetchall()
        return [_row(r) for r in rows]

    def purge(self) -> int:
        return self._db.purge("energy_price")