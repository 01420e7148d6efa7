"""Fetch energy prices and store them."""

from __future__ import annotations

import functools
import logging
import sqlite3
from collections.abc import Callable

from solarplant.db.database import Database, NotFoundError
from solarplant.db.energy_price import EnergyPriceRow, EnergyPriceTable
from solarplant.hours import from_now

log = logging.getLogger(__name__)


def needs_immediate_update(db: Database) -> bool:
    """True when no price is stored for the next hour."""
    try:
        EnergyPriceTable(db).get(from_now().add(1))
    except (NotFoundError, sqlite3.Error):
        return True
    return False


def run_energy_price_task(db: Database, fetcher) -> list[EnergyPriceRow]:
    """Fetch prices and store them; return the rows saved, none when fetching failed."""
    log.debug("running energy price task...")
    try:
        prices = fetcher.get_energy_prices()
    except (OSError, ValueError) as err:
        log.error("error fetching energy prices: %s", err)
        return []

    rows = []
    for price in prices:
        log.debug("energy price for %s: %s", price.hour, price.price)
        rows.append(EnergyPriceRow(when=price.hour, price=price.price))
    EnergyPriceTable(db).save(rows)
    log.info("energy price task done, %d hours updated", len(rows))
    return rows


def make_energy_price_task(db: Database, fetcher) -> Callable[[], list[EnergyPriceRow]]:
    """The task to schedule; it runs once right away if the next hour has no price."""
    if needs_immediate_update(db):
        log.info("need an immediate update of energy prices")
        run_energy_price_task(db, fetcher)
    else:
        log.debug("no need for immediate update of energy prices")
    return functools.partial(run_energy_price_task, db, fetcher)