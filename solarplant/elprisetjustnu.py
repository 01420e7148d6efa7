"""Energy prices from the elprisetjustnu.se price service."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta

from solarplant.energy_price import EnergyPrice
from solarplant.hours import from_iso, from_time

_BASE_URL = "https://www.elprisetjustnu.se/api/v1/prices"


def parse_prices(data: Iterable[Mapping]) -> list[EnergyPrice]:
    """Turn the service's decoded JSON list into hourly prices."""
    prices = []
    for raw in data:
        start = from_iso(str(raw["time_start"]))
        if start is None:
            raise ValueError(f"invalid time_start: {raw['time_start']!r}")
        prices.append(EnergyPrice(hour=from_time(start), price=float(raw["SEK_per_kWh"])))
    return prices


@dataclass(frozen=True)
class ElPrisetJustNu:
    """Price source for one Swedish price area (SE1-SE4)."""

    area: str
    timeout: float = 30.0

    def url_for_day(self, day: date) -> str:
        return f"{_BASE_URL}/{day.year}/{day.month:02d}-{day.day:02d}_{self.area}.json"

    def prices_for_day(self, day: date) -> list[EnergyPrice]:
        """Prices for one day; empty when the day is not published yet."""
        url = self.url_for_day(day)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise ConnectionError(f"unexpected status code: {resp.status}")
                data = json.load(resp)
        except urllib.error.HTTPError as err:
            err.close()
            if err.code == 404:
                return []
            raise ConnectionError(f"unexpected status code: {err.code}") from err
        if not isinstance(data, list):
            raise ValueError("failed to decode response: expected a list")
        return parse_prices(data)

    def get_energy_prices(self) -> list[EnergyPrice]:
        """Prices for today followed by tomorrow."""
        today = date.today()
        return self.prices_for_day(today) + self.prices_for_day(today + timedelta(days=1))