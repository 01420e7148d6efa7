"""Hourly energy prices and the interface of their sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from solarplant.hours import DateHour


@dataclass(frozen=True)
class EnergyPrice:
    hour: DateHour
    price: float  # SEK per kWh excluding VAT


@runtime_checkable
class EnergyPriceFetcher(Protocol):
    """A source of upcoming hourly energy prices."""

    def get_energy_prices(self) -> list[EnergyPrice]:
        """Fetch the known prices."""
        ...