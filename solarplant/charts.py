"""The dashboard charts for today's battery, price, production and consumption."""

from __future__ import annotations

import math
from collections.abc import Iterable

from solarplant.chartjs import NO_OF_HOURS, Chart, fixed_float, new_chart
from solarplant.db.database import Database
from solarplant.db.energy_price import EnergyPriceRow, EnergyPriceTable
from solarplant.db.time_series import TimeSeriesRow, TimeSeriesTable
from solarplant.hours import DateHour, from_midnight


def _by_hour(rows: Iterable) -> dict:
    # The first row for an hour wins.
    return {str(r.when): r for r in reversed(list(rows))}


def build_charts(
    time_series: Iterable[TimeSeriesRow],
    energy_prices: Iterable[EnergyPriceRow],
    midnight: DateHour,
) -> list[Chart]:
    """Two charts over the 24 hours from ``midnight``: level and price, production and consumption."""
    series = _by_hour(time_series)
    prices = _by_hour(energy_prices)
    hours = [str(midnight.add(i)) for i in range(NO_OF_HOURS)]

    level_chart = new_chart("")
    for i, key in enumerate(hours):
        ts = series.get(key)
        price = prices.get(key)
        level_chart.datasets[0].data[i] = None if ts is None else fixed_float(ts.battery_level, 2)
        level_chart.datasets[1].data[i] = None if price is None else fixed_float(price.price, 2)
    level_chart.scales["YAxis1"] = (
        level_chart.scales["YAxis1"].with_title("Battery Level (%)").with_min_and_max(0, 100)
    )
    level_chart.scales["YAxis2"] = level_chart.scales["YAxis2"].with_title(
        "Energy Price (SEK/kWh)"
    )

    energy_chart = new_chart("")
    max_value = 0.0
    for i, key in enumerate(hours):
        ts = series.get(key)
        if ts is None:
            continue
        max_value = max(max_value, ts.production, ts.consumption)
        energy_chart.datasets[0].data[i] = fixed_float(ts.production, 2)
        energy_chart.datasets[1].data[i] = fixed_float(ts.consumption, 2)
    max_value = math.ceil(max_value / 2) * 2.0  # round up to an even number
    energy_chart.scales["YAxis1"] = (
        energy_chart.scales["YAxis1"]
        .with_title("Energy Produced (kWh)")
        .with_min_and_max(0, max_value)
    )
    energy_chart.scales["YAxis2"] = (
        level_chart.scales["YAxis2"]
        .with_title("Energy Consumed (kWh)")
        .with_min_and_max(0, max_value)
    )

    return [level_chart, energy_chart]


def charts_for_today(db: Database) -> list[Chart]:
    """The dashboard charts from the stored data since midnight (UTC)."""
    midnight = from_midnight()
    return build_charts(
        TimeSeriesTable(db).since_hour(midnight),
        EnergyPriceTable(db).get_from(midnight),
        midnight,
    )