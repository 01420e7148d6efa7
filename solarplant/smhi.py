"""Point weather forecasts from the SMHI open data service."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from solarplant.hours import from_iso

log = logging.getLogger(__name__)

BASE_URL = "https://opendata-download-metfcst.smhi.se"

_TIMEOUT = 10.0  # seconds


@dataclass(frozen=True)
class WeatherForecast:
    """Forecast for one point in time."""

    hour: datetime
    cloud_cover: int  # total cloud cover in octas, 0 (clear) to 8 (overcast)
    temperature: float  # air temperature in °C
    precipitation: float  # mean precipitation intensity in mm/h


def forecast_url(lon: float, lat: float) -> str:
    """URL of the forecast for a WGS84 position."""
    return (
        f"{BASE_URL}/api/category/pmp3g/version/2/geotype/point"
        f"/lon/{lon:0.4f}/lat/{lat:0.4f}/data.json"
    )


def _parameter(params: Sequence[Mapping], name: str) -> float:
    for param in params:
        if param.get("name") == name:
            values = param.get("values") or []
            if not values:
                raise ValueError(f"parameter {name} has no values")
            return float(values[0])
    return 0.0


def parse_forecast(data: Mapping | str | bytes) -> list[WeatherForecast]:
    """Turn the service's JSON document into forecasts."""
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError("expected a JSON object")
    result = []
    for entry in data.get("timeSeries") or []:
        valid_time = from_iso(str(entry.get("validTime", "")))
        if valid_time is None:
            raise ValueError(f"invalid validTime: {entry.get('validTime')!r}")
        params = entry.get("parameters") or []
        result.append(
            WeatherForecast(
                hour=valid_time,
                cloud_cover=int(_parameter(params, "tcc_mean")) & 0xFF,
                temperature=_parameter(params, "t"),
                precipitation=_parameter(params, "pmean"),
            )
        )
    return result


def get_forecast(lon: float, lat: float) -> list[WeatherForecast]:
    """Fetch and parse the forecast for a position."""
    url = forecast_url(lon, lat)
    log.info("Fetching forecast from SMHI... (url=%s)", url)
    try:
        with urllib.request.urlopen(url, timeout=_TIMEOUT) as resp:
            body: Any = resp.read()
    except urllib.error.HTTPError as err:
        err.close()
        raise ConnectionError(f"error getting SMHI forecast: status {err.code}") from err
    except (urllib.error.URLError, OSError) as err:
        raise ConnectionError(f"error getting SMHI forecast: {err}") from err
    try:
        return parse_forecast(body)
    except ValueError as err:
        raise ValueError(f"error unmarshaling SMHI json: {err}") from err