"""Numeric helpers for rounding and unit conversion."""

from __future__ import annotations

import math

_MJ_TO_KWH = 0.0002777778


def _round_half_away(value: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    if math.isnan(value) or math.isinf(value):
        return value
    truncated = math.trunc(value)
    if abs(value - truncated) >= 0.5:
        truncated += math.copysign(1, value)
    return float(truncated)


def round_float(number: float, decimals: int) -> float:
    """Round ``number`` to ``decimals`` decimals, halves away from zero."""
    scale = 10.0**decimals
    return _round_half_away(number * scale) / scale


def two_decimals(number: float) -> float:
    """Round ``number`` to two decimals."""
    return round_float(number, 2)


def mj_to_kwh(mj: float) -> float:
    """Convert millijoules to kWh."""
    return mj * _MJ_TO_KWH / 1e6


def octas_to_percentage(octas: float) -> float:
    """Convert cloud cover in octas (0-8) to a whole percentage."""
    return _round_half_away(octas / 8 * 100)


def deg_to_rad(deg: float) -> float:
    """Convert degrees to radians."""
    return deg * math.pi / 180.0