"""Average over a sliding window of the most recent values."""

from __future__ import annotations

import math
from collections import deque


class MovingAverage:
    """Mean of the last ``size`` values added."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("window size must be at least 1")
        self._window: deque[float] = deque(maxlen=size)
        self._sum = 0.0

    def add(self, value: float) -> None:
        if len(self._window) == self._window.maxlen:
            self._sum -= self._window[0]
        self._window.append(value)
        self._sum += value

    def avg(self) -> float:
        """The mean of the values in the window; NaN when it is empty."""
        if not self._window:
            return math.nan
        return self._sum / len(self._window)

    def reset(self) -> None:
        self._window.clear()
        self._sum = 0.0