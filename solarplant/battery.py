"""Battery state used while planning."""

from __future__ import annotations

from dataclasses import dataclass

from solarplant.config import BatterySpec


@dataclass
class Battery:
    """A battery with a specification and a current level in percent."""

    spec: BatterySpec
    current_level: float = 0.0

    def to_kwh(self, percentage: float) -> float:
        """Energy in kWh for a level in percent."""
        return percentage / 100.0 * self.spec.capacity

    def to_percentage(self, kwh: float) -> float:
        """Level in percent for an amount of energy in kWh."""
        return kwh / self.spec.capacity * 100.0

    def available_capacity(self) -> float:
        """Room left for charging, in kWh."""
        return self.to_kwh(self.spec.max_level) - self.to_kwh(self.current_level)

    def remaining_capacity(self) -> float:
        """Energy left for discharging, in kWh."""
        return self.to_kwh(self.current_level) - self.to_kwh(self.spec.min_level)

    def update_level(self, load: float) -> float:
        """Apply a charge (positive) or discharge (negative) load; return the change in kWh."""
        old = self.to_kwh(self.current_level)
        if load > 0:
            new = min(self.to_kwh(self.spec.max_level), old + load)
        else:
            new = max(self.to_kwh(self.spec.min_level), old + load)
        self.current_level = self.to_percentage(new)
        return new - old