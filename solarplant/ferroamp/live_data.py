"""Thread-safe live state of a Ferroamp system with derived figures."""

from __future__ import annotations

import threading

from solarplant.convert import mj_to_kwh, two_decimals
from solarplant.ferroamp.fa_data import FaData
from solarplant.ferroamp.messages import EhubMessage, EsmMessage, EsoMessage, SsoMessage


def _to_int16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


class FaInMemData:
    """Holds the latest messages; safe to update and read from several threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data = FaData()

    def current_state(self) -> FaData:
        """A copy of the current state."""
        with self._lock:
            return self._data.clone()

    def set_ehub(self, ehub: EhubMessage) -> None:
        with self._lock:
            self._data.ehub = ehub

    def set_sso(self, sso: SsoMessage) -> None:
        with self._lock:
            self._data.sso[sso.id] = sso

    def set_eso(self, eso: EsoMessage) -> None:
        with self._lock:
            self._data.eso[eso.id] = eso

    def set_esm(self, esm: EsmMessage) -> None:
        with self._lock:
            self._data.esm[esm.id] = esm

    def battery_level(self) -> float:
        """Mean state of charge over all batteries, in percent."""
        with self._lock:
            esms = list(self._data.esm.values())
        if not esms:
            return 0.0
        return two_decimals(sum(esm.soc for esm in esms) / len(esms))

    def battery_statuses(self) -> list[int]:
        """The status of each battery as a signed 16-bit value."""
        with self._lock:
            return [_to_int16(esm.status) for esm in self._data.esm.values()]

    def production_lifetime(self) -> float:
        """Total energy produced by all SSOs, in kWh."""
        with self._lock:
            ssos = list(self._data.sso.values())
        if not ssos:
            return 0.0
        return two_decimals(mj_to_kwh(float(sum(sso.wpv for sso in ssos))))

    def solar_power(self) -> float:
        """Current solar power, in kW."""
        with self._lock:
            ssos = list(self._data.sso.values())
        if not ssos:
            return 0.0
        return two_decimals(sum(sso.upv * sso.ipv for sso in ssos) / 1e3)

    def grid_power(self) -> float:
        """Current grid power, in kW."""
        with self._lock:
            pext = self._data.ehub.pext
        return two_decimals((pext.l1 + pext.l2 + pext.l3) / 1e3)

    def battery_power(self) -> float:
        """Battery power in kW: negative while charging, positive while discharging."""
        with self._lock:
            return two_decimals(self._data.ehub.pbat / 1e3)

    def produced_since(self, since: FaData) -> float:
        """Solar production since the given state, in kWh."""
        with self._lock:
            mj = self._data.ehub.wpv - since.ehub.wpv
        return two_decimals(mj_to_kwh(mj))

    def consumed_since(self, since: FaData) -> float:
        """Consumption since the given state, in kWh."""
        with self._lock:
            now = self._data.ehub.lifetime_consumed()
        return two_decimals(now - since.ehub.lifetime_consumed())

    def battery_net_load_since(self, since: FaData) -> float:
        """Battery discharge minus charge since the given state, in kWh."""
        with self._lock:
            ehub = self._data.ehub
            prod = ehub.wbat_prod - since.ehub.wbat_prod
            cons = ehub.wbat_cons - since.ehub.wbat_cons
        return two_decimals(mj_to_kwh(prod - cons))