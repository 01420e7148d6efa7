"""Messages published by a Ferroamp energy hub on its external API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any

from solarplant.convert import mj_to_kwh

# Wire kinds of a field.
_NUM = "num"  # a number written as a JSON string: "1.5"
_FLT = "flt"  # {"val": "1.5"}
_INT = "int"  # {"val": "15"}
_STR = "str"  # {"val": "text"}
_PHASES = "phases"  # {"l1": "..", "l2": "..", "l3": ".."}
_UDC = "udc"  # {"neg": "..", "pos": ".."}
_PLAIN = "plain"  # a plain JSON string

ESO_FAULT_CODES: dict[int, str] = {
    0x0001: "The pre-charge from battery to ESO is not reaching the voltage goal prohibiting the closing of the relays",
    0x0002: "CAN communication issues between ESO and battery",
    0x0004: "This indicates that the SoC limits for the batteries are not configured correctly, please contact Ferroamp Support for help",
    0x0008: "This indicates that the power limits for the batteries are incorrect or non-optimal. When controlling batteries via extapi and the system is set in either peak-shaving or self-consumption modes this flag may be set but it will not affect control. When not controlling batteries via extapi this indicates that the settings made in EMS Configuration is invalid",
    0x0010: "On-site emergency stop has been triggered",
    0x0020: "The DC-link voltage in ESO is so high that it prevents operation",
    0x0040: "Indicates that the battery has an alarm or an error flag raised. Please check Battery manufacturer's manual for trouble shooting the battery, or call Ferroamp Support",
    0x0080: "Not a fault, just an indication that Battery Manufacturer is not Ferroamp",
    0x0100: "Not used",
    0x0200: "Not used",
    0x0400: "Not used",
    0x0800: "Not used",
    0x1000: "Not used",
    0x2000: "Not used",
    0x4000: "Not used",
}


def _num(key: str):
    return field(default=0.0, metadata={"json": key, "kind": _NUM})


def _flt(key: str):
    return field(default=0.0, metadata={"json": key, "kind": _FLT})


def _int(key: str):
    return field(default=0, metadata={"json": key, "kind": _INT})


def _str(key: str):
    return field(default="", metadata={"json": key, "kind": _STR})


def _plain(key: str):
    return field(default="", metadata={"json": key, "kind": _PLAIN})


def _phases(key: str):
    return field(default_factory=lambda: Phases(), metadata={"json": key, "kind": _PHASES})


def _optional_phases(key: str):
    return field(default=None, metadata={"json": key, "kind": _PHASES, "optional": True})


def _as_mapping(data: Any, what: str) -> Mapping:
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object for {what}")
    return data


def _lookup(obj: Mapping, key: str, lowered: Mapping) -> Any:
    if key in obj:
        return obj[key]
    return lowered.get(key.lower())


def _parse_float(value: Any, key: str) -> float:
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a number in a string, got {value!r}")
    try:
        return float(value)
    except ValueError as err:
        raise ValueError(f"{key}: invalid number {value!r}") from err


def _parse_int(value: Any, key: str) -> int:
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected an integer in a string, got {value!r}")
    try:
        return int(value)
    except ValueError as err:
        raise ValueError(f"{key}: invalid integer {value!r}") from err


def _fmt_float(value: float) -> str:
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"unsupported value: {value!r}")
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return format(Decimal(repr(float(value))), "f")


def _val(value: Any, key: str) -> Any:
    obj = _as_mapping(value, key)
    return _lookup(obj, "val", {str(k).lower(): v for k, v in obj.items()})


def _decode(kind: str, value: Any, key: str) -> Any:
    if kind == _NUM:
        return _parse_float(value, key)
    if kind == _PLAIN:
        if not isinstance(value, str):
            raise ValueError(f"{key}: expected a string, got {value!r}")
        return value
    if kind == _PHASES:
        return Phases.from_json(value)
    if kind == _UDC:
        return Udc.from_json(value)
    inner = _val(value, key)
    if inner is None:
        return None
    if kind == _FLT:
        return _parse_float(inner, key)
    if kind == _INT:
        return _parse_int(inner, key)
    if not isinstance(inner, str):
        raise ValueError(f"{key}: expected a string, got {inner!r}")
    return inner


def _encode(kind: str, value: Any) -> Any:
    if kind == _NUM:
        return _fmt_float(value)
    if kind == _FLT:
        return {"val": _fmt_float(value)}
    if kind == _INT:
        return {"val": str(int(value))}
    if kind == _STR:
        return {"val": value}
    if kind in (_PHASES, _UDC):
        return value.to_json()
    return value


def _from_json(cls, data):
    obj = _as_mapping(data, cls.__name__)
    lowered = {str(k).lower(): v for k, v in obj.items()}
    kwargs = {}
    for f in fields(cls):
        key = f.metadata["json"]
        raw = _lookup(obj, key, lowered)
        if raw is None:
            continue
        decoded = _decode(f.metadata["kind"], raw, key)
        if decoded is not None:
            kwargs[f.name] = decoded
    return cls(**kwargs)


def _to_json(message) -> dict:
    out = {}
    for f in fields(message):
        value = getattr(message, f.name)
        if value is None and f.metadata.get("optional"):
            continue
        out[f.metadata["json"]] = _encode(f.metadata["kind"], value)
    return out


@dataclass(frozen=True)
class Phases:
    l1: float = _num("l1")
    l2: float = _num("l2")
    l3: float = _num("l3")

    @classmethod
    def from_json(cls, data) -> Phases:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class Udc:
    neg: float = _num("neg")
    pos: float = _num("pos")

    @classmethod
    def from_json(cls, data) -> Udc:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class EhubMessage:
    grid_freq: float = _flt("gridfreq")  # Hz
    ul: Phases = _phases("ul")  # V
    iace: Phases = _phases("iace")  # A
    il: Phases = _phases("il")  # A
    ild: Phases = _phases("ild")  # A
    ilq: Phases = _phases("ilq")  # A
    iext: Phases = _phases("iext")  # A
    iextd: Phases = _phases("iextd")  # A
    iextq: Phases = _phases("iextq")  # A
    iload_d: Phases | None = _optional_phases("iLoadd")  # A
    iload_q: Phases | None = _optional_phases("iLoadq")  # A
    soc: float = _flt("soc")  # %
    soh: float = _flt("soh")  # %
    sext: float = _flt("sext")  # VA
    pext: Phases = _phases("pext")  # W
    pext_reactive: Phases = _phases("pextreactive")  # W
    pinv: Phases = _phases("pinv")  # W
    pinv_reactive: Phases = _phases("pinvreactive")  # W
    pload: Phases = _phases("pload")  # W
    pload_reactive: Phases = _phases("ploadreactive")  # W
    ppv: float = _flt("ppv")  # W
    pbat: float = _flt("pbat")  # W
    rated_cap: float = _flt("ratedcap")  # Wh
    wext_prod_q: Phases = _phases("wextprodq")  # mJ
    wext_cons_q: Phases = _phases("wextconsq")  # mJ
    winv_prod_q: Phases = _phases("winvprodq")  # mJ
    winv_cons_q: Phases = _phases("winvconsq")  # mJ
    wload_prod_q: Phases = _phases("wloadprodq")  # mJ
    wload_cons_q: Phases = _phases("wloadconsq")  # mJ
    wpv: float = _flt("wpv")  # mJ
    wbat_prod: float = _flt("wbatprod")  # mJ
    wbat_cons: float = _flt("wbatcons")  # mJ
    state: float = _flt("state")
    udc: Udc = field(default_factory=Udc, metadata={"json": "udc", "kind": _UDC})
    ts: str = _str("ts")

    @classmethod
    def from_json(cls, data) -> EhubMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)

    def lifetime_produced(self) -> float:
        """Lifetime load production in kWh; the hub does not update it reliably."""
        p = self.wload_prod_q
        return mj_to_kwh(p.l1 + p.l2 + p.l3)

    def lifetime_consumed(self) -> float:
        """Lifetime load consumption in kWh."""
        p = self.wload_cons_q
        return mj_to_kwh(p.l1 + p.l2 + p.l3)


@dataclass(frozen=True)
class SsoMessage:
    id: str = _str("id")
    upv: float = _flt("upv")  # V
    ipv: float = _flt("ipv")  # A
    wpv: int = _int("wpv")  # mJ
    fault_code: int = _int("faultcode")
    relay_status: int = _int("relaystatus")
    temp: float = _flt("temp")  # °C
    udc: float = _flt("udc")  # V
    ts: str = _str("ts")

    @classmethod
    def from_json(cls, data) -> SsoMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class EsoMessage:
    id: str = _str("id")
    ubat: float = _flt("ubat")  # V
    ibat: float = _flt("ibat")  # A
    wbat_prod: int = _int("wbatprod")  # mJ
    wbat_cons: int = _int("wbatcons")  # mJ
    soc: float = _flt("soc")  # %
    relay_status: int = _int("relaystatus")
    temp: float = _flt("temp")  # °C
    fault_code: int = _int("faultcode")
    udc: float = _flt("udc")  # V
    ts: str = _str("ts")

    @classmethod
    def from_json(cls, data) -> EsoMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class EsmMessage:
    id: str = _str("id")
    soh: float = _flt("soh")  # %
    soc: float = _flt("soc")  # %
    rated_capacity: float = _flt("ratedCapacity")  # Wh
    rated_power: float = _flt("ratedPower")  # W
    status: int = _int("status")
    ts: str = _str("ts")

    @classmethod
    def from_json(cls, data) -> EsmMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class ControlResponseMessage:
    trans_id: str = _plain("transId")
    status: str = _plain("status")  # "ack" or "nak"
    message: str = _plain("msg")

    @classmethod
    def from_json(cls, data) -> ControlResponseMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)


@dataclass(frozen=True)
class ControlEventMessage:
    timestamp: str = _plain("timestamp")
    event: str = _plain("event")

    @classmethod
    def from_json(cls, data) -> ControlEventMessage:
        """Decode from a JSON object, given as a mapping, text or bytes."""
        return _from_json(cls, data)

    def to_json(self) -> dict:
        """Encode to a JSON-ready dict in the wire format."""
        return _to_json(self)