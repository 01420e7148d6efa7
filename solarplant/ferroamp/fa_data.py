"""A snapshot of everything last heard from a Ferroamp system."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from solarplant.ferroamp.messages import EhubMessage, EsmMessage, EsoMessage, SsoMessage


def _mapping(data: Any, what: str) -> Mapping:
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object for {what}")
    return data


@dataclass
class FaData:
    """The latest EHUB message and the latest message of each SSO, ESO and ESM unit."""

    ehub: EhubMessage = field(default_factory=EhubMessage)
    sso: dict[str, SsoMessage] = field(default_factory=dict)
    eso: dict[str, EsoMessage] = field(default_factory=dict)
    esm: dict[str, EsmMessage] = field(default_factory=dict)

    def clone(self) -> FaData:
        """A copy whose unit maps can be changed independently."""
        return FaData(ehub=self.ehub, sso=dict(self.sso), eso=dict(self.eso), esm=dict(self.esm))

    def to_json(self) -> dict:
        """Encode as a JSON-ready dict."""
        return {
            "Ehub": self.ehub.to_json(),
            "Sso": {k: v.to_json() for k, v in sorted(self.sso.items())},
            "Eso": {k: v.to_json() for k, v in sorted(self.eso.items())},
            "Esm": {k: v.to_json() for k, v in sorted(self.esm.items())},
        }

    @classmethod
    def from_json(cls, data) -> FaData:
        """Decode from a mapping, JSON text or bytes as produced by ``to_json``."""
        obj = _mapping(data, "FaData")
        lowered = {str(k).lower(): v for k, v in obj.items()}

        def units(key: str, message_cls):
            raw = obj.get(key, lowered.get(key.lower()))
            if raw is None:
                return {}
            return {str(k): message_cls.from_json(v) for k, v in _mapping(raw, key).items()}

        ehub_raw = obj.get("Ehub", lowered.get("ehub"))
        return cls(
            ehub=EhubMessage() if ehub_raw is None else EhubMessage.from_json(ehub_raw),
            sso=units("Sso", SsoMessage),
            eso=units("Eso", EsoMessage),
            esm=units("Esm", EsmMessage),
        )