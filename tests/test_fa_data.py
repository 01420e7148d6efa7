import json

import pytest

from solarplant.ferroamp.fa_data import FaData
from solarplant.ferroamp.messages import EhubMessage, EsmMessage, EsoMessage, Phases, SsoMessage


@pytest.fixture
def data():
    return FaData(
        ehub=EhubMessage(pbat=-1200.0, pext=Phases(1.0, 2.0, 3.0)),
        sso={"sso-1": SsoMessage(id="sso-1", wpv=99)},
        eso={"eso-1": EsoMessage(id="eso-1", soc=50.0)},
        esm={"esm-1": EsmMessage(id="esm-1", soc=60.0, status=3)},
    )


def test_new_is_empty():
    fa = FaData()
    assert fa.sso == {} and fa.eso == {} and fa.esm == {}
    assert fa.ehub == EhubMessage()


def test_clone_is_equal(data):
    assert data.clone() == data


def test_clone_maps_are_independent(data):
    clone = data.clone()
    clone.sso["sso-2"] = SsoMessage(id="sso-2")
    clone.esm.clear()
    assert list(data.sso) == ["sso-1"]
    assert list(data.esm) == ["esm-1"]


def test_to_json_layout(data):
    out = data.to_json()
    assert set(out) == {"Ehub", "Sso", "Eso", "Esm"}
    assert list(out["Sso"]) == ["sso-1"]
    assert out["Esm"]["esm-1"]["status"] == {"val": "3"}


def test_round_trip_through_text(data):
    assert FaData.from_json(json.dumps(data.to_json())) == data


def test_null_maps_become_empty():
    fa = FaData.from_json({"Ehub": None, "Sso": None, "Eso": None, "Esm": None})
    assert fa == FaData()


def test_lowercase_keys_are_accepted(data):
    out = {k.lower(): v for k, v in data.to_json().items()}
    assert FaData.from_json(out) == data


def test_non_object_is_rejected():
    with pytest.raises(ValueError):
        FaData.from_json("42")


def test_unit_map_must_be_object():
    with pytest.raises(ValueError):
        FaData.from_json({"Sso": [1, 2]})