from solarplant.convert import two_decimals
from solarplant.ferroamp.fa_data import FaData
from solarplant.ferroamp.live_data import FaInMemData
from solarplant.ferroamp.messages import EhubMessage, EsmMessage, Phases, SsoMessage


def test_empty_state_gives_zeros():
    live = FaInMemData()
    assert live.battery_level() == 0.0
    assert live.battery_statuses() == []
    assert live.production_lifetime() == 0.0
    assert live.solar_power() == 0.0
    assert live.grid_power() == 0.0


def test_battery_level_is_mean_soc():
    live = FaInMemData()
    live.set_esm(EsmMessage(id="a", soc=50.0))
    live.set_esm(EsmMessage(id="b", soc=70.0))
    assert live.battery_level() == 60.0


def test_same_unit_is_replaced():
    live = FaInMemData()
    live.set_esm(EsmMessage(id="a", soc=20.0))
    live.set_esm(EsmMessage(id="a", soc=45.5))
    assert live.battery_level() == 45.5
    assert len(live.current_state().esm) == 1


def test_battery_statuses_are_signed_16_bit():
    live = FaInMemData()
    live.set_esm(EsmMessage(id="a", status=65535))
    assert live.battery_statuses() == [-1]


def test_small_status_unchanged():
    live = FaInMemData()
    live.set_esm(EsmMessage(id="a", status=7))
    assert live.battery_statuses() == [7]


def test_grid_power_in_kw():
    live = FaInMemData()
    live.set_ehub(EhubMessage(pext=Phases(1000.0, 2000.0, 500.0)))
    assert live.grid_power() == 3.5


def test_battery_power_uses_same_unit_as_grid_power():
    live = FaInMemData()
    live.set_ehub(EhubMessage(pext=Phases(1000.0, 2000.0, 500.0), pbat=3500.0))
    assert live.battery_power() == live.grid_power()


def test_solar_power_adds_up_over_units():
    live = FaInMemData()
    live.set_sso(SsoMessage(id="a", upv=500.0, ipv=2.5))
    single = live.solar_power()
    live.set_sso(SsoMessage(id="b", upv=500.0, ipv=2.5))
    assert single > 0
    assert live.solar_power() == single * 2


def test_production_lifetime_adds_up_over_units():
    live = FaInMemData()
    live.set_sso(SsoMessage(id="a", wpv=3_600_000_000))
    single = live.production_lifetime()
    live.set_sso(SsoMessage(id="b", wpv=3_600_000_000))
    assert single > 0
    assert live.production_lifetime() == single * 2


def test_current_state_is_a_copy():
    live = FaInMemData()
    live.set_sso(SsoMessage(id="a"))
    state = live.current_state()
    state.sso.clear()
    assert list(live.current_state().sso) == ["a"]


def test_produced_since_snapshot():
    live = FaInMemData()
    live.set_ehub(EhubMessage(wpv=1e9))
    snapshot = live.current_state()
    assert live.produced_since(snapshot) == 0.0
    live.set_ehub(EhubMessage(wpv=1e12))
    assert live.produced_since(snapshot) > 0


def test_consumed_since_empty_state_is_lifetime():
    live = FaInMemData()
    ehub = EhubMessage(wload_cons_q=Phases(1e12, 2e12, 3e12))
    live.set_ehub(ehub)
    assert live.consumed_since(FaData()) == two_decimals(ehub.lifetime_consumed())


def test_battery_net_load_negative_when_charging():
    live = FaInMemData()
    live.set_ehub(EhubMessage(wbat_prod=1e9, wbat_cons=1e9))
    snapshot = live.current_state()
    live.set_ehub(EhubMessage(wbat_prod=1e9, wbat_cons=5e12))
    assert live.battery_net_load_since(snapshot) < 0
    assert live.battery_net_load_since(live.current_state()) == 0.0