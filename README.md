# solarplant

`solarplant` is a library for the data side of a home solar plant with a
battery. It receives live data from a Ferroamp energy system over MQTT,
fetches hourly spot prices and point weather forecasts, estimates the
production and consumption of the coming hours from recorded history, and
keeps everything in a local SQLite database keyed by UTC date and hour. It
can also send battery charge, discharge and auto requests to the system, and
build Chart.js chart definitions for today's figures.

## Modules

| Module | Purpose |
| --- | --- |
| `solarplant.config` | `load` reads the YAML configuration into `AppConfig` (`BatterySpec`, `LoggingConfig`, ...) |
| `solarplant.hours` | `DateHour`, a UTC date plus hour, and `from_time`, `from_now`, `from_midnight`, `from_iso`, `location_stockholm` |
| `solarplant.convert` | `two_decimals`, `round_float` (halves away from zero), `mj_to_kwh`, `octas_to_percentage`, `deg_to_rad` |
| `solarplant.log_levels` | `level_from_string` and `AttrFormat` |
| `solarplant.battery` | `Battery`: a level in percent within a `BatterySpec`, with `update_level` |
| `solarplant.energy_price` | `EnergyPrice` and the `EnergyPriceFetcher` protocol |
| `solarplant.elprisetjustnu` | `ElPrisetJustNu`: spot prices for a Swedish price area (SE1-SE4) |
| `solarplant.smhi` | `get_forecast` / `parse_forecast`: point weather forecasts |
| `solarplant.ferroamp.client` | `Ferroamp`: MQTT client for the hub's external API |
| `solarplant.ferroamp.messages` | EHUB, SSO, ESO, ESM and control messages, decoded from and encoded to the wire format |
| `solarplant.ferroamp.fa_data` | `FaData`: the latest message of every unit |
| `solarplant.ferroamp.live_data` | `FaInMemData`: thread-safe live state with derived power and energy figures |
| `solarplant.ferroamp.moving_average` | `MovingAverage` over a fixed window |
| `solarplant.db` | `Database`, `migrate`, and one table class per kind of row |
| `solarplant.tasks` | Jobs for energy prices, energy forecasts and hourly measurements |
| `solarplant.chartjs` / `solarplant.charts` | Chart.js definitions; `charts_for_today` |
| `solarplant.log_handler` | `SQLiteHandler`, a `logging` handler that writes to the database |

## Configuration

The configuration is a YAML document:

```yaml
api:
  address: 0.0.0.0
  port: 8080
  session_key: secret
  admin_user: admin
  admin_password: password

database:
  path: solarplant.db
  retention_days: 90          # default 90

ferroamp:
  host: localhost
  port: 1883
  username: extapi
  password: password

weather_forecast:
  latitude: 59.33
  longitude: 18.07
  run_at: "15 * * * *"

energy_price:
  area: SE3
  currency: SEK
  tax_including_vat: 0.54     # SEK/kWh
  tax_reduction: 0.60         # SEK/kWh when selling
  grid_benefit: 0.05          # SEK/kWh
  run_at: "0 14 * * *"

energy_forecast:
  historical_days: 7
  hours_ahead: 24
  cloud_cover_impact: 0.5
  run_at: "20 * * * *"

battery_spec:
  capacity: 15.0              # kWh
  min_level: 10               # percent
  max_level: 100              # percent
  max_charge_rate: 3.0        # kW
  max_discharge_rate: 3.0     # kW
  degradation_cost: 0.1       # SEK/kWh

planner:
  grid_max_power: 11.0        # kW
  hours_ahead: 6
  run_at: "50 * * * *"

logging:
  db_level: INFO              # DEBUG, INFO, WARN, ERROR
  db_attrs_format: JSON       # JSON or TEXT
  db_max_entries: 10000
  console_level: INFO
```

`load(path=None, environ=None)` reads `config/config.yaml` by default. A key
that appears in the file can be overridden from the environment: the value of
`battery_spec.capacity` is taken from `BATTERY_SPEC_CAPACITY` when that
variable is set and not empty.

```python
import os
from solarplant.config import load

config = load("config/config.yaml", os.environ)
print(config.battery_spec.max_kwh(), config.battery_spec.min_kwh())
print(config.logging.db_log_level(), config.logging.attrs_format())
```

## Hours

All stored data is keyed by a `DateHour` in UTC:

```python
from solarplant.hours import from_iso, from_time

dh = from_time(from_iso("2025-01-01T23:00:00Z"))
print(str(dh))                 # 2025-01-01 23
print(dh.add(2).iso_string())  # 2025-01-02T01:00:00Z
print(str(dh.sub(24)))         # 2024-12-31 23
```

## Storage

`Database(path, retention_days=90, migrations_dir=None)` opens SQLite in WAL
mode, with one writer connection and one reader connection. No schema ships
with the package: pass `migrations_dir`, a directory of files named like
`001_init.sql`, and those newer than the database's `user_version` are
applied in name order, each in its own transaction. The table classes expect
tables such as these:

```sql
CREATE TABLE energy_price (date TEXT NOT NULL, hour INTEGER NOT NULL, price REAL NOT NULL,
    PRIMARY KEY (date, hour));
CREATE TABLE energy_forecast (date TEXT NOT NULL, hour INTEGER NOT NULL,
    production REAL NOT NULL, consumption REAL NOT NULL, PRIMARY KEY (date, hour));
CREATE TABLE weather_forecast (date TEXT NOT NULL, hour INTEGER NOT NULL,
    cloud_cover INTEGER NOT NULL, temperature REAL NOT NULL, precipitation REAL NOT NULL,
    PRIMARY KEY (date, hour));
CREATE TABLE time_series (date TEXT NOT NULL, hour INTEGER NOT NULL,
    cloud_cover INTEGER, temperature REAL, precipitation REAL, energy_price REAL,
    production REAL, production_lifetime REAL, consumption REAL,
    battery_level REAL, battery_net_load REAL);
CREATE TABLE fa_snapshot (date TEXT NOT NULL, hour INTEGER NOT NULL, data TEXT NOT NULL);
CREATE TABLE log (id INTEGER PRIMARY KEY AUTOINCREMENT, timestamp TEXT NOT NULL,
    level INTEGER NOT NULL, message TEXT NOT NULL, attrs TEXT NOT NULL);
```

Each table class (`EnergyPriceTable`, `EnergyForecastTable`,
`WeatherForecastTable`, `TimeSeriesTable`, `FaSnapshotTable`, `LogTable`)
wraps a `Database`. Lookups of a single hour raise `NotFoundError`, except
`FaSnapshotTable.get`, which returns `None`. `purge()` deletes rows older
than the retention period; `LogTable.purge(max_entries)` keeps only the
newest entries.

```python
import logging
from solarplant.db.database import Database
from solarplant.log_handler import SQLiteHandler

with Database("solarplant.db", migrations_dir="migrations") as db:
    logger = logging.getLogger("solarplant")
    logger.addHandler(SQLiteHandler(db, logging.INFO, "JSON"))
    logger.warning("battery low", extra={"level": "9.5"})
```

## Live data and battery control

```python
from solarplant.ferroamp.client import Ferroamp
from solarplant.ferroamp.live_data import FaInMemData

live = FaInMemData()
fa = Ferroamp(config.ferroamp.host, config.ferroamp.port,
              config.ferroamp.username, config.ferroamp.password)
fa.on_ehub_message = live.set_ehub
fa.on_sso_message = live.set_sso
fa.on_eso_message = live.set_eso
fa.on_esm_message = live.set_esm
fa.connect()

print(live.grid_power(), live.solar_power(), live.battery_power(), live.battery_level())

fa.set_battery_load(-2.0)   # charge at 2 kW; positive values discharge
fa.set_battery_auto()
fa.disconnect()
```

`set_battery_load` and `set_battery_auto` wait for the hub's ack or nak and
return `True` when a response arrived. New ESO fault bits and SSO fault codes
are logged as warnings.

## Tasks

```python
from solarplant.elprisetjustnu import ElPrisetJustNu
from solarplant.tasks.energy_price import run_energy_price_task
from solarplant.tasks.energy_forecast import run_energy_forecast
from solarplant.tasks.time_series import run_time_series_task
from solarplant.charts import charts_for_today

run_energy_price_task(db, ElPrisetJustNu(config.energy_price.area))
run_energy_forecast(db, config.energy_forecast)
run_time_series_task(db, live)      # meant to run at the start of every hour
charts = [chart.to_dict() for chart in charts_for_today(db)]
```

`make_energy_price_task(db, fetcher)` returns the price job and runs it once
right away when the next hour has no price. `run_energy_forecast` estimates
each coming hour from the same hour of day `historical_days` back, adjusted
for the forecast cloud cover.

## What the package does not do

- It does not decide what the battery should do. `Battery` models levels and
  limits, but nothing chooses between charging, discharging or leaving the
  battery alone, and no per-hour plan is stored or turned into requests to
  the hub.
- It does not store weather forecasts on its own: `smhi.get_forecast` fetches
  them, and `WeatherForecastTable.save` stores rows you build from them.
- It has no scheduler and no routine purging job; run the tasks and the
  tables' `purge` methods yourself.
- It has no web server, login or pages, and no command to start; it is a
  library.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.