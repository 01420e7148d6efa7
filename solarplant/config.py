"""Application configuration loaded from YAML with environment overrides."""

import dataclasses
import os
import typing
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from solarplant.log_levels import AttrFormat, level_from_string

_DEFAULT_PATH = Path("config") / "config.yaml"


def _key(name: str) -> dict:
    return {"key": name}


@dataclass
class ApiConfig:
    address: str = ""
    port: int = 0
    # When set, static files and templates are served from this directory.
    www_dir: str | None = None
    session_key: str = ""
    admin_user: str = ""
    admin_password: str = ""


@dataclass
class DatabaseConfig:
    path: str = ""
    retention_days: int = 90


@dataclass
class FerroampConfig:
    host: str = ""
    port: int = 0
    username: str = ""
    password: str = ""


@dataclass
class WeatherForecastConfig:
    latitude: float = 0.0
    longitude: float = 0.0
    run_at: str = ""


@dataclass
class EnergyPriceConfig:
    tax: float = field(default=0.0, metadata=_key("tax_including_vat"))
    tax_reduction: float = 0.0
    grid_benefit: float = 0.0
    area: str = ""
    currency: str = ""
    run_at: str = ""


@dataclass
class EnergyForecastConfig:
    historical_days: int = 0
    hours_ahead: int = 0
    cloud_cover_impact: float = 0.0
    run_at: str = ""


@dataclass
class BatterySpec:
    capacity: float = 0.0  # kWh
    min_level: float = 0.0  # percent
    max_level: float = 0.0  # percent
    max_charge_rate: float = 0.0  # kW
    max_discharge_rate: float = 0.0  # kW
    degradation_cost: float = 0.0  # SEK/kWh

    def max_kwh(self) -> float:
        return self.capacity * self.max_level / 100.0

    def min_kwh(self) -> float:
        return self.capacity * self.min_level / 100.0


@dataclass
class PlannerConfig:
    grid_max_power: float = 0.0  # kW
    hours_ahead: int = 0
    run_at: str = ""


@dataclass
class BatteryRegulatorConfig:
    interval: int = 0
    update_threshold: float = 0.0


@dataclass
class LoggingConfig:
    db_level: str | None = None
    db_attrs_format: str | None = None
    db_max_entries: int = 10000
    console_level: str | None = None

    def db_log_level(self) -> int:
        return level_from_string(self.db_level)

    def console_log_level(self) -> int:
        return level_from_string(self.console_level)

    def attrs_format(self) -> AttrFormat:
        if self.db_attrs_format is not None and self.db_attrs_format.casefold() == "text":
            return AttrFormat.TEXT
        return AttrFormat.JSON


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ferroamp: FerroampConfig = field(default_factory=FerroampConfig)
    weather_forecast: WeatherForecastConfig = field(default_factory=WeatherForecastConfig)
    energy_forecast: EnergyForecastConfig = field(default_factory=EnergyForecastConfig)
    energy_price: EnergyPriceConfig = field(default_factory=EnergyPriceConfig)
    battery_spec: BatterySpec = field(default_factory=BatterySpec)
    planner: PlannerConfig = field(default_factory=PlannerConfig)
    battery_regulator_strategy: BatteryRegulatorConfig = field(
        default_factory=BatteryRegulatorConfig
    )
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "AppConfig":
        """Build a configuration from a nested mapping, converting values loosely."""
        return _build(cls, data, "")


def _unwrap_optional(hint) -> tuple[object, bool]:
    args = typing.get_args(hint)
    if type(None) in args:
        rest = [a for a in args if a is not type(None)]
        return rest[0], True
    return hint, False


def _coerce(value, hint, key: str):
    if dataclasses.is_dataclass(hint):
        return _build(hint, value, key)
    try:
        if hint is int:
            return int(value.strip()) if isinstance(value, str) else int(value)
        if hint is float:
            return float(value)
        if hint is str:
            if isinstance(value, (Mapping, list)):
                raise TypeError(type(value).__name__)
            return str(value)
    except (TypeError, ValueError) as err:
        raise ValueError(f"invalid value for {key}: {value!r}") from err
    return value


def _build(cls, data, prefix: str):
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a mapping for {prefix or 'configuration'}")
    lowered = {str(k).lower(): v for k, v in data.items()}
    kwargs = {}
    for f in dataclasses.fields(cls):
        key = f.metadata.get("key", f.name)
        if key not in lowered:
            continue
        hint, optional = _unwrap_optional(f.type)
        value = lowered[key]
        full_key = f"{prefix}.{key}" if prefix else key
        if value is None:
            if optional:
                kwargs[f.name] = None
            continue
        kwargs[f.name] = _coerce(value, hint, full_key)
    return cls(**kwargs)


def _apply_env(data: Mapping, environ: Mapping[str, str], prefix: tuple[str, ...] = ()) -> dict:
    result = {}
    for key, value in data.items():
        path = (*prefix, str(key).lower())
        if isinstance(value, Mapping):
            result[key] = _apply_env(value, environ, path)
        else:
            override = environ.get("_".join(path).upper())
            result[key] = override if override else value
    return result


def load(path: str | os.PathLike | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Read the YAML configuration; environment variables override keys in the file."""
    config_path = Path(path) if path is not None else _DEFAULT_PATH
    env = os.environ if environ is None else environ
    text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise ValueError(f"unable to read config file: {err}") from err
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError("unable to read config file: top level is not a mapping")
    return AppConfig.from_dict(_apply_env(data, env))