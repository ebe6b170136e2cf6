from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cansatlog.errors import ConfigError

CONFIG_ENV_VAR = "CANSATLOG_CONFIG"
DEFAULT_CONFIG_NAME = "cansatlog.toml"


@dataclass(frozen=True)
class SerialConfig:
    port: str | None = None
    baud: int = 115200


@dataclass(frozen=True)
class StoreConfig:
    capacity: int = 60


@dataclass(frozen=True)
class SimulatorConfig:
    interval_s: float = 1.0
    seed: int | None = None


@dataclass(frozen=True)
class AppConfig:
    serial: SerialConfig = field(default_factory=SerialConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    simulator: SimulatorConfig = field(default_factory=SimulatorConfig)


# ---------------------------------------- #


def default_config_path() -> Path:
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return Path.cwd() / DEFAULT_CONFIG_NAME


# ---------------------------------------- #


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def _get(table: dict[str, Any], section: str, key: str, kinds: tuple[type, ...], default: Any) -> Any:
    value = table.get(key, default)
    if value is None:
        return default
    # bool is an int subclass; never accept it for numbers
    if isinstance(value, bool) or not isinstance(value, kinds):
        names = " or ".join(k.__name__ for k in kinds)
        raise ConfigError(f"[{section}].{key} must be {names}")
    return value


# ---------------------------------------- #


def load_config(path: Path | None = None) -> AppConfig:
    """
    Read cansatlog.toml. A missing file yields the defaults.

    Raises ConfigError when a key has the wrong type or an unusable value.
    """
    if path is None:
        path = default_config_path()

    try:
        data: Any = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return AppConfig()
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e

    serial_t = _table(data, "serial")
    store_t = _table(data, "store")
    sim_t = _table(data, "simulator")

    serial_cfg = SerialConfig(
        port=_get(serial_t, "serial", "port", (str,), None),
        baud=_get(serial_t, "serial", "baud", (int,), SerialConfig.baud),
    )
    store_cfg = StoreConfig(
        capacity=_get(store_t, "store", "capacity", (int,), StoreConfig.capacity),
    )
    sim_cfg = SimulatorConfig(
        interval_s=float(_get(sim_t, "simulator", "interval_s", (int, float), SimulatorConfig.interval_s)),
        seed=_get(sim_t, "simulator", "seed", (int,), None),
    )

    if serial_cfg.baud <= 0:
        raise ConfigError("[serial].baud must be positive")
    if store_cfg.capacity < 1:
        raise ConfigError("[store].capacity must be at least 1")
    if sim_cfg.interval_s <= 0:
        raise ConfigError("[simulator].interval_s must be positive")

    return AppConfig(serial=serial_cfg, store=store_cfg, simulator=sim_cfg)
