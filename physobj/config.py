from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from physobj.domain.transform.multi_value import validate_delimiter


@dataclass(frozen=True)
class Settings:
    # Import
    default_culture: str | None = None
    site_default_culture: str | None = "en"
    multi_value_delimiter: str = "|"
    csv_delimiter: str = ","
    index_on_load: bool = False
    terms_file: str | None = None

    # Storage
    db_path: str = "./data/physobj.sqlite3"

    # Paths / logging
    log_dir: str = "./logs"
    report_dir: str = "./reports"
    log_level: str = "INFO"
    report_items_limit: int = 1000
    report_include_ok_items: bool = False

    # REST API (description lookups)
    api_base_url: str | None = None
    api_key: str | None = None
    timeout_seconds: float = 20.0
    retries: int = 3
    retry_backoff_seconds: float = 0.5


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_PREFIX = "PHYSOBJ_"

_BOOL_FIELDS = {"index_on_load", "report_include_ok_items"}
_INT_FIELDS = {"report_items_limit", "retries"}
_FLOAT_FIELDS = {"timeout_seconds", "retry_backoff_seconds"}


def _read_yaml_config(path: Path) -> dict:
    if not path.exists() or not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def parse_bool(v: str | bool | None) -> bool | None:
    if v is None or isinstance(v, bool):
        return v
    vv = str(v).strip().lower()
    if vv in ("1", "true", "yes", "y", "on"):
        return True
    if vv in ("0", "false", "no", "n", "off"):
        return False
    raise ValueError(f"Invalid boolean value: {v}")


def _coerce(name: str, value):
    if value is None:
        return None
    if name in _BOOL_FIELDS:
        return parse_bool(value)
    if name in _INT_FIELDS:
        return int(value)
    if name in _FLOAT_FIELDS:
        return float(value)
    return value


def load_settings(config_path: str | None, cli_overrides: dict) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    names = [f.name for f in fields(Settings)]
    merged = {name: getattr(Settings(), name) for name in names}

    # 1) config file
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")
        for name in names:
            if name in cfg:
                merged[name] = _coerce(name, cfg[name])

    # 2) env
    env = {name: _env_get(ENV_PREFIX + name.upper()) for name in names}
    if any(v is not None for v in env.values()):
        sources.append("env")
    for name, value in env.items():
        if value is not None:
            merged[name] = _coerce(name, value)

    # 3) CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")
    for name, value in cli_overrides.items():
        if value is None:
            continue
        if name not in merged:
            raise ValueError(f"Unknown setting: {name}")
        merged[name] = _coerce(name, value)

    validate_delimiter(merged["multi_value_delimiter"])
    if not isinstance(merged["csv_delimiter"], str) or len(merged["csv_delimiter"]) != 1:
        raise ValueError(f"CSV delimiter must be a single character, got {merged['csv_delimiter']!r}")

    return LoadedSettings(settings=Settings(**merged), sources_used=sources)
