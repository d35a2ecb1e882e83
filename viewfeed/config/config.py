from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import os
from typing import Any, Callable

import yaml

ENV_PREFIX = "VIEWFEED_"


@dataclass(frozen=True)
class Settings:
    # Database
    db_driver: str = "sqlite"
    db_host: str = "localhost"
    db_port: int = 0
    db_username: str | None = None
    db_password: str | None = None
    db_name: str | None = None

    # Logging
    log_dir: str = "./logs"
    log_level: str = "INFO"

    # Fetch
    fetch_batch_size: int = 500


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


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


def _parse_int(name: str) -> Callable[[str], int]:
    def parse(v: str) -> int:
        try:
            return int(v)
        except ValueError:
            raise ValueError(f"Invalid integer value for {name}: {v}") from None

    return parse


_INT_FIELDS = ("db_port", "fetch_batch_size")


def _parser_for(name: str) -> Callable[[str], Any]:
    if name in _INT_FIELDS:
        return _parse_int(name)
    return str


def load_settings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults

    Ключи YAML совпадают с полями Settings; переменные окружения:
    VIEWFEED_<ПОЛЕ В ВЕРХНЕМ РЕГИСТРЕ> (например, VIEWFEED_DB_HOST).
    """
    sources: list[str] = []
    names = [f.name for f in fields(Settings)]
    merged: dict[str, Any] = {name: getattr(Settings(), name) for name in names}

    # 1) config file
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")
            for name in names:
                if name in cfg:
                    merged[name] = cfg[name]

    # 2) env
    env = {name: _env_get(ENV_PREFIX + name.upper()) for name in names}
    if any(v is not None for v in env.values()):
        sources.append("env")
    for name, raw in env.items():
        if raw is not None:
            merged[name] = _parser_for(name)(raw)

    # 3) CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")
    for k, v in cli_overrides.items():
        if v is None:
            continue
        if k not in merged:
            raise ValueError(f"Unknown setting: {k}")
        merged[k] = v

    for name in _INT_FIELDS:
        if isinstance(merged[name], str):
            merged[name] = _parse_int(name)(merged[name])

    return LoadedSettings(settings=Settings(**merged), sources_used=sources)
