from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Callable

from viewfeed.domain.exceptions import UnknownDriverError
from viewfeed.domain.models import ConnectionConfig

DriverOpener = Callable[[ConnectionConfig], Any]

SQLITE_MEMORY = ":memory:"


def open_sqlite(config: ConnectionConfig) -> sqlite3.Connection:
    """
    Открывает SQLite БД: dbname: путь к существующему файлу или ':memory:'.
    Файл открывается только на чтение и не создаётся: отсутствующий файл: ошибка connect.
    address/username/password/port для SQLite игнорируются.
    """
    if config.dbname == SQLITE_MEMORY:
        conn = sqlite3.connect(SQLITE_MEMORY, timeout=5.0)
    else:
        uri = f"{Path(config.dbname).resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, timeout=5.0, uri=True)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA busy_timeout = 5000")
    return conn


def open_postgresql(config: ConnectionConfig) -> Any:
    """
    Открывает соединение PostgreSQL через psycopg2 (extra 'postgres').
    """
    import psycopg2

    kwargs: dict[str, Any] = {
        "host": config.address,
        "dbname": config.dbname,
        "user": config.username or None,
        "password": config.password or None,
    }
    if config.port:
        kwargs["port"] = config.port
    return psycopg2.connect(**kwargs)


class DriverRegistry:
    """
    Назначение/ответственность:
        Реестр DB-API драйверов: имя драйвера -> функция открытия соединения.
    Инварианты/гарантии:
        - Имена драйверов регистронезависимы.
        - Неизвестный драйвер -> UnknownDriverError.
    """

    def __init__(self, openers: dict[str, DriverOpener] | None = None) -> None:
        self._openers: dict[str, DriverOpener] = {}
        for name, opener in (openers or {}).items():
            self.register(name, opener)

    @classmethod
    def default(cls) -> "DriverRegistry":
        return cls(
            {
                "sqlite": open_sqlite,
                "postgresql": open_postgresql,
            }
        )

    def register(self, name: str, opener: DriverOpener) -> None:
        key = (name or "").strip().lower()
        if not key:
            raise ValueError("Driver name must be a non-empty string")
        self._openers[key] = opener

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._openers))

    def open(self, config: ConnectionConfig) -> Any:
        opener = self._openers.get(config.driver.lower())
        if opener is None:
            raise UnknownDriverError(config.driver, self.names())
        return opener(config)


__all__ = ["DriverRegistry", "DriverOpener", "open_sqlite", "open_postgresql", "SQLITE_MEMORY"]
