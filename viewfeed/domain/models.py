from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from viewfeed.common.sanitize import maskSecret
from viewfeed.domain.exceptions import InvalidConfig

MAX_PORT = 65535


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Назначение/ответственность:
        Неизменяемый набор параметров для открытия соединения с БД.
    Инварианты/гарантии:
        - driver, address, dbname: непустые строки.
        - username, password: строки (пустые допустимы для встраиваемых БД).
        - port: int в диапазоне 0..65535 (0 = порт драйвера по умолчанию).
        - Экземпляр либо создан целиком и валиден, либо выброшен InvalidConfig.
    """

    driver: str
    address: str
    username: str
    password: str = field(repr=False)
    dbname: str
    port: int

    def __post_init__(self) -> None:
        for name in ("driver", "address", "dbname"):
            value = getattr(self, name)
            if not isinstance(value, str) or value.strip() == "":
                raise InvalidConfig(f"Connection {name} must be a non-empty string", field=name)
        for name in ("username", "password"):
            if not isinstance(getattr(self, name), str):
                raise InvalidConfig(f"Connection {name} must be a string", field=name)
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InvalidConfig("Connection port must be an integer", field="port")
        if self.port < 0 or self.port > MAX_PORT:
            raise InvalidConfig(f"Connection port out of range: {self.port}", field="port")
        object.__setattr__(self, "driver", self.driver.strip().lower())

    @classmethod
    def from_settings(cls, settings: Any) -> "ConnectionConfig":
        """Собирает конфиг из итоговых Settings (после мерджа CLI/ENV/config)."""
        return cls(
            driver=settings.db_driver,
            address=settings.db_host,
            username=settings.db_username or "",
            password=settings.db_password or "",
            dbname=settings.db_name,
            port=settings.db_port,
        )

    def to_safe_dict(self) -> dict[str, Any]:
        return {
            "driver": self.driver,
            "address": self.address,
            "username": self.username,
            "password": maskSecret(self.password),
            "dbname": self.dbname,
            "port": self.port,
        }


class FetchState(str, Enum):
    """
    Назначение:
        Состояние одноразовой выборки источника.
    Инварианты/гарантии:
        - Переход только UNFETCHED -> FETCHED, обратного перехода нет.
    """

    UNFETCHED = "unfetched"
    FETCHED = "fetched"


@dataclass(frozen=True, init=False)
class DefaultDatum:
    """
    Назначение:
        Datum по умолчанию: значения строки в порядке колонок.
    """

    values: tuple

    def __init__(self, *values: Any):
        object.__setattr__(self, "values", tuple(values))

    def __getitem__(self, index: int) -> Any:
        return self.values[index]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)


__all__ = ["ConnectionConfig", "FetchState", "DefaultDatum", "MAX_PORT"]
