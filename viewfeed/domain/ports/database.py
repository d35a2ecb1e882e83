from __future__ import annotations

from typing import Any, ContextManager, Iterable, Protocol

from viewfeed.domain.models import ConnectionConfig

RawRow = tuple


class PreparedStatementProtocol(Protocol):
    """
    Назначение/ответственность:
        Подготовленный запрос, привязанный к открытому соединению.
    """

    def execute(self, params: tuple[Any, ...]) -> Iterable[RawRow]:
        """
        Контракт:
            Вход: кортеж связываемых параметров (может быть пустым).
            Выход: строки результата в порядке драйвера, каждая строка: tuple.
        """
        ...


class DatabaseConnectionProtocol(Protocol):
    def prepare(self, query: str) -> PreparedStatementProtocol: ...


class DatabaseConnectorProtocol(Protocol):
    """
    Назначение/ответственность:
        Порт подключения к реляционной БД.
    Ограничения:
        Соединение: ресурс с областью видимости: закрывается при выходе из with
        на любом пути (успех, ошибка, ранний выход).
    """

    def connect(self, config: ConnectionConfig) -> ContextManager[DatabaseConnectionProtocol]: ...


__all__ = [
    "RawRow",
    "PreparedStatementProtocol",
    "DatabaseConnectionProtocol",
    "DatabaseConnectorProtocol",
]
