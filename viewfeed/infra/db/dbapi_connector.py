from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from viewfeed.domain.models import ConnectionConfig
from viewfeed.domain.ports.database import DatabaseConnectorProtocol, RawRow
from viewfeed.infra.db.drivers import DriverRegistry

DEFAULT_BATCH_SIZE = 500
DEFAULT_LOGGER_NAME = "viewfeed.db"


class DbApiStatement:
    """
    Назначение/ответственность:
        Запрос, подготовленный на DB-API соединении.
        DB-API не даёт явного prepare, поэтому запрос компилируется драйвером при execute.
    """

    def __init__(self, conn: Any, query: str, batch_size: int = DEFAULT_BATCH_SIZE):
        self.conn = conn
        self.query = query
        self.batch_size = batch_size

    def execute(self, params: tuple[Any, ...]) -> Iterator[RawRow]:
        cur = self.conn.cursor()
        try:
            cur.execute(self.query, tuple(params))
        except Exception:
            cur.close()
            raise
        return self._iter_rows(cur)

    def _iter_rows(self, cur: Any) -> Iterator[RawRow]:
        try:
            if cur.description is None:
                return
            while True:
                batch = cur.fetchmany(self.batch_size)
                if not batch:
                    return
                for row in batch:
                    yield tuple(row)
        finally:
            cur.close()


class DbApiConnection:
    """
    Тонкая обёртка над DB-API соединением с единым prepare().
    """

    def __init__(self, conn: Any, batch_size: int = DEFAULT_BATCH_SIZE):
        self.conn = conn
        self.batch_size = batch_size

    def prepare(self, query: str) -> DbApiStatement:
        if not isinstance(query, str) or query.strip() == "":
            raise ValueError("Query text must be a non-empty string")
        return DbApiStatement(self.conn, query, self.batch_size)


class DbApiConnector(DatabaseConnectorProtocol):
    """
    Назначение/ответственность:
        Реализация порта подключения поверх PEP 249 драйверов из DriverRegistry.
    Инварианты/гарантии:
        - Соединение закрывается при выходе из connect() на любом пути.
        - Запросы только читают данные: транзакция откатывается перед закрытием.
        - Ошибка rollback() не подменяет исходную ошибку: она пишется в лог, close() выполняется всегда.
    """

    def __init__(
        self,
        registry: DriverRegistry | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        logger: logging.Logger | None = None,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive: {batch_size}")
        self.registry = registry or DriverRegistry.default()
        self.batch_size = batch_size
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)

    @contextmanager
    def connect(self, config: ConnectionConfig) -> Iterator[DbApiConnection]:
        raw = self.registry.open(config)
        try:
            yield DbApiConnection(raw, self.batch_size)
        finally:
            try:
                raw.rollback()
            except Exception as exc:
                self.logger.warning("rollback failed before close: %s", exc, extra={"component": "db"})
            finally:
                raw.close()


__all__ = ["DbApiConnector", "DbApiConnection", "DbApiStatement", "DEFAULT_BATCH_SIZE"]
