from __future__ import annotations

import logging
from contextlib import ExitStack
from typing import Any, Iterable, Sequence

from viewfeed.common.run_id import generate_run_id
from viewfeed.common.sanitize import truncateText
from viewfeed.common.time import getDurationMs, getMonotonic
from viewfeed.domain.exceptions import FetchFailure, InvalidConfig
from viewfeed.domain.models import ConnectionConfig, FetchState
from viewfeed.domain.ports.database import DatabaseConnectorProtocol
from viewfeed.domain.ports.sources import DataSource
from viewfeed.domain.ports.views import DestinationView
from viewfeed.domain.transform.row_converter import RowConverter, default_converter
from viewfeed.infra.db.dbapi_connector import DbApiConnector
from viewfeed.infra.logging.setup import logEvent

DEFAULT_LOGGER_NAME = "viewfeed.fetch"


class SqlDataSource(DataSource):
    """
    Назначение/ответственность:
        Источник данных поверх DB-API: выполняет запрос один раз и раскладывает
        каждую строку (после конвертера) во все представления.
    Взаимодействия:
        - DatabaseConnectorProtocol: открытие соединения, prepare, execute.
        - RowConverter: сырая строка -> datum.
        - DestinationView: insert(datum) для каждого представления по порядку.
    Инварианты/гарантии:
        - Набор представлений фиксирован при создании (tuple).
        - state переходит UNFETCHED -> FETCHED только после успешной выборки всех строк.
        - В состоянии FETCHED fetch() не обращается к БД и возвращает те же представления.
        - Сбой connect/prepare/execute/convert -> FetchFailure, состояние остаётся UNFETCHED.
        - Ошибки insert представлений пробрасываются как есть.
    Ограничения:
        Не потокобезопасен: параллельные fetch() на одном экземпляре не поддерживаются.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        query: str,
        views: Sequence[DestinationView],
        parameters: Iterable[Any] = (),
        converter: RowConverter | None = None,
        *,
        connector: DatabaseConnectorProtocol | None = None,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ):
        if not isinstance(config, ConnectionConfig):
            raise InvalidConfig("config must be a ConnectionConfig", field="config")
        if not isinstance(query, str) or query.strip() == "":
            raise InvalidConfig("Query text must be a non-empty string", field="query")
        views = tuple(views)
        if not views:
            raise InvalidConfig("At least one destination view is required", field="views")
        for idx, view in enumerate(views):
            if not callable(getattr(view, "insert", None)):
                raise InvalidConfig(f"View #{idx} has no insert() method: {view!r}", field="views")
        if isinstance(parameters, (str, bytes)):
            raise InvalidConfig("parameters must be a sequence of values, not a string", field="parameters")
        if converter is not None and not callable(converter):
            raise InvalidConfig("converter must be callable", field="converter")

        self.config = config
        self.query = query
        self._views = views
        self.params = tuple(parameters)
        self.converter: RowConverter = converter or default_converter
        self.connector: DatabaseConnectorProtocol = connector or DbApiConnector()
        self.logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.run_id = run_id or generate_run_id()

        self._state = FetchState.UNFETCHED
        self.row_count: int | None = None
        self.duration_ms: int | None = None

    @property
    def views(self) -> tuple[DestinationView, ...]:
        return self._views

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def fetched(self) -> bool:
        return self._state is FetchState.FETCHED

    def fetch(self) -> tuple[DestinationView, ...]:
        """
        Выбирает строки и вставляет их в представления; повторный вызов: no-op.
        """
        if self._state is FetchState.FETCHED:
            logEvent(self.logger, logging.DEBUG, self.run_id, "fetch", "fetch skipped: already fetched")
            return self._views

        logEvent(
            self.logger,
            logging.INFO,
            self.run_id,
            "fetch",
            f"fetch start driver={self.config.driver} dbname={self.config.dbname} "
            f"views={len(self._views)} params={len(self.params)} query={truncateText(self.query)}",
        )
        start = getMonotonic()
        row_count = self._run()

        self._state = FetchState.FETCHED
        self.row_count = row_count
        self.duration_ms = getDurationMs(start, getMonotonic())
        logEvent(
            self.logger,
            logging.INFO,
            self.run_id,
            "fetch",
            f"fetch done rows={row_count} inserts={row_count * len(self._views)} duration_ms={self.duration_ms}",
        )
        return self._views

    def _run(self) -> int:
        with ExitStack() as stack:
            try:
                conn = stack.enter_context(self.connector.connect(self.config))
            except Exception as exc:
                raise self._failure("connect", exc) from exc

            try:
                statement = conn.prepare(self.query)
            except Exception as exc:
                raise self._failure("prepare", exc) from exc

            try:
                rows = statement.execute(self.params)
                it = iter(rows)
            except Exception as exc:
                raise self._failure("execute", exc) from exc
            close_rows = getattr(it, "close", None)
            if callable(close_rows):
                stack.callback(close_rows)

            row_count = 0
            while True:
                try:
                    row = next(it)
                except StopIteration:
                    break
                except Exception as exc:
                    raise self._failure("execute", exc, row_index=row_count) from exc

                try:
                    datum = self.converter(row)
                except Exception as exc:
                    raise self._failure("convert", exc, row_index=row_count) from exc

                for view in self._views:
                    try:
                        view.insert(datum)
                    except Exception as exc:
                        logEvent(
                            self.logger,
                            logging.ERROR,
                            self.run_id,
                            "fetch",
                            f"insert failed row={row_count} view={type(view).__name__}: {exc}",
                        )
                        raise
                row_count += 1
            return row_count

    def _failure(self, stage: str, exc: Exception, row_index: int | None = None) -> FetchFailure:
        details: dict[str, Any] = {"error_type": type(exc).__name__}
        if row_index is not None:
            details["row_index"] = row_index
        message = f"Fetch failed at {stage}: {exc}"
        logEvent(self.logger, logging.ERROR, self.run_id, "fetch", message)
        return FetchFailure(stage, message, details)


__all__ = ["SqlDataSource"]
