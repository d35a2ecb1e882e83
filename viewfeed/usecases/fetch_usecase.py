from __future__ import annotations

import logging
from typing import Any, Sequence

from viewfeed.domain.models import ConnectionConfig
from viewfeed.domain.ports.database import DatabaseConnectorProtocol
from viewfeed.domain.ports.views import DestinationView
from viewfeed.domain.transform.row_converter import RowConverter
from viewfeed.infra.logging.setup import logEvent
from viewfeed.infra.sources.sql_source import SqlDataSource

PING_QUERY = "SELECT 1"


class FetchUseCase:
    """
    Назначение/ответственность:
        Сценарий CLI: собрать SqlDataSource, выполнить выборку, вернуть сводку.
    Взаимодействия:
        - DatabaseConnectorProtocol передаётся в источник как есть.
        - Ошибки (InvalidConfig/FetchFailure/ошибки insert) пробрасываются вызывающему.
    """

    def __init__(self, connector: DatabaseConnectorProtocol):
        self.connector = connector

    def run(
        self,
        config: ConnectionConfig,
        query: str,
        views: Sequence[DestinationView],
        logger: logging.Logger,
        run_id: str,
        parameters: Sequence[Any] = (),
        converter: RowConverter | None = None,
    ) -> dict[str, Any]:
        source = SqlDataSource(
            config,
            query,
            views,
            parameters=parameters,
            converter=converter,
            connector=self.connector,
            logger=logger,
            run_id=run_id,
        )
        source.fetch()
        return {
            "rows": source.row_count,
            "views": len(source.views),
            "duration_ms": source.duration_ms,
        }

    def check_connection(self, config: ConnectionConfig, logger: logging.Logger, run_id: str) -> None:
        """Открывает соединение и выполняет PING_QUERY; ошибки пробрасываются."""
        logEvent(logger, logging.INFO, run_id, "db", f"check-db driver={config.driver} dbname={config.dbname}")
        with self.connector.connect(config) as conn:
            rows = list(conn.prepare(PING_QUERY).execute(()))
        logEvent(logger, logging.INFO, run_id, "db", f"check-db ok rows={len(rows)}")
