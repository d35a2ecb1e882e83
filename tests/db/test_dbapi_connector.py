from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from viewfeed.domain.exceptions import FetchFailure, UnknownDriverError
from viewfeed.domain.models import ConnectionConfig
from viewfeed.infra.db.dbapi_connector import DbApiConnector
from viewfeed.infra.db.drivers import SQLITE_MEMORY, DriverRegistry
from viewfeed.infra.sources.sql_source import SqlDataSource
from viewfeed.infra.views import ListDataView


def _config(dbname: str, driver: str = "sqlite") -> ConnectionConfig:
    return ConnectionConfig(driver=driver, address="localhost", username="", password="", dbname=dbname, port=0)


class DummyCursor:
    def __init__(self, rows, execute_error: Exception | None = None):
        self.rows = list(rows)
        self.execute_error = execute_error
        self.description = (("id",),)
        self.closed = False
        self.executed: list = []

    def execute(self, query, params):
        self.executed.append((query, params))
        if self.execute_error is not None:
            raise self.execute_error

    def fetchmany(self, size):
        batch, self.rows = self.rows[:size], self.rows[size:]
        return batch

    def close(self):
        self.closed = True


class DummyRawConnection:
    def __init__(self, rows, execute_error: Exception | None = None, rollback_error: Exception | None = None):
        self.cursor_obj = DummyCursor(rows, execute_error)
        self.rollback_error = rollback_error
        self.rolled_back = False
        self.closed = False

    def cursor(self):
        return self.cursor_obj

    def rollback(self):
        self.rolled_back = True
        if self.rollback_error is not None:
            raise self.rollback_error

    def close(self):
        self.closed = True


def test_default_registry_names():
    assert DriverRegistry.default().names() == ("postgresql", "sqlite")


def test_registry_is_case_insensitive():
    raw = DummyRawConnection([])
    registry = DriverRegistry()
    registry.register("Dummy", lambda cfg: raw)

    assert registry.open(_config("x", driver="DUMMY")) is raw


def test_registry_rejects_empty_name():
    with pytest.raises(ValueError):
        DriverRegistry().register("  ", lambda cfg: None)


def test_unknown_driver():
    with pytest.raises(UnknownDriverError) as exc_info:
        DriverRegistry.default().open(_config("x", driver="oracle"))
    assert exc_info.value.code == "UNKNOWN_DRIVER"
    assert "postgresql, sqlite" in str(exc_info.value)


def test_connect_closes_and_rolls_back():
    raw = DummyRawConnection([(1,), (2,), (3,)])
    connector = DbApiConnector(DriverRegistry({"dummy": lambda cfg: raw}), batch_size=2)

    with connector.connect(_config("x", driver="dummy")) as conn:
        rows = list(conn.prepare("SELECT id FROM t WHERE a = ?").execute([7]))
        assert raw.closed is False

    assert rows == [(1,), (2,), (3,)]
    assert raw.cursor_obj.executed == [("SELECT id FROM t WHERE a = ?", (7,))]
    assert raw.cursor_obj.closed is True
    assert raw.rolled_back is True
    assert raw.closed is True


def test_connect_closes_on_error():
    raw = DummyRawConnection([])
    connector = DbApiConnector(DriverRegistry({"dummy": lambda cfg: raw}))

    with pytest.raises(RuntimeError):
        with connector.connect(_config("x", driver="dummy")):
            raise RuntimeError("boom")

    assert raw.closed is True


def test_prepare_rejects_empty_query():
    connector = DbApiConnector()
    with connector.connect(_config(SQLITE_MEMORY)) as conn:
        with pytest.raises(ValueError):
            conn.prepare("  ")


def test_statement_without_result_set_yields_nothing():
    connector = DbApiConnector()
    with connector.connect(_config(SQLITE_MEMORY)) as conn:
        rows = list(conn.prepare("CREATE TABLE t (id INTEGER)").execute(()))
    assert rows == []


def test_sqlite_rows_are_plain_tuples(tmp_path: Path):
    db_path = tmp_path / "db.sqlite3"
    sqlite3.connect(db_path).close()
    connector = DbApiConnector()
    with connector.connect(_config(str(db_path))) as conn:
        rows = list(conn.prepare("SELECT ?, ?").execute((1, "a")))
    assert rows == [(1, "a")]
    assert type(rows[0]) is tuple


def test_sqlite_missing_file_is_not_created(tmp_path: Path):
    db_path = tmp_path / "typo" / "nope.sqlite3"
    connector = DbApiConnector()

    with pytest.raises(sqlite3.OperationalError):
        with connector.connect(_config(str(db_path))):
            pass

    assert not db_path.exists()
    assert not db_path.parent.exists()


def test_sqlite_file_is_opened_read_only(tmp_path: Path):
    db_path = tmp_path / "db.sqlite3"
    sqlite3.connect(db_path).close()
    connector = DbApiConnector()

    with connector.connect(_config(str(db_path))) as conn:
        with pytest.raises(sqlite3.OperationalError):
            list(conn.prepare("CREATE TABLE t (id INTEGER)").execute(()))


def test_batch_size_must_be_positive():
    with pytest.raises(ValueError):
        DbApiConnector(batch_size=0)


def test_rollback_error_does_not_mask_original_error(caplog):
    raw = DummyRawConnection([], rollback_error=RuntimeError("connection already closed"))
    connector = DbApiConnector(DriverRegistry({"dummy": lambda cfg: raw}))

    with caplog.at_level("WARNING", logger="viewfeed.db"):
        with pytest.raises(ValueError, match="boom"):
            with connector.connect(_config("x", driver="dummy")):
                raise ValueError("boom")

    assert raw.closed is True
    assert "rollback failed before close: connection already closed" in caplog.text


def test_rollback_error_after_success_keeps_rows():
    raw = DummyRawConnection([(1,), (2,)], rollback_error=RuntimeError("connection already closed"))
    connector = DbApiConnector(DriverRegistry({"dummy": lambda cfg: raw}))

    with connector.connect(_config("x", driver="dummy")) as conn:
        rows = list(conn.prepare("SELECT id FROM t").execute(()))

    assert rows == [(1,), (2,)]
    assert raw.closed is True


def test_lost_connection_surfaces_as_fetch_failure():
    raw = DummyRawConnection(
        [],
        execute_error=ConnectionError("server closed the connection"),
        rollback_error=RuntimeError("connection already closed"),
    )
    connector = DbApiConnector(DriverRegistry({"dummy": lambda cfg: raw}))
    view = ListDataView()
    source = SqlDataSource(_config("x", driver="dummy"), "SELECT id FROM t", [view], connector=connector)

    with pytest.raises(FetchFailure) as exc_info:
        source.fetch()

    assert exc_info.value.stage == "execute"
    assert isinstance(exc_info.value.cause, ConnectionError)
    assert source.fetched is False
    assert len(view) == 0
    assert raw.closed is True
