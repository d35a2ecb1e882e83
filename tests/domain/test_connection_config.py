from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from viewfeed.config.config import Settings
from viewfeed.domain.error_codes import ErrorCode
from viewfeed.domain.exceptions import InvalidConfig
from viewfeed.domain.models import ConnectionConfig


def _make(**overrides) -> ConnectionConfig:
    values = {
        "driver": "sqlite",
        "address": "localhost",
        "username": "reader",
        "password": "s3cret",
        "dbname": ":memory:",
        "port": 0,
    }
    values.update(overrides)
    return ConnectionConfig(**values)


def test_config_is_immutable():
    cfg = _make()
    with pytest.raises(FrozenInstanceError):
        cfg.port = 5432  # type: ignore[misc]


def test_driver_is_normalized():
    assert _make(driver="  SQLite ").driver == "sqlite"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"address": ""}, "address"),
        ({"address": "   "}, "address"),
        ({"dbname": ""}, "dbname"),
        ({"driver": ""}, "driver"),
        ({"port": -1}, "port"),
        ({"port": 70000}, "port"),
        ({"port": "5432"}, "port"),
        ({"port": True}, "port"),
        ({"username": None}, "username"),
        ({"password": 123}, "password"),
    ],
)
def test_invalid_config_rejected(overrides, field):
    with pytest.raises(InvalidConfig) as exc_info:
        _make(**overrides)
    assert exc_info.value.field == field
    assert exc_info.value.code == ErrorCode.INVALID_CONFIG.value
    assert exc_info.value.details == {"field": field}


def test_empty_credentials_allowed():
    cfg = _make(username="", password="")
    assert cfg.username == ""
    assert cfg.password == ""


def test_password_hidden_in_repr_and_safe_dict():
    cfg = _make()
    assert "s3cret" not in repr(cfg)
    safe = cfg.to_safe_dict()
    assert safe["password"] == "***"
    assert safe["username"] == "reader"
    assert safe["port"] == 0


def test_from_settings():
    settings = Settings(
        db_driver="postgresql",
        db_host="db.local",
        db_port=5432,
        db_username="app",
        db_password=None,
        db_name="warehouse",
    )
    cfg = ConnectionConfig.from_settings(settings)
    assert cfg.driver == "postgresql"
    assert cfg.address == "db.local"
    assert cfg.port == 5432
    assert cfg.username == "app"
    assert cfg.password == ""
    assert cfg.dbname == "warehouse"


def test_from_settings_without_dbname_fails():
    with pytest.raises(InvalidConfig):
        ConnectionConfig.from_settings(Settings())
