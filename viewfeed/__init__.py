"""viewfeed: one-shot fetch of SQL rows fanned out into destination views."""

from viewfeed.domain.exceptions import (
    ContractViolation,
    FetchFailure,
    InvalidConfig,
    RowConversionError,
    UnknownDriverError,
)
from viewfeed.domain.models import ConnectionConfig, DefaultDatum, FetchState
from viewfeed.domain.ports.sources import DataSource
from viewfeed.domain.ports.views import DestinationView, UpsertResult
from viewfeed.domain.transform.row_converter import datum_converter, default_converter, named_converter
from viewfeed.errors import AppError
from viewfeed.infra.db.dbapi_connector import DbApiConnector
from viewfeed.infra.db.drivers import DriverRegistry
from viewfeed.infra.sources.sql_source import SqlDataSource
from viewfeed.infra.views import JsonLinesFileView, KeyedDataView, ListDataView

__all__ = [
    "AppError",
    "ContractViolation",
    "FetchFailure",
    "InvalidConfig",
    "RowConversionError",
    "UnknownDriverError",
    "ConnectionConfig",
    "DefaultDatum",
    "FetchState",
    "DataSource",
    "DestinationView",
    "UpsertResult",
    "datum_converter",
    "default_converter",
    "named_converter",
    "DbApiConnector",
    "DriverRegistry",
    "SqlDataSource",
    "JsonLinesFileView",
    "KeyedDataView",
    "ListDataView",
]
