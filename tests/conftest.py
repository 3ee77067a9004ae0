from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from schemagate.adapters.sqlalchemy import SqlAlchemyConnectionProvider, start_mappers
from schemagate.config import ConnectionConfig, Dialect

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Connection

DB_ENV_VARS = (
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASSWORD",
    "DB_DIALECT",
    "DB_SSL",
    "APP_ENV",
    "NODE_ENV",
)


@pytest.fixture
def clean_db_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    return ConnectionConfig(dialect=Dialect.SQLITE, database=":memory:")


@pytest.fixture
def sqlite_provider() -> Iterator[SqlAlchemyConnectionProvider]:
    provider = SqlAlchemyConnectionProvider()
    try:
        yield provider
    finally:
        provider.dispose()


@pytest.fixture
def sqlite_connection(
    sqlite_provider: SqlAlchemyConnectionProvider,
    sqlite_config: ConnectionConfig,
) -> Iterator[Connection]:
    start_mappers()
    connection = sqlite_provider.connect(sqlite_config)
    try:
        yield connection
    finally:
        sqlite_provider.release(connection)
