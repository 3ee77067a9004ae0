from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import Column, Index, Integer, MetaData, Table, event, func, inspect, select

from schemagate.adapters.sqlalchemy import SqlAlchemySchemaSynchronizer, mapper_registry
from schemagate.adapters.sqlalchemy.mappings import department_table
from schemagate.domain import FailureKind, SchemaSyncError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Connection

DDL_PREFIXES = ("CREATE", "ALTER", "DROP")


@pytest.fixture
def executed_ddl(sqlite_connection: Connection) -> Iterator[list[str]]:
    statements: list[str] = []

    def collect(*args: object) -> None:
        statement = str(args[2])
        if statement.lstrip().upper().startswith(DDL_PREFIXES):
            statements.append(statement)

    event.listen(sqlite_connection, "before_cursor_execute", collect)
    try:
        yield statements
    finally:
        event.remove(sqlite_connection, "before_cursor_execute", collect)


def test_synchronize_creates_every_table(sqlite_connection: Connection) -> None:
    SqlAlchemySchemaSynchronizer().synchronize(
        sqlite_connection, allow_alter=False, allow_drop=False
    )

    tables = set(inspect(sqlite_connection).get_table_names())
    assert set(mapper_registry.metadata.tables) <= tables


def test_second_synchronize_issues_no_ddl(
    sqlite_connection: Connection, executed_ddl: list[str]
) -> None:
    synchronizer = SqlAlchemySchemaSynchronizer()
    synchronizer.synchronize(sqlite_connection, allow_alter=False, allow_drop=False)
    assert executed_ddl

    executed_ddl.clear()
    synchronizer.synchronize(sqlite_connection, allow_alter=False, allow_drop=False)

    assert executed_ddl == []


def test_synchronize_keeps_existing_rows(sqlite_connection: Connection) -> None:
    synchronizer = SqlAlchemySchemaSynchronizer()
    synchronizer.synchronize(sqlite_connection, allow_alter=False, allow_drop=False)
    sqlite_connection.execute(department_table.insert().values(name="Physics", code="PHY"))
    sqlite_connection.commit()

    synchronizer.synchronize(sqlite_connection, allow_alter=False, allow_drop=False)

    count = sqlite_connection.scalar(select(func.count()).select_from(department_table))
    assert count == 1


@pytest.mark.parametrize(("allow_alter", "allow_drop"), [(True, False), (False, True)])
def test_destructive_flags_are_rejected(
    sqlite_connection: Connection, *, allow_alter: bool, allow_drop: bool
) -> None:
    with pytest.raises(ValueError, match="only creates missing objects"):
        SqlAlchemySchemaSynchronizer().synchronize(
            sqlite_connection, allow_alter=allow_alter, allow_drop=allow_drop
        )


def test_failed_creation_is_reported_as_sync_error(sqlite_connection: Connection) -> None:
    sqlite_connection.exec_driver_sql("CREATE TABLE ix_clash (id INTEGER)")
    sqlite_connection.commit()
    metadata = MetaData()
    Table("clashing", metadata, Column("id", Integer, primary_key=True), Index("ix_clash", "id"))

    with pytest.raises(SchemaSyncError) as excinfo:
        SqlAlchemySchemaSynchronizer(metadata).synchronize(
            sqlite_connection, allow_alter=False, allow_drop=False
        )

    assert excinfo.value.failure.kind is FailureKind.DATABASE
    assert "ix_clash" in excinfo.value.failure.message
