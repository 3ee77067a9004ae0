from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import create_engine

from schemagate.adapters.sqlalchemy.mappings import department_table
from schemagate.app import ensure_database_schema
from schemagate.config import ConnectionConfig, Dialect
from schemagate.domain import (
    EXIT_ABORT,
    EXIT_PROCEED,
    Fatal,
    FailureKind,
    GateStage,
    Success,
    VerificationResult,
)

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

    from schemagate.adapters.sqlalchemy import SqlAlchemyConnectionProvider


def test_fresh_sqlite_database_passes(
    sqlite_config: ConnectionConfig, sqlite_provider: SqlAlchemyConnectionProvider
) -> None:
    outcome = ensure_database_schema(sqlite_config, connections=sqlite_provider)

    assert isinstance(outcome, Success)
    assert outcome.exit_status == EXIT_PROCEED
    assert outcome.results == (
        VerificationResult("User", 0),
        VerificationResult("Department", 0),
        VerificationResult("Course", 0),
        VerificationResult("Degree", 0),
        VerificationResult("Message", 0),
    )


def test_rerun_keeps_existing_rows(tmp_path: Path) -> None:
    config = ConnectionConfig(dialect=Dialect.SQLITE, database=str(tmp_path / "campus.db"))
    assert isinstance(ensure_database_schema(config), Success)

    engine = create_engine(config.url())
    with engine.begin() as connection:
        connection.execute(department_table.insert().values(name="Biology", code="BIO"))
    engine.dispose()

    outcome = ensure_database_schema(config)

    assert isinstance(outcome, Success)
    assert VerificationResult("Department", 1) in outcome.results


def test_missing_configuration_aborts(
    clean_db_env: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level("INFO")

    outcome = ensure_database_schema()

    assert isinstance(outcome, Fatal)
    assert outcome.exit_status == EXIT_ABORT
    assert outcome.stage is GateStage.START
    assert outcome.failure.kind is FailureKind.NOT_CONFIGURED
    assert "DB_HOST" in outcome.failure.message
    assert "DEPLOYMENT ABORTED" in caplog.text


def test_configuration_from_environment(
    clean_db_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    clean_db_env.setenv("DB_DIALECT", "sqlite")
    clean_db_env.setenv("DB_NAME", str(tmp_path / "env.db"))

    assert isinstance(ensure_database_schema(), Success)


def test_unknown_entity_is_a_programming_fault(
    sqlite_config: ConnectionConfig, sqlite_provider: SqlAlchemyConnectionProvider
) -> None:
    outcome = ensure_database_schema(
        sqlite_config, connections=sqlite_provider, entity_names=["User", "Enrollment"]
    )

    assert isinstance(outcome, Fatal)
    assert outcome.stage is GateStage.START
    assert outcome.failure.kind is FailureKind.PROGRAMMING


def test_refused_postgres_connection_aborts() -> None:
    config = ConnectionConfig(
        dialect=Dialect.POSTGRES,
        host="127.0.0.1",
        port=1,
        database="campus",
        user="deployer",
        password="s3cret",
    )

    outcome = ensure_database_schema(config)

    assert isinstance(outcome, Fatal)
    assert outcome.exit_status == EXIT_ABORT
    assert outcome.stage is GateStage.CONNECTING
    assert outcome.failure.kind is FailureKind.CONNECTION_REFUSED


def test_unrecognised_ssl_flag_aborts_before_connecting(
    clean_db_env: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    clean_db_env.setenv("DB_DIALECT", "sqlite")
    clean_db_env.setenv("DB_NAME", str(tmp_path / "env.db"))
    clean_db_env.setenv("DB_SSL", "require")

    outcome = ensure_database_schema()

    assert isinstance(outcome, Fatal)
    assert outcome.failure.kind is FailureKind.NOT_CONFIGURED
    assert not (tmp_path / "env.db").exists()
