"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from schemagate.adapters.sqlalchemy import (
    DEFAULT_ENTITY_NAMES,
    SqlAlchemyConnectionProvider,
    SqlAlchemySchemaSynchronizer,
    build_entity_registry,
    initialize_associations,
    translate_error,
)
from schemagate.config import ConfigurationError, get_connection_config
from schemagate.domain import (
    Fatal,
    GateError,
    GateStage,
    NotConfigured,
    ReconciliationOutcome,
    SchemaGate,
    classify,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from schemagate.config import ConnectionConfig


log = getLogger(__name__)


def ensure_database_schema(
    config: ConnectionConfig | None = None,
    *,
    connections: SqlAlchemyConnectionProvider | None = None,
    entity_names: Iterable[str] = DEFAULT_ENTITY_NAMES,
) -> ReconciliationOutcome:
    """Run the schema gate against the configured database and return its outcome."""

    try:
        effective_config = config or get_connection_config()
    except ConfigurationError as exc:
        return _configuration_failure(exc)

    log.info("Database configuration:")
    for key, value in effective_config.describe().items():
        log.info("  - %s: %s", key, value)

    owns_provider = connections is None
    provider = connections or SqlAlchemyConnectionProvider()
    try:
        try:
            registry = build_entity_registry(entity_names)
        except GateError as exc:
            return _fatal(GateStage.START, exc)

        gate = SchemaGate(
            config=effective_config,
            connections=provider,
            synchronizer=SqlAlchemySchemaSynchronizer(),
            associations=initialize_associations,
            registry=registry,
            translate_error=translate_error,
        )
        outcome = gate.run()
    finally:
        if owns_provider:
            provider.dispose()

    log.info(
        "Schema gate finished: status=%s, verified=%d, exit_status=%d",
        outcome.status.value,
        len(outcome.results),
        outcome.exit_status,
    )
    return outcome


def _configuration_failure(exc: ConfigurationError) -> Fatal:
    failure = NotConfigured(message=str(exc))
    classification = classify(failure)
    log.error("%s", classification.reason)
    for hint in classification.hints:
        log.error("  - %s", hint)
    log.error("DEPLOYMENT ABORTED: database verification failed with critical errors")
    return Fatal(stage=GateStage.START, failure=failure, classification=classification)


def _fatal(stage: GateStage, exc: GateError) -> Fatal:
    classification = classify(exc.failure)
    log.error("%s: %s", classification.reason, exc.failure.message)
    return Fatal(stage=stage, failure=exc.failure, classification=classification)
