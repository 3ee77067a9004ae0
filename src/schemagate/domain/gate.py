"""Deployment-time schema gate.

The gate runs one linear pipeline per process:

    connect -> ping -> associate -> synchronize -> verify -> outcome

Any stage may abort. Nothing is retried inside a run; the deployment pipeline
decides whether to re-run the whole gate. Several gates may run against the same
database at once, so schema creation is treated as a redundant, non-destructive
operation and the known race signatures are downgraded to warnings.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from .classifier import classify, is_enum_type_race, is_tolerated_count_failure
from .failures import EntityQueryError, GateError, SchemaSyncError, describe_exception
from .outcome import (
    Fatal,
    GateStage,
    GateWarning,
    ReconciliationOutcome,
    Success,
    SuccessWithWarnings,
    VerificationResult,
)

if TYPE_CHECKING:
    from schemagate.config import ConnectionConfig

    from .failures import Failure
    from .ports import (
        AssociationInitializer,
        ConnectionProvider,
        EntityRegistry,
        ErrorTranslator,
        SchemaSynchronizer,
    )

log = getLogger(__name__)

_TRANSITIONS: dict[GateStage, GateStage] = {
    GateStage.START: GateStage.CONNECTING,
    GateStage.CONNECTING: GateStage.AUTHENTICATING,
    GateStage.AUTHENTICATING: GateStage.ASSOCIATING,
    GateStage.ASSOCIATING: GateStage.SYNCHRONIZING,
    GateStage.SYNCHRONIZING: GateStage.VERIFYING,
    GateStage.VERIFYING: GateStage.DONE,
}


class GateStateError(RuntimeError):
    """Raised when a gate is driven out of order or run twice."""


class SchemaGate[THandle]:
    """Verify and reconcile the database schema before a deployment proceeds."""

    def __init__(
        self,
        *,
        config: ConnectionConfig,
        connections: ConnectionProvider[THandle],
        synchronizer: SchemaSynchronizer[THandle],
        associations: AssociationInitializer,
        registry: EntityRegistry[THandle],
        translate_error: ErrorTranslator = describe_exception,
    ) -> None:
        self._config = config
        self._connections = connections
        self._synchronizer = synchronizer
        self._associations = associations
        self._registry = registry
        self._translate_error = translate_error
        self._stage = GateStage.START
        self._results: list[VerificationResult] = []
        self._warnings: list[GateWarning] = []

    @property
    def stage(self) -> GateStage:
        return self._stage

    def run(self) -> ReconciliationOutcome:
        if self._stage is not GateStage.START:
            raise GateStateError(f"Gate already ran (stage={self._stage.value})")

        log.info("Starting database schema verification")
        handle: THandle | None = None
        try:
            self._advance(GateStage.CONNECTING)
            handle = self._connections.connect(self._config)

            self._advance(GateStage.AUTHENTICATING)
            self._connections.ping(handle)
            log.info("Database connection established")

            self._advance(GateStage.ASSOCIATING)
            self._associations()
            log.info("Model associations initialised")

            self._advance(GateStage.SYNCHRONIZING)
            self._synchronize(handle)

            self._advance(GateStage.VERIFYING)
            self._verify(handle)

            self._advance(GateStage.DONE)
        except GateError as exc:
            return self._abort(exc.failure)
        except Exception as exc:  # noqa: BLE001
            log.debug("Unhandled exception during %s", self._stage.value, exc_info=True)
            return self._abort(self._translate_error(exc))
        finally:
            if handle is not None:
                self._connections.release(handle)
                log.debug("Database connection released")

        return self._finish()

    def _advance(self, target: GateStage) -> None:
        expected = _TRANSITIONS.get(self._stage)
        if expected is not target:
            raise GateStateError(f"Illegal transition {self._stage.value} -> {target.value}")
        self._stage = target
        log.debug("Gate stage: %s", target.value)

    def _synchronize(self, handle: THandle) -> None:
        log.info("Synchronising database schema (creating missing objects only)")
        try:
            self._synchronizer.synchronize(handle, allow_alter=False, allow_drop=False)
        except SchemaSyncError as exc:
            if not is_enum_type_race(exc.failure):
                raise
            log.warning(
                "ENUM type already exists (%s), continuing with verification",
                exc.failure.message,
            )
            self._warnings.append(GateWarning(stage=self._stage, failure=exc.failure))
            return
        log.info("Database schema synchronised")

    def _verify(self, handle: THandle) -> None:
        log.info("Verifying %d entities with count queries", len(self._registry))
        for name, counter in self._registry.items():
            try:
                count = counter.count(handle)
            except EntityQueryError as exc:
                if not is_tolerated_count_failure(exc.failure):
                    log.error("Verification of %s failed: %s", name, exc.failure.message)
                    raise
                log.warning(
                    "Skipping %s after %s: %s",
                    name,
                    exc.failure.kind.value,
                    exc.failure.message,
                )
                self._warnings.append(
                    GateWarning(stage=self._stage, failure=exc.failure, entity_name=name)
                )
                continue
            self._results.append(VerificationResult(entity_name=name, record_count=count))
            log.info("%s verified (%d records)", name, count)

    def _finish(self) -> ReconciliationOutcome:
        results = tuple(self._results)
        if not self._warnings:
            log.info("Database schema verification completed successfully")
            return Success(results=results)
        log.warning(
            "Database schema verification completed with %d warning(s)", len(self._warnings)
        )
        return SuccessWithWarnings(results=results, warnings=tuple(self._warnings))

    def _abort(self, failure: Failure) -> ReconciliationOutcome:
        stage = self._stage
        self._stage = GateStage.ABORTED
        classification = classify(failure)
        log.error(
            "Database schema verification failed during %s: %s: %s",
            stage.value,
            failure.kind.value,
            failure.message,
        )

        if not classification.fatal:
            log.warning(
                "Non-fatal error detected (%s), continuing with deployment",
                classification.reason,
            )
            self._warnings.append(GateWarning(stage=stage, failure=failure))
            log.warning("Database schema verification completed with warnings")
            return SuccessWithWarnings(
                results=tuple(self._results), warnings=tuple(self._warnings)
            )

        log.error(classification.reason)
        for hint in classification.hints:
            log.error("  - %s", hint)
        log.error("DEPLOYMENT ABORTED: database verification failed with critical errors")
        return Fatal(
            stage=stage,
            failure=failure,
            classification=classification,
            results=tuple(self._results),
            warnings=tuple(self._warnings),
        )
