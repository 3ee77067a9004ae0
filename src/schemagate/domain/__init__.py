"""Schema gate domain: pipeline, failure taxonomy and classification."""

from __future__ import annotations

from .classifier import (
    ENUM_TYPE_PREFIX,
    TYPE_NAME_COLUMN,
    Classification,
    Severity,
    classify,
    is_enum_type_race,
    is_missing_relation,
    is_tolerated_count_failure,
)
from .failures import (
    AccessDenied,
    ConnectionFailed,
    ConnectionFailure,
    ConnectionRefused,
    ConstraintViolation,
    DatabaseFailure,
    EntityQueryError,
    Failure,
    FailureKind,
    GateError,
    HostNotFound,
    MissingRelation,
    NotConfigured,
    ProgrammingFault,
    RegistryError,
    SchemaSyncError,
    UniqueViolation,
    UnknownFailure,
    describe_exception,
)
from .gate import GateStateError, SchemaGate
from .outcome import (
    EXIT_ABORT,
    EXIT_PROCEED,
    Fatal,
    GateStage,
    GateWarning,
    OutcomeStatus,
    ReconciliationOutcome,
    Success,
    SuccessWithWarnings,
    VerificationResult,
)

__all__ = [
    "ENUM_TYPE_PREFIX",
    "EXIT_ABORT",
    "EXIT_PROCEED",
    "TYPE_NAME_COLUMN",
    "AccessDenied",
    "Classification",
    "ConnectionFailed",
    "ConnectionFailure",
    "ConnectionRefused",
    "ConstraintViolation",
    "DatabaseFailure",
    "EntityQueryError",
    "Failure",
    "FailureKind",
    "Fatal",
    "GateError",
    "GateStage",
    "GateStateError",
    "GateWarning",
    "HostNotFound",
    "MissingRelation",
    "NotConfigured",
    "OutcomeStatus",
    "ProgrammingFault",
    "ReconciliationOutcome",
    "RegistryError",
    "SchemaGate",
    "SchemaSyncError",
    "Severity",
    "Success",
    "SuccessWithWarnings",
    "UniqueViolation",
    "UnknownFailure",
    "VerificationResult",
    "classify",
    "describe_exception",
    "is_enum_type_race",
    "is_missing_relation",
    "is_tolerated_count_failure",
]
