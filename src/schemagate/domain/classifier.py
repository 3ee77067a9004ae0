"""Decide whether a failure has to abort the deployment.

Everything here is a pure function of the failure descriptor so it can be
exercised without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .failures import (
    CONNECTION_KINDS,
    AccessDenied,
    ConnectionFailure,
    ConnectionRefused,
    DatabaseFailure,
    Failure,
    FailureKind,
    HostNotFound,
    MissingRelation,
    NotConfigured,
    ProgrammingFault,
    UniqueViolation,
    UnknownFailure,
)

# Postgres stores type names in pg_type.typname; generated enum types share a prefix.
TYPE_NAME_COLUMN: Final[str] = "typname"
ENUM_TYPE_PREFIX: Final[str] = "enum_"


class Severity(StrEnum):
    FATAL = "fatal"
    NON_FATAL = "non_fatal"


@dataclass(frozen=True, slots=True, kw_only=True)
class Classification:
    severity: Severity
    reason: str
    hints: tuple[str, ...] = ()
    retry_worthy: bool = False

    @property
    def fatal(self) -> bool:
        return self.severity is Severity.FATAL


def is_enum_type_race(failure: Failure) -> bool:
    """Two workers created the same enum type; the loser sees a typname conflict."""

    if not isinstance(failure, UniqueViolation):
        return False
    return any(
        violation.column == TYPE_NAME_COLUMN and violation.value.startswith(ENUM_TYPE_PREFIX)
        for violation in failure.violations
    )


def is_missing_relation(failure: Failure) -> bool:
    return isinstance(failure, MissingRelation)


def is_tolerated_count_failure(failure: Failure) -> bool:
    """Count failures that should not block a deployment.

    Freshly created tables can be visible in the catalog but not yet queryable
    through a pooled connection, so connection-level and plain database errors
    are downgraded to warnings.
    """

    return failure.kind in CONNECTION_KINDS or failure.kind in {
        FailureKind.DATABASE,
        FailureKind.MISSING_RELATION,
    }


def classify(failure: Failure) -> Classification:
    """Map a failure descriptor to a fatal/non-fatal verdict with remediation hints."""

    match failure:
        case UniqueViolation() if is_enum_type_race(failure):
            return Classification(
                severity=Severity.NON_FATAL,
                reason="enum type already created by a concurrent build",
            )
        case MissingRelation(relation=relation):
            target = f" ({relation})" if relation else ""
            return Classification(
                severity=Severity.NON_FATAL,
                reason=f"relation does not exist yet{target}; treating as first-time setup",
            )
        case ConnectionRefused():
            return Classification(
                severity=Severity.FATAL,
                reason="CONNECTION REFUSED: could not connect to the database server",
                hints=(
                    "Database host is correct and reachable",
                    "Database port is open and accessible",
                    "Network allows connections to the database",
                ),
                retry_worthy=True,
            )
        case HostNotFound():
            return Classification(
                severity=Severity.FATAL,
                reason="HOST NOT FOUND: the database host could not be resolved",
                hints=("Check the DB_HOST environment variable",),
            )
        case AccessDenied():
            return Classification(
                severity=Severity.FATAL,
                reason="ACCESS DENIED: authentication failed",
                hints=("Check the DB_USER and DB_PASSWORD environment variables",),
            )
        case ConnectionFailure(message=message):
            return Classification(
                severity=Severity.FATAL,
                reason="CONNECTION ERROR: could not establish database connection",
                hints=(f"Details: {message}",),
                retry_worthy=True,
            )
        case DatabaseFailure(message=message) | UniqueViolation(message=message):
            return Classification(
                severity=Severity.FATAL,
                reason="DATABASE ERROR: operation on database failed",
                hints=(f"Details: {message}",),
            )
        case NotConfigured(message=message):
            return Classification(
                severity=Severity.FATAL,
                reason="NOT CONFIGURED: database connection could not be set up",
                hints=("Check all database environment variables", f"Details: {message}"),
            )
        case ProgrammingFault(message=message):
            return Classification(
                severity=Severity.FATAL,
                reason="PROGRAMMING ERROR: model registry or associations are broken",
                hints=(f"Details: {message}",),
            )
        case UnknownFailure(message=message):
            return Classification(
                severity=Severity.FATAL,
                reason="UNEXPECTED ERROR during schema verification",
                hints=(f"Details: {message}",),
            )
