"""Structured failure descriptors and the stage exceptions that carry them.

Adapters translate driver exceptions into one of the descriptors below so the
classifier can decide on structured fields (conflicting column/value, missing
relation name) instead of re-parsing error text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


class FailureKind(StrEnum):
    CONNECTION_REFUSED = "connection_refused"
    HOST_NOT_FOUND = "host_not_found"
    ACCESS_DENIED = "access_denied"
    CONNECTION = "connection"
    UNIQUE_VIOLATION = "unique_violation"
    MISSING_RELATION = "missing_relation"
    DATABASE = "database"
    NOT_CONFIGURED = "not_configured"
    PROGRAMMING = "programming"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectionRefused:
    """The server actively refused the connection."""

    message: str
    kind: Literal[FailureKind.CONNECTION_REFUSED] = FailureKind.CONNECTION_REFUSED


@dataclass(frozen=True, slots=True, kw_only=True)
class HostNotFound:
    """The database host name could not be resolved."""

    message: str
    host: str | None = None
    kind: Literal[FailureKind.HOST_NOT_FOUND] = FailureKind.HOST_NOT_FOUND


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessDenied:
    """Authentication was rejected by the server."""

    message: str
    user: str | None = None
    kind: Literal[FailureKind.ACCESS_DENIED] = FailureKind.ACCESS_DENIED


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectionFailure:
    """Any other connection-level failure (dropped link, timeout, SSL)."""

    message: str
    kind: Literal[FailureKind.CONNECTION] = FailureKind.CONNECTION


@dataclass(frozen=True, slots=True)
class ConstraintViolation:
    """One conflicting column/value pair reported by a unique violation."""

    column: str
    value: str


@dataclass(frozen=True, slots=True, kw_only=True)
class UniqueViolation:
    message: str
    violations: tuple[ConstraintViolation, ...] = ()
    constraint: str | None = None
    kind: Literal[FailureKind.UNIQUE_VIOLATION] = FailureKind.UNIQUE_VIOLATION


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingRelation:
    """A statement referenced a table/relation that does not exist (yet)."""

    message: str
    relation: str | None = None
    kind: Literal[FailureKind.MISSING_RELATION] = FailureKind.MISSING_RELATION


@dataclass(frozen=True, slots=True, kw_only=True)
class DatabaseFailure:
    """Generic error raised by the database while executing a statement."""

    message: str
    code: str | None = None
    kind: Literal[FailureKind.DATABASE] = FailureKind.DATABASE


@dataclass(frozen=True, slots=True, kw_only=True)
class NotConfigured:
    """Connection settings are missing or malformed."""

    message: str
    kind: Literal[FailureKind.NOT_CONFIGURED] = FailureKind.NOT_CONFIGURED


@dataclass(frozen=True, slots=True, kw_only=True)
class ProgrammingFault:
    """Bug in the model registry or mapping layer, not an environment issue."""

    message: str
    kind: Literal[FailureKind.PROGRAMMING] = FailureKind.PROGRAMMING


@dataclass(frozen=True, slots=True, kw_only=True)
class UnknownFailure:
    message: str
    exception_type: str | None = None
    kind: Literal[FailureKind.UNKNOWN] = FailureKind.UNKNOWN


type Failure = (
    ConnectionRefused
    | HostNotFound
    | AccessDenied
    | ConnectionFailure
    | UniqueViolation
    | MissingRelation
    | DatabaseFailure
    | NotConfigured
    | ProgrammingFault
    | UnknownFailure
)

CONNECTION_KINDS: frozenset[FailureKind] = frozenset(
    {
        FailureKind.CONNECTION_REFUSED,
        FailureKind.HOST_NOT_FOUND,
        FailureKind.ACCESS_DENIED,
        FailureKind.CONNECTION,
    }
)


def describe_exception(exc: BaseException) -> Failure:
    """Fallback translation for exceptions no adapter recognised."""

    if isinstance(exc, GateError):
        return exc.failure
    if isinstance(exc, (AttributeError, KeyError, NameError, TypeError)):
        return ProgrammingFault(message=f"{type(exc).__name__}: {exc}")
    return UnknownFailure(message=str(exc) or type(exc).__name__, exception_type=type(exc).__name__)


class GateError(RuntimeError):
    """Base class for failures raised by the gate's collaborators."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(failure.message)
        self.failure = failure


class ConnectionFailed(GateError):
    """Raised when a connection cannot be opened or does not answer a ping."""


class SchemaSyncError(GateError):
    """Raised when creating missing schema objects fails."""


class EntityQueryError(GateError):
    """Raised when counting an entity fails."""


class RegistryError(GateError):
    """Raised for mistakes in the entity registry or association wiring."""
