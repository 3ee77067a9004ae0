"""Translate SQLAlchemy/DBAPI exceptions into structured failure descriptors.

Structured driver data wins: SQLSTATE codes (``pgcode``/``sqlstate``) and the
server-provided detail line. Message matching is only the fallback for drivers
(SQLite, MySQL) that report errors as text, and is kept per dialect below.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from sqlalchemy import exc as sa_exc

from schemagate.domain.failures import (
    AccessDenied,
    ConnectionFailure,
    ConnectionRefused,
    ConstraintViolation,
    DatabaseFailure,
    HostNotFound,
    MissingRelation,
    ProgrammingFault,
    UniqueViolation,
    describe_exception,
)

if TYPE_CHECKING:
    from schemagate.domain.failures import Failure

SQLSTATE_UNIQUE_VIOLATION: Final[str] = "23505"
SQLSTATE_UNDEFINED_TABLE: Final[str] = "42P01"
SQLSTATE_INVALID_PASSWORD: Final[str] = "28P01"
SQLSTATE_INVALID_AUTHORIZATION: Final[str] = "28000"
SQLSTATE_CONNECTION_CLASS: Final[str] = "08"

MYSQL_ACCESS_DENIED: Final[frozenset[int]] = frozenset({1044, 1045})
MYSQL_NO_SUCH_TABLE: Final[int] = 1146
MYSQL_DUPLICATE_ENTRY: Final[int] = 1062
MYSQL_CANNOT_CONNECT: Final[frozenset[int]] = frozenset({2002, 2003, 2013})
MYSQL_UNKNOWN_HOST: Final[int] = 2005

# "Key (typname, typnamespace)=(enum_users_role, 2200) already exists."
_KEY_DETAIL = re.compile(r"Key \((?P<columns>[^)]*)\)=\((?P<values>.*)\) already exists")
_PG_MISSING_RELATION = re.compile(r'^relation "?(?P<name>[^"\s]+)"? does not exist')
_SQLITE_MISSING_TABLE = re.compile(r"no such table: (?P<name>\S+)")
_MYSQL_MISSING_TABLE = re.compile(r"Table '(?P<name>[^']+)' doesn't exist")
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>.+)")
_HOST_NAME = re.compile(r"host(?: name)? [\"'](?P<name>[^\"']+)[\"']", re.IGNORECASE)
_USER_NAME = re.compile(r"for user [\"'](?P<name>[^\"']+)[\"']", re.IGNORECASE)

_REFUSED_MARKERS: Final[tuple[str, ...]] = ("connection refused", "can't connect to")
_HOST_MARKERS: Final[tuple[str, ...]] = (
    "could not translate host name",
    "name or service not known",
    "nodename nor servname provided",
    "temporary failure in name resolution",
    "unknown mysql server host",
    "getaddrinfo failed",
)
_ACCESS_MARKERS: Final[tuple[str, ...]] = (
    "password authentication failed",
    "access denied for user",
    "no pg_hba.conf entry",
)
_CONNECTION_MARKERS: Final[tuple[str, ...]] = (
    "server closed the connection",
    "connection to server",
    "could not connect",
    "timeout expired",
    "lost connection",
    "ssl",
)


def translate_error(exc: BaseException) -> Failure:
    """Return the failure descriptor for an exception raised by SQLAlchemy or a driver."""

    if isinstance(exc, sa_exc.DBAPIError):
        return _translate_dbapi_error(exc)
    if isinstance(exc, (sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return ConnectionFailure(message=str(exc))
    if isinstance(exc, sa_exc.NoSuchTableError):
        return MissingRelation(message=f"Table {exc} does not exist", relation=str(exc))
    if isinstance(exc, (sa_exc.ArgumentError, sa_exc.InvalidRequestError)):
        return ProgrammingFault(message=f"{type(exc).__name__}: {exc}")
    if isinstance(exc, sa_exc.SQLAlchemyError):
        return DatabaseFailure(message=str(exc))
    return describe_exception(exc)


def _translate_dbapi_error(exc: sa_exc.DBAPIError) -> Failure:
    orig = exc.orig
    text = str(orig) if orig is not None else str(exc)
    message = _first_line(text)
    sqlstate = _sqlstate(orig)
    errno = _mysql_errno(orig)

    if exc.connection_invalidated:
        return ConnectionFailure(message=message)

    if sqlstate == SQLSTATE_UNIQUE_VIOLATION or errno == MYSQL_DUPLICATE_ENTRY:
        return _unique_violation(orig, message, text)
    if isinstance(exc, sa_exc.IntegrityError) and "unique" in message.lower():
        return _unique_violation(orig, message, text)

    if sqlstate == SQLSTATE_UNDEFINED_TABLE or errno == MYSQL_NO_SUCH_TABLE:
        return MissingRelation(message=message, relation=_missing_relation_name(message))
    # text fallback only for drivers that report no SQLSTATE
    relation = _missing_relation_name(message) if sqlstate is None else None
    if relation is not None:
        return MissingRelation(message=message, relation=relation)

    if sqlstate in {SQLSTATE_INVALID_PASSWORD, SQLSTATE_INVALID_AUTHORIZATION}:
        return AccessDenied(message=message, user=_search(_USER_NAME, message))
    if errno in MYSQL_ACCESS_DENIED:
        return AccessDenied(message=message, user=_search(_USER_NAME, message))
    if errno == MYSQL_UNKNOWN_HOST:
        return HostNotFound(message=message, host=_search(_HOST_NAME, message))
    if errno in MYSQL_CANNOT_CONNECT:
        return ConnectionRefused(message=message)

    if isinstance(exc, sa_exc.OperationalError) or (
        sqlstate is not None and sqlstate.startswith(SQLSTATE_CONNECTION_CLASS)
    ):
        connection_failure = _connection_failure(message)
        if connection_failure is not None:
            return connection_failure

    return DatabaseFailure(message=message, code=sqlstate)


def _connection_failure(message: str) -> Failure | None:
    lowered = message.lower()
    if any(marker in lowered for marker in _HOST_MARKERS):
        return HostNotFound(message=message, host=_search(_HOST_NAME, message))
    if any(marker in lowered for marker in _ACCESS_MARKERS):
        return AccessDenied(message=message, user=_search(_USER_NAME, message))
    if any(marker in lowered for marker in _REFUSED_MARKERS):
        return ConnectionRefused(message=message)
    if any(marker in lowered for marker in _CONNECTION_MARKERS):
        return ConnectionFailure(message=message)
    return None


def _unique_violation(orig: BaseException | None, message: str, text: str) -> UniqueViolation:
    detail = _diag(orig, "message_detail") or text
    constraint = _diag(orig, "constraint_name")
    violations: tuple[ConstraintViolation, ...] = ()

    match = _KEY_DETAIL.search(detail)
    if match is not None:
        columns = [column.strip() for column in match["columns"].split(",")]
        values = [value.strip() for value in match["values"].split(",")]
        violations = tuple(
            ConstraintViolation(column=column, value=value)
            for column, value in zip(columns, values, strict=False)
        )
    else:
        sqlite_match = _SQLITE_UNIQUE.search(message)
        if sqlite_match is not None:
            violations = tuple(
                ConstraintViolation(column=column.strip().rsplit(".", 1)[-1], value="")
                for column in sqlite_match["columns"].split(",")
            )

    return UniqueViolation(message=message, violations=violations, constraint=constraint)


def _missing_relation_name(message: str) -> str | None:
    for pattern in (_PG_MISSING_RELATION, _SQLITE_MISSING_TABLE, _MYSQL_MISSING_TABLE):
        match = pattern.search(message)
        if match is not None:
            return match["name"]
    return None


def _search(pattern: re.Pattern[str], message: str) -> str | None:
    match = pattern.search(message)
    return match["name"] if match is not None else None


def _sqlstate(orig: BaseException | None) -> str | None:
    for attribute in ("sqlstate", "pgcode"):
        value = getattr(orig, attribute, None)
        if isinstance(value, str) and value:
            return value
    return None


def _mysql_errno(orig: BaseException | None) -> int | None:
    if orig is None or not orig.args:
        return None
    first = orig.args[0]
    return first if isinstance(first, int) else None


def _diag(orig: BaseException | None, field: str) -> str | None:
    diag = getattr(orig, "diag", None)
    value = getattr(diag, field, None)
    return value if isinstance(value, str) and value else None


def _first_line(message: str) -> str:
    return message.strip().splitlines()[0] if message.strip() else message
