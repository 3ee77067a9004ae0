"""Database connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

from sqlalchemy.engine import URL

from .env import env_flag, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError

DEFAULT_DIALECT: Final[str] = "postgres"
MASK: Final[str] = "*****"
NOT_SET: Final[str] = "not set"


class Dialect(StrEnum):
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"


_DIALECT_ALIASES: Final[dict[str, Dialect]] = {
    "postgres": Dialect.POSTGRES,
    "postgresql": Dialect.POSTGRES,
    "mysql": Dialect.MYSQL,
    "mariadb": Dialect.MYSQL,
    "sqlite": Dialect.SQLITE,
}

_DRIVER_NAMES: Final[dict[Dialect, str]] = {
    Dialect.POSTGRES: "postgresql+psycopg2",
    Dialect.MYSQL: "mysql+pymysql",
    Dialect.SQLITE: "sqlite+pysqlite",
}

DEFAULT_PORTS: Final[dict[Dialect, int]] = {
    Dialect.POSTGRES: 5432,
    Dialect.MYSQL: 3306,
}


def parse_dialect(value: str) -> Dialect:
    try:
        return _DIALECT_ALIASES[value.strip().lower()]
    except KeyError as exc:
        supported = ", ".join(sorted(_DIALECT_ALIASES))
        raise ConfigurationError(
            f"Unsupported DB_DIALECT {value!r} (expected one of: {supported})"
        ) from exc


def mask_prefix(value: str | None, visible: int) -> str:
    """Keep the first ``visible`` characters of a secret-ish value for logs."""

    if not value:
        return NOT_SET
    return value[:visible] + MASK


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectionConfig:
    """Immutable connection settings for a single gate run."""

    dialect: Dialect = Dialect.POSTGRES
    database: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = field(default=None, repr=False)
    ssl: bool = False
    environment: str | None = None

    @property
    def driver_name(self) -> str:
        return _DRIVER_NAMES[self.dialect]

    def url(self) -> URL:
        if self.dialect is Dialect.SQLITE:
            return URL.create(self.driver_name, database=self.database)
        return URL.create(
            self.driver_name,
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port or DEFAULT_PORTS.get(self.dialect),
            database=self.database,
        )

    def connect_args(self) -> dict[str, object]:
        if not self.ssl:
            return {}
        if self.dialect is Dialect.POSTGRES:
            return {"sslmode": "require"}
        if self.dialect is Dialect.MYSQL:
            return {"ssl": {"ssl": True}}
        return {}

    def describe(self) -> dict[str, str]:
        """Return a masked, log-safe view of the configuration."""

        return {
            "DB_HOST": mask_prefix(self.host, 3),
            "DB_PORT": str(self.port) if self.port is not None else NOT_SET,
            "DB_NAME": self.database,
            "DB_USER": mask_prefix(self.user, 1),
            "DB_SSL": "true" if self.ssl else "false",
            "DB_DIALECT": self.dialect.value,
            "APP_ENV": self.environment or NOT_SET,
        }


def get_connection_config() -> ConnectionConfig:
    """Load the connection settings from ``DB_*`` environment variables."""

    dialect = parse_dialect(optional_env_var("DB_DIALECT", DEFAULT_DIALECT) or DEFAULT_DIALECT)
    ssl = env_flag("DB_SSL")
    environment = optional_env_var("APP_ENV") or optional_env_var("NODE_ENV")

    if dialect is Dialect.SQLITE:
        values = require_env_vars(("DB_NAME",))
        return ConnectionConfig(
            dialect=dialect,
            database=values["DB_NAME"],
            ssl=ssl,
            environment=environment,
        )

    values = require_env_vars(("DB_HOST", "DB_NAME", "DB_USER", "DB_PASSWORD"))
    port = env_int("DB_PORT")
    if port is not None and not 0 < port < 65536:
        raise ConfigurationError(f"DB_PORT out of range: {port}")
    return ConnectionConfig(
        dialect=dialect,
        host=values["DB_HOST"],
        port=port if port is not None else DEFAULT_PORTS[dialect],
        database=values["DB_NAME"],
        user=values["DB_USER"],
        password=values["DB_PASSWORD"],
        ssl=ssl,
        environment=environment,
    )
