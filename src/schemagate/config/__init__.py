"""Application configuration helpers."""

from __future__ import annotations

from .database import (
    DEFAULT_DIALECT,
    DEFAULT_PORTS,
    ConnectionConfig,
    Dialect,
    get_connection_config,
    parse_dialect,
)
from .env import env_flag, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging

__all__ = [
    "DEFAULT_DIALECT",
    "DEFAULT_PORTS",
    "ConfigurationError",
    "ConnectionConfig",
    "Dialect",
    "MissingConfigurationError",
    "configure_logging",
    "env_flag",
    "env_int",
    "get_connection_config",
    "optional_env_var",
    "parse_dialect",
    "require_env_vars",
]
