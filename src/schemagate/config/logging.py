"""Shared logging helpers for schemagate."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV_VAR = "SCHEMAGATE_LOG_LEVEL"


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level (or ``SCHEMAGATE_LOG_LEVEL`` when set) and a terse format suitable
    for build logs. Pass ``force=True`` to reconfigure during tests.
    """

    if level is None:
        level = _level_from_environment()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def _level_from_environment() -> int:
    name = os.getenv(LOG_LEVEL_ENV_VAR, "").strip().upper()
    if not name:
        return logging.INFO
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO
