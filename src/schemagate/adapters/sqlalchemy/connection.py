"""SQLAlchemy-backed connection provider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from schemagate.domain.failures import ConnectionFailed

from .errors import translate_error

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

    from schemagate.config import ConnectionConfig

log = logging.getLogger(__name__)

PING_STATEMENT = "SELECT 1"


class SqlAlchemyConnectionProvider:
    """Hands out connections from one engine per configuration.

    Engines are memoised on the provider, so a process that keeps a single
    provider never re-creates a pool for the same settings.
    """

    def __init__(self, *, echo: bool = False) -> None:
        self._echo = echo
        self._engines: dict[ConnectionConfig, Engine] = {}

    def engine_for(self, config: ConnectionConfig) -> Engine:
        engine = self._engines.get(config)
        if engine is None:
            try:
                engine = create_engine(
                    config.url(),
                    connect_args=config.connect_args(),
                    echo=self._echo,
                    future=True,
                )
            except (SQLAlchemyError, ImportError) as exc:
                raise ConnectionFailed(translate_error(exc)) from exc
            self._engines[config] = engine
            log.debug("Created engine for dialect %s", engine.dialect.name)
        return engine

    def connect(self, config: ConnectionConfig) -> Connection:
        engine = self.engine_for(config)
        log.info("Connecting to %s database", engine.dialect.name)
        try:
            return engine.connect()
        except SQLAlchemyError as exc:
            raise ConnectionFailed(translate_error(exc)) from exc

    def ping(self, handle: Connection) -> None:
        try:
            handle.execute(text(PING_STATEMENT))
            handle.rollback()
        except SQLAlchemyError as exc:
            raise ConnectionFailed(translate_error(exc)) from exc

    def release(self, handle: Connection) -> None:
        handle.close()

    def dispose(self) -> None:
        """Dispose every cached engine (end of process or tests)."""

        for engine in self._engines.values():
            engine.dispose()
        self._engines.clear()
