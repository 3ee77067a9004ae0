"""Non-destructive schema synchronisation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from schemagate.domain.failures import SchemaSyncError

from .errors import translate_error
from .mappings import mapper_registry

if TYPE_CHECKING:
    from sqlalchemy import MetaData
    from sqlalchemy.engine import Connection

log = logging.getLogger(__name__)


class SqlAlchemySchemaSynchronizer:
    """Create missing tables and enum types; never alter or drop existing ones."""

    def __init__(self, metadata: MetaData | None = None) -> None:
        self.metadata = metadata if metadata is not None else mapper_registry.metadata

    def synchronize(self, handle: Connection, *, allow_alter: bool, allow_drop: bool) -> None:
        if allow_alter or allow_drop:
            raise ValueError("Schema synchronisation only creates missing objects")

        log.debug("Creating missing objects for tables: %s", ", ".join(self.metadata.tables))
        try:
            self.metadata.create_all(handle, checkfirst=True)
            handle.commit()
        except SQLAlchemyError as exc:
            handle.rollback()
            raise SchemaSyncError(translate_error(exc)) from exc
