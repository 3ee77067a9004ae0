"""SQLAlchemy adapter package for schemagate."""

from __future__ import annotations

from .connection import SqlAlchemyConnectionProvider
from .errors import translate_error
from .mappings import (
    TABLE_BY_ENTITY,
    initialize_associations,
    mapper_registry,
    start_mappers,
)
from .registry import DEFAULT_ENTITY_NAMES, TableCounter, build_entity_registry
from .synchronizer import SqlAlchemySchemaSynchronizer

__all__ = [
    "DEFAULT_ENTITY_NAMES",
    "TABLE_BY_ENTITY",
    "SqlAlchemyConnectionProvider",
    "SqlAlchemySchemaSynchronizer",
    "TableCounter",
    "build_entity_registry",
    "initialize_associations",
    "mapper_registry",
    "start_mappers",
    "translate_error",
]
