"""Entity counters used to verify that each table is queryable."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from schemagate.domain.failures import EntityQueryError, ProgrammingFault, RegistryError

from .errors import translate_error
from .mappings import TABLE_BY_ENTITY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from sqlalchemy import Table
    from sqlalchemy.engine import Connection

log = logging.getLogger(__name__)

DEFAULT_ENTITY_NAMES: Final[tuple[str, ...]] = ("User", "Department", "Course", "Degree", "Message")


@dataclass(frozen=True, slots=True)
class TableCounter:
    """Counts rows of one table through the run's connection."""

    table: Table

    def count(self, handle: Connection) -> int:
        statement = select(func.count()).select_from(self.table)
        try:
            result = handle.scalar(statement)
            handle.rollback()
        except DBAPIError as exc:
            handle.rollback()
            raise EntityQueryError(translate_error(exc)) from exc
        except SQLAlchemyError as exc:
            raise EntityQueryError(
                ProgrammingFault(message=f"Cannot count {self.table.name}: {exc}")
            ) from exc
        return int(result or 0)


def build_entity_registry(
    names: Iterable[str] = DEFAULT_ENTITY_NAMES,
    *,
    tables: Mapping[str, Table] = TABLE_BY_ENTITY,
) -> dict[str, TableCounter]:
    """Return an ordered name -> counter mapping for the requested entities."""

    registry: dict[str, TableCounter] = {}
    for name in names:
        table = tables.get(name)
        if table is None:
            known = ", ".join(sorted(tables))
            raise RegistryError(
                ProgrammingFault(message=f"Unknown entity {name!r} (known: {known})")
            )
        registry[name] = TableCounter(table)
    log.debug("Entity registry: %s", ", ".join(registry))
    return registry
