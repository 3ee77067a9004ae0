"""Ports the gate consumes; adapters provide the concrete implementations."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from schemagate.config import ConnectionConfig

    from .failures import Failure


@runtime_checkable
class ConnectionProvider[THandle](Protocol):
    """Opens, checks and releases the connection handle owned by one run."""

    def connect(self, config: ConnectionConfig) -> THandle: ...

    def ping(self, handle: THandle) -> None: ...

    def release(self, handle: THandle) -> None: ...


@runtime_checkable
class SchemaSynchronizer[THandle](Protocol):
    """Creates schema objects that do not exist yet."""

    def synchronize(self, handle: THandle, *, allow_alter: bool, allow_drop: bool) -> None: ...


@runtime_checkable
class EntityCounter[THandle](Protocol):
    def count(self, handle: THandle) -> int: ...


type AssociationInitializer = Callable[[], object]
type EntityRegistry[THandle] = Mapping[str, EntityCounter[THandle]]
type ErrorTranslator = Callable[[BaseException], Failure]
