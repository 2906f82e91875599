"""Named savepoints inside a transaction, each holding a snapshot of the tables."""

from __future__ import annotations

import enum
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from reefdb.schema import ReefDBError
from reefdb.storage.base import TableStorage


class SavepointError(ReefDBError):
    """Base class for savepoint errors."""

    def __init__(self, message: str, name: str) -> None:
        super().__init__(message)
        self.name = name


class SavepointExistsError(SavepointError):
    """Raised when a savepoint with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Savepoint {name} already exists", name)


class SavepointNotFoundError(SavepointError, LookupError):
    """Raised when no savepoint has the given name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Savepoint not found: {name}", name)


class SavepointNotActiveError(SavepointError):
    """Raised when a savepoint exists but is no longer active."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Savepoint not active: {name}", name)


class SavepointState(enum.Enum):
    """Lifecycle of a savepoint."""

    ACTIVE = "ACTIVE"
    RELEASED = "RELEASED"
    ROLLED_BACK = "ROLLED BACK"


@dataclass
class Savepoint:
    """A named snapshot of the tables taken at a point in a transaction."""

    name: str
    table_snapshot: TableStorage
    timestamp: float = field(default_factory=time.time)
    state: SavepointState = SavepointState.ACTIVE


class SavepointHandler:
    """Keeps a transaction's savepoints by name."""

    def __init__(self) -> None:
        self._savepoints: dict[str, Savepoint] = {}

    def create_savepoint(self, name: str, tables: TableStorage) -> None:
        """Record a copy of ``tables`` under ``name``; the name must be new."""
        if name in self._savepoints:
            raise SavepointExistsError(name)
        self._savepoints[name] = Savepoint(name=name, table_snapshot=tables.copy())

    def _active(self, name: str) -> Savepoint:
        try:
            savepoint = self._savepoints[name]
        except KeyError:
            raise SavepointNotFoundError(name) from None
        if savepoint.state is not SavepointState.ACTIVE:
            raise SavepointNotActiveError(name)
        return savepoint

    def rollback_to_savepoint(self, name: str) -> tuple[TableStorage, list[str]]:
        """Return the savepoint's snapshot and drop every savepoint whose name sorts after it.

        The names of the dropped savepoints are returned alongside the snapshot.
        """
        snapshot = self._active(name).table_snapshot.copy()
        ordered = sorted(self._savepoints)
        removed = ordered[ordered.index(name) + 1:]
        for sp_name in removed:
            del self._savepoints[sp_name]
        return snapshot, removed

    def release_savepoint(self, name: str) -> None:
        """Forget an active savepoint."""
        self._active(name)
        del self._savepoints[name]

    @property
    def savepoints(self) -> Mapping[str, Savepoint]:
        """A read-only view of the savepoints by name."""
        return MappingProxyType(self._savepoints)