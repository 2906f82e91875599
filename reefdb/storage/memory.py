"""Storage that keeps tables in memory and enforces column constraints."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from reefdb.schema import Constraint, ConstraintViolationError
from reefdb.storage.base import Storage, _same_value


class InMemoryStorage(Storage):
    """In-memory tables with UNIQUE, NOT NULL and PRIMARY KEY checks on insert."""

    def push_value(self, table_name: str, row: Iterable[Any]) -> int:
        """Validate and append a row, returning its 1-based row id."""
        columns, rows = self._table(table_name)
        new_row = list(row)
        for i, (column, value) in enumerate(zip(columns, new_row)):
            duplicate = any(_same_value(existing[i], value) for existing in rows)
            checks = (
                (Constraint.UNIQUE, duplicate,
                 f"Unique constraint violation for column {column.name} with value {value!r}"),
                (Constraint.NOT_NULL, isinstance(value, str) and value == "",
                 f"NOT NULL constraint violation for column {column.name}"),
                (Constraint.PRIMARY_KEY, duplicate,
                 f"Primary key violation for column {column.name} with value {value!r}"),
            )
            for constraint, violated, message in checks:
                if violated and constraint in column.constraints:
                    raise ConstraintViolationError(message, column.name)
        rows.append(new_row)
        return len(rows)

    def update_table(self, table_name: str, updates: Any, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Set columns on matching rows; a missing table or condition column is an error."""
        return len(self._update_rows(table_name, updates, where_clause, strict=True))

    def delete_table(self, table_name: str, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Delete matching rows and return how many went; a missing table deletes nothing."""
        return self._delete_rows(table_name, where_clause, strict_where=True)