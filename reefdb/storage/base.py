"""The dictionary-backed table store that every storage engine builds on."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Optional

from reefdb.schema import (
    ColumnDef,
    ColumnNotFoundError,
    DataType,
    TableNotFoundError,
    default_value,
)

Row = list[Any]
Table = tuple[list[ColumnDef], list[Row]]


def _same_value(a: Any, b: Any) -> bool:
    """Compare two stored values the way typed values compare: kind and content."""
    return type(a) is type(b) and a == b


def _column_index(columns: Iterable[ColumnDef], name: str) -> Optional[int]:
    return next((i for i, column in enumerate(columns) if column.name == name), None)


def _pairs(updates: Any) -> list[tuple[str, Any]]:
    if isinstance(updates, Mapping):
        return list(updates.items())
    return list(updates)


def _matching(
    columns: list[ColumnDef],
    rows: list[Row],
    where_clause: Optional[tuple[str, Any]],
    strict: bool,
) -> list[tuple[int, Row]]:
    """Return the (1-based id, row) pairs that satisfy an equality condition.

    An unknown condition column raises when ``strict`` and matches nothing otherwise.
    """
    if where_clause is None:
        return list(enumerate(rows, start=1))
    column, value = where_clause
    idx = _column_index(columns, column)
    if idx is None:
        if strict:
            raise ColumnNotFoundError(column)
        return []
    return [(row_id, row) for row_id, row in enumerate(rows, start=1) if _same_value(row[idx], value)]


class Storage:
    """Tables kept in a dictionary of name to (columns, rows); subclasses add persistence."""

    def __init__(self) -> None:
        self._tables: dict[str, Table] = {}

    def _table(self, table_name: str) -> Table:
        try:
            return self._tables[table_name]
        except KeyError:
            raise TableNotFoundError(table_name) from None

    def _update_rows(
        self,
        table_name: str,
        updates: Any,
        where_clause: Optional[tuple[str, Any]],
        *,
        strict: bool = False,
        strict_set: bool = False,
    ) -> list[int]:
        """Apply updates to matching rows and return the ids of the rows changed.

        ``strict`` makes a missing table or condition column an error; ``strict_set``
        does the same for a column that is to be set.
        """
        table = self._table(table_name) if strict else self.get_table(table_name)
        if table is None:
            return []
        columns, rows = table
        pairs = _pairs(updates)
        changed = []
        for row_id, row in _matching(columns, rows, where_clause, strict):
            for name, value in pairs:
                idx = _column_index(columns, name)
                if idx is not None:
                    row[idx] = value
                elif strict_set:
                    raise ColumnNotFoundError(name)
            changed.append(row_id)
        return changed

    def _delete_rows(
        self,
        table_name: str,
        where_clause: Optional[tuple[str, Any]],
        *,
        strict_where: bool = False,
    ) -> int:
        """Remove matching rows of an existing table and return how many went."""
        table = self.get_table(table_name)
        if table is None:
            return 0
        columns, rows = table
        doomed = {row_id for row_id, _ in _matching(columns, rows, where_clause, strict_where)}
        rows[:] = [row for row_id, row in enumerate(rows, start=1) if row_id not in doomed]
        return len(doomed)

    def insert_table(self, table_name: str, columns: Iterable[ColumnDef], rows: Iterable[Iterable[Any]] = ()) -> None:
        """Create or replace a table with the given columns and rows."""
        self._tables[table_name] = (
            copy.deepcopy(list(columns)),
            copy.deepcopy([list(row) for row in rows]),
        )

    def get_table(self, table_name: str) -> Optional[Table]:
        """Return the live (columns, rows) pair of a table, or None if it does not exist."""
        return self._tables.get(table_name)

    def table_exists(self, table_name: str) -> bool:
        return table_name in self._tables

    def push_value(self, table_name: str, row: Iterable[Any]) -> int:
        """Append a row and return its 1-based row id."""
        _, rows = self._table(table_name)
        rows.append(list(row))
        return len(rows)

    def update_table(self, table_name: str, updates: Any, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Set columns on matching rows and return how many rows matched."""
        return len(self._update_rows(table_name, updates, where_clause))

    def delete_table(self, table_name: str, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Delete matching rows (all rows without a condition) and return how many went."""
        return self._delete_rows(table_name, where_clause)

    def remove_table(self, table_name: str) -> bool:
        """Remove a table; return whether it existed."""
        return self._tables.pop(table_name, None) is not None

    def add_column(self, table_name: str, column_def: ColumnDef) -> None:
        """Append a column, filling existing rows with the type's default value."""
        columns, rows = self._table(table_name)
        columns.append(copy.deepcopy(column_def))
        filler = default_value(column_def.data_type)
        for row in rows:
            row.append(copy.deepcopy(filler))

    def _existing_column(self, table_name: str, column_name: str) -> tuple[int, Table]:
        table = self._table(table_name)
        idx = _column_index(table[0], column_name)
        if idx is None:
            raise ColumnNotFoundError(column_name)
        return idx, table

    def drop_column(self, table_name: str, column_name: str) -> None:
        idx, (columns, rows) = self._existing_column(table_name, column_name)
        del columns[idx]
        for row in rows:
            del row[idx]

    def rename_column(self, table_name: str, old_name: str, new_name: str) -> None:
        idx, (columns, _) = self._existing_column(table_name, old_name)
        columns[idx].name = new_name

    def drop_table(self, table_name: str) -> None:
        self._tables.pop(table_name, None)

    def clear(self) -> None:
        """Remove every table."""
        self._tables.clear()

    def all_tables(self) -> Mapping[str, Table]:
        """A read-only view of every table."""
        return MappingProxyType(self._tables)

    def get_schema(self, table_name: str) -> Optional[list[ColumnDef]]:
        table = self.get_table(table_name)
        return None if table is None else table[0]

    def get_fts_columns(self, table_name: str) -> list[str]:
        """Names of the table's full-text columns; empty if the table does not exist."""
        schema = self.get_schema(table_name) or []
        return [column.name for column in schema if column.data_type is DataType.TSVECTOR]

    def restore_from(self, state: "Storage") -> None:
        """Replace every table with copies of the tables in another store."""
        self.clear()
        for name, (columns, rows) in state.all_tables().items():
            self.insert_table(name, columns, rows)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tables={sorted(self._tables)!r})"


class TableStorage(Storage):
    """A plain snapshot of tables, used for transaction state and savepoints."""

    def copy(self) -> "TableStorage":
        """Return an independent deep copy."""
        duplicate = TableStorage()
        duplicate._tables = copy.deepcopy(self._tables)
        return duplicate

    def restore_from(self, state: Storage) -> None:
        self._tables = copy.deepcopy(dict(state.all_tables()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableStorage):
            return NotImplemented
        return self._tables == other._tables

    __hash__ = None  # type: ignore[assignment]