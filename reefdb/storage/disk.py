"""Storage that keeps tables in memory and writes them to a file after every change."""

from __future__ import annotations

import functools
import json
import os
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TypeVar

from reefdb.schema import ColumnDef, Constraint, DataType
from reefdb.storage.base import Table, _matching
from reefdb.storage.memory import InMemoryStorage

_Method = TypeVar("_Method", bound=Callable[..., Any])


def _encode_tables(tables: dict[str, Table]) -> str:
    payload = {
        name: {
            "columns": [
                {
                    "name": column.name,
                    "data_type": column.data_type.value,
                    "constraints": [constraint.value for constraint in column.constraints],
                }
                for column in columns
            ],
            "rows": rows,
        }
        for name, (columns, rows) in tables.items()
    }
    return json.dumps(payload)


def _decode_tables(text: str) -> dict[str, Table]:
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("table file does not hold a mapping")
    tables: dict[str, Table] = {}
    for name, table in payload.items():
        columns = [
            ColumnDef(
                column["name"],
                DataType(column["data_type"]),
                [Constraint(constraint) for constraint in column["constraints"]],
            )
            for column in table["columns"]
        ]
        tables[name] = (columns, [list(row) for row in table["rows"]])
    return tables


def _then_save(method: _Method) -> _Method:
    """Wrap a storage method so the tables are written to the file after it succeeds."""

    @functools.wraps(method)
    def wrapper(self: "OnDiskStorage", *args: Any, **kwargs: Any) -> Any:
        result = method(self, *args, **kwargs)
        self.save()
        return result

    return wrapper  # type: ignore[return-value]


class OnDiskStorage(InMemoryStorage):
    """Constraint-checked tables persisted to a single file.

    A file that exists but cannot be decoded is treated as holding no tables.
    """

    def __init__(self, file_path: str | os.PathLike[str]) -> None:
        super().__init__()
        self.file_path = os.fspath(file_path)
        path = Path(self.file_path)
        if path.exists():
            try:
                self._tables = _decode_tables(path.read_text(encoding="utf-8"))
            except (ValueError, KeyError, TypeError):
                self._tables = {}

    def save(self) -> None:
        """Write every table to the file."""
        Path(self.file_path).write_text(_encode_tables(self._tables), encoding="utf-8")

    def sync(self) -> None:
        """Write every table to the file and force it to disk."""
        with open(self.file_path, "w", encoding="utf-8") as handle:
            handle.write(_encode_tables(self._tables))
            handle.flush()
            os.fsync(handle.fileno())

    @_then_save
    def insert_table(self, table_name: str, columns: Iterable[ColumnDef], rows: Iterable[Iterable[Any]] = ()) -> None:
        super().insert_table(table_name, columns, rows)

    def push_value(self, table_name: str, row: Iterable[Any]) -> int:
        """Validate and append a row, returning its 1-based row id.

        A failure to write the file afterwards is ignored; the row stays in memory.
        """
        row_id = super().push_value(table_name, row)
        try:
            self.sync()
        except OSError:
            pass
        return row_id

    @_then_save
    def update_table(self, table_name: str, updates: Any, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Set columns on matching rows and return the 1-based id of the last row changed (0 if none)."""
        changed = self._update_rows(table_name, updates, where_clause, strict=True, strict_set=True)
        return changed[-1] if changed else 0

    @_then_save
    def delete_table(self, table_name: str, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Return the number of rows in the table and persist it; no rows are removed.

        The condition's column must exist in the table.
        """
        columns, rows = self._table(table_name)
        _matching(columns, rows, where_clause, strict=True)
        return len(rows)

    def remove_table(self, table_name: str) -> bool:
        existed = super().remove_table(table_name)
        if existed:
            self.save()
        return existed

    add_column = _then_save(InMemoryStorage.add_column)
    drop_column = _then_save(InMemoryStorage.drop_column)
    rename_column = _then_save(InMemoryStorage.rename_column)

    def drop_table(self, table_name: str) -> None:
        self.remove_table(table_name)

    def clear(self) -> None:
        """Remove every table and delete every regular file in the storage file's directory."""
        self._tables.clear()
        parent = os.path.dirname(self.file_path)
        if not parent:
            return
        try:
            entries = list(os.scandir(parent))
        except OSError:
            return
        for entry in entries:
            try:
                if entry.is_file(follow_symlinks=False):
                    os.remove(entry.path)
            except OSError:
                continue