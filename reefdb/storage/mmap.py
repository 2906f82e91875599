"""Storage that keeps tables in memory and writes them through a memory-mapped file."""

from __future__ import annotations

import contextlib
import copy
import mmap
import os
from pathlib import Path
from typing import Any, Iterable, Optional

from reefdb.schema import ColumnDef, DataType, default_value
from reefdb.storage.base import Storage, _column_index, _same_value
from reefdb.storage.disk import _decode_tables, _encode_tables

_INITIAL_SIZE = 1024 * 1024


def _mmap_default(data_type: DataType) -> Any:
    """Fill value for a new column; a full-text column starts as an empty token list."""
    if data_type is DataType.TSVECTOR:
        return []
    return default_value(data_type)


class MmapStorage(Storage):
    """Tables persisted to a file that is written through a memory map.

    Opening an existing file resizes it to 1 MiB before reading; contents that
    cannot be decoded are treated as holding no tables. Rows are not checked
    against column constraints.
    """

    def __init__(self, file_path: str | os.PathLike[str]) -> None:
        super().__init__()
        self.file_path = os.fspath(file_path)
        if Path(self.file_path).exists():
            self._tables = self._load()

    def _load(self) -> dict:
        with open(self.file_path, "r+b") as handle:
            handle.truncate(_INITIAL_SIZE)
            with mmap.mmap(handle.fileno(), _INITIAL_SIZE) as mapped:
                raw = bytes(mapped)
        payload = raw.rstrip(b"\0")
        if not payload:
            return {}
        try:
            return _decode_tables(payload.decode("utf-8"))
        except (ValueError, KeyError, TypeError):
            return {}

    def save(self) -> None:
        """Write every table to the file through a memory map and flush it to disk."""
        data = _encode_tables(self._tables).encode("utf-8")
        flags = os.O_RDWR | os.O_CREAT | getattr(os, "O_BINARY", 0)
        fd = os.open(self.file_path, flags, 0o644)
        with os.fdopen(fd, "r+b") as handle:
            handle.truncate(len(data))
            with mmap.mmap(handle.fileno(), len(data)) as mapped:
                mapped[:] = data
                mapped.flush()

    def _persist(self) -> None:
        with contextlib.suppress(OSError):
            self.save()

    def insert_table(self, table_name: str, columns: Iterable[ColumnDef], rows: Iterable[Iterable[Any]] = ()) -> None:
        super().insert_table(table_name, columns, rows)
        self._persist()

    def push_value(self, table_name: str, row: Iterable[Any]) -> int:
        """Append a row without constraint checks and return the table's new length."""
        row_id = super().push_value(table_name, row)
        self._persist()
        return row_id

    def update_table(self, table_name: str, updates: Any, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Set columns on matching rows and return how many matched.

        A missing table or condition column matches nothing; unknown update columns are skipped.
        """
        if not self.table_exists(table_name):
            return 0
        updated = super().update_table(table_name, updates, where_clause)
        self._persist()
        return updated

    def delete_table(self, table_name: str, where_clause: Optional[tuple[str, Any]] = None) -> int:
        """Delete rows equal to the condition and return how many went.

        Without a condition, or with an unknown condition column, nothing is deleted.
        """
        table = self.get_table(table_name)
        if table is None:
            return 0
        columns, rows = table
        deleted = 0
        if where_clause is not None:
            column, value = where_clause
            idx = _column_index(columns, column)
            if idx is not None:
                before = len(rows)
                rows[:] = [row for row in rows if not _same_value(row[idx], value)]
                deleted = before - len(rows)
        self._persist()
        return deleted

    def remove_table(self, table_name: str) -> bool:
        existed = super().remove_table(table_name)
        if existed:
            self._persist()
        return existed

    def add_column(self, table_name: str, column_def: ColumnDef) -> None:
        """Append a column, filling existing rows with the type's default value."""
        columns, rows = self._table(table_name)
        filler = _mmap_default(column_def.data_type)
        columns.append(copy.deepcopy(column_def))
        for row in rows:
            row.append(copy.deepcopy(filler))
        self._persist()

    def drop_column(self, table_name: str, column_name: str) -> None:
        super().drop_column(table_name, column_name)
        self._persist()

    def rename_column(self, table_name: str, old_name: str, new_name: str) -> None:
        super().rename_column(table_name, old_name, new_name)
        self._persist()

    def drop_table(self, table_name: str) -> None:
        self._tables.pop(table_name, None)
        self._persist()

    def clear(self) -> None:
        """Remove every table and write the empty state to the file."""
        self._tables.clear()
        self._persist()