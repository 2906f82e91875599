"""Write-ahead log records and their binary encoding."""

from __future__ import annotations

import enum
import struct
import time
from dataclasses import dataclass, field

_HEADER = struct.Struct("<QdI")
_LENGTH = struct.Struct("<Q")


class WALOperation(enum.Enum):
    """Kinds of change a log record describes."""

    INSERT = 0
    UPDATE = 1
    DELETE = 2
    CREATE_TABLE = 3
    DROP_TABLE = 4
    ALTER_TABLE = 5
    COMMIT = 6
    ROLLBACK = 7


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)
        self._offset = 0

    def take(self, size: int) -> bytes:
        end = self._offset + size
        if end > len(self._view):
            raise ValueError("WAL entry is truncated")
        chunk = bytes(self._view[self._offset:end])
        self._offset = end
        return chunk

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))

    def sized(self) -> bytes:
        (length,) = self.unpack(_LENGTH)
        return self.take(length)

    def finish(self) -> None:
        if self._offset != len(self._view):
            raise ValueError("trailing bytes after WAL entry")


@dataclass
class WALEntry:
    """One log record: which transaction did what to which table, and when."""

    transaction_id: int
    operation: WALOperation
    table_name: str = ""
    data: bytes = b""
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        self.data = bytes(self.data)

    def to_bytes(self) -> bytes:
        """Encode the record: header, then length-prefixed table name and data."""
        name = self.table_name.encode("utf-8")
        return b"".join(
            (
                _HEADER.pack(self.transaction_id, self.timestamp, self.operation.value),
                _LENGTH.pack(len(name)),
                name,
                _LENGTH.pack(len(self.data)),
                self.data,
            )
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "WALEntry":
        """Decode a record; raise ValueError if the bytes are not exactly one record."""
        reader = _Reader(data)
        transaction_id, timestamp, op_code = reader.unpack(_HEADER)
        try:
            operation = WALOperation(op_code)
        except ValueError:
            raise ValueError(f"unknown WAL operation code {op_code}") from None
        try:
            table_name = reader.sized().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("WAL table name is not valid UTF-8") from exc
        payload = reader.sized()
        reader.finish()
        return cls(
            transaction_id=transaction_id,
            operation=operation,
            table_name=table_name,
            data=payload,
            timestamp=timestamp,
        )