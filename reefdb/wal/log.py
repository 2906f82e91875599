"""An append-only file of length-prefixed write-ahead log records."""

from __future__ import annotations

import os
import struct
import tempfile
from typing import BinaryIO, Optional

from reefdb.schema import ReefDBError
from reefdb.wal.entry import WALEntry

_LENGTH = struct.Struct("<Q")


class WALError(ReefDBError):
    """Raised when the log cannot be written or read back."""


class WriteAheadLog:
    """Records appended to a file, each preceded by its 8-byte little-endian length.

    With ``sync_on_append`` set (the default) every append and truncate is
    forced to disk.
    """

    def __init__(self, path: str | os.PathLike[str], sync_on_append: bool = True) -> None:
        handle = open(path, "a+b")
        handle.seek(0, os.SEEK_END)
        self._attach(handle, handle.tell(), sync_on_append)

    def _attach(self, handle: BinaryIO, position: int, sync_on_append: bool) -> None:
        self._file = handle
        self._position = position
        self.sync_on_append = sync_on_append

    @classmethod
    def in_memory(cls) -> "WriteAheadLog":
        """A log backed by an anonymous temporary file."""
        log = cls.__new__(cls)
        log._attach(tempfile.TemporaryFile("w+b"), 0, True)
        return log

    def _sync(self, action: str) -> None:
        try:
            os.fsync(self._file.fileno())
        except OSError as exc:
            raise WALError(f"Failed to sync WAL {action}: {exc}") from exc

    def append_entry(self, entry: WALEntry) -> None:
        """Append one record and flush it."""
        payload = entry.to_bytes()
        try:
            self._file.seek(0, os.SEEK_END)
            self._file.write(_LENGTH.pack(len(payload)))
            self._file.write(payload)
            self._file.flush()
        except OSError as exc:
            raise WALError(f"Failed to write WAL entry: {exc}") from exc
        if self.sync_on_append:
            self._sync("to disk")
        self._position += _LENGTH.size + len(payload)

    def _read_exact(self, size: int, what: str) -> bytes:
        try:
            chunk = self._file.read(size)
        except OSError as exc:
            raise WALError(f"Failed to read WAL {what}: {exc}") from exc
        if len(chunk) != size:
            raise WALError(f"Failed to read WAL {what}: unexpected end of file")
        return chunk

    def read_entries(self) -> list[WALEntry]:
        """Read every record from the start of the log."""
        try:
            self._file.seek(0)
        except OSError as exc:
            raise WALError(f"Failed to seek WAL: {exc}") from exc
        entries = []
        position = 0
        while position < self._position:
            (length,) = _LENGTH.unpack(self._read_exact(_LENGTH.size, "entry length"))
            raw = self._read_exact(length, "entry")
            try:
                entries.append(WALEntry.from_bytes(raw))
            except ValueError as exc:
                raise WALError(f"Failed to deserialize WAL entry: {exc}") from exc
            position += _LENGTH.size + length
        return entries

    def truncate(self) -> None:
        """Discard every record."""
        try:
            self._file.truncate(0)
            self._file.seek(0)
        except OSError as exc:
            raise WALError(f"Failed to truncate WAL: {exc}") from exc
        if self.sync_on_append:
            self._sync("after truncate")
        self._position = 0

    def sync(self) -> None:
        """Force the log to disk."""
        try:
            self._file.flush()
        except OSError as exc:
            raise WALError(f"Failed to sync WAL to disk: {exc}") from exc
        self._sync("to disk")

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "WriteAheadLog":
        return self

    def __exit__(self, exc_type: Optional[type], exc: Optional[BaseException], tb: object) -> None:
        self.close()