# reefdb

The storage and durability layer of a small relational database. It has no third-party dependencies.

- **Table storage** (`reefdb.storage`). Several backends share the `Storage` interface:
  - `InMemoryStorage` checks column constraints.
  - `OnDiskStorage` saves its tables to a file after each change.
  - `MmapStorage` saves its tables through a memory-mapped file.
  - `TableStorage` holds a plain snapshot of tables.
- **Transaction state** (`reefdb.transaction.state`). `TransactionStateHandler` tracks the `TransactionState` and `IsolationLevel` of one transaction.
- **Savepoints** (`reefdb.transaction.savepoints`). `SavepointHandler` stores named snapshots of tables. You can roll back to a savepoint or release it.
- **Write-ahead log** (`reefdb.wal`). `WriteAheadLog` appends `WALEntry` records, each with a length prefix. It also reads the records back and truncates the log.

## Installation

```
pip install .
```

## Schema and errors

`reefdb.schema` defines the following:

- `DataType`: `INTEGER`, `FLOAT`, `BOOLEAN`, `TEXT`, `DATE`, `TIMESTAMP`, `TSVECTOR` or `NULL`.
- `Constraint`: `PRIMARY_KEY`, `NOT_NULL` or `UNIQUE`.
- `ColumnDef(name, data_type, constraints)`.
- `default_value(data_type)`: the value that existing rows receive when a column of that type is added.

Every error derives from `ReefDBError`. Storage raises `TableNotFoundError`, `ColumnNotFoundError` and `ConstraintViolationError`.

## Storage

```python
from reefdb.schema import ColumnDef, Constraint, DataType
from reefdb.storage.memory import InMemoryStorage

storage = InMemoryStorage()
storage.insert_table(
    "users",
    [
        ColumnDef("id", DataType.INTEGER, [Constraint.PRIMARY_KEY]),
        ColumnDef("name", DataType.TEXT, [Constraint.NOT_NULL]),
    ],
    [],
)
storage.push_value("users", [1, "Alice"])                   # -> 1, the 1-based row id
storage.update_table("users", [("name", "Alicia")], ("id", 1))  # -> 1 row matched
storage.delete_table("users", ("id", 1))                    # -> 1 row deleted
```

A condition is a `(column, value)` pair that tests for equality. Updates can be given as a list of `(column, value)` pairs or as a mapping. Two values are equal only if they have the same type and the same content.

The shared interface also provides these methods:

- `get_table` returns the live `(columns, rows)` pair, or `None`.
- `table_exists`, `remove_table` and `drop_table`.
- `add_column`, `drop_column` and `rename_column`.
- `clear`, `all_tables`, `get_schema` and `get_fts_columns`.
- `restore_from(other_storage)`.

### Differences between backends

- **`InMemoryStorage`** checks UNIQUE, PRIMARY KEY and NOT NULL on `push_value`. For NOT NULL, only an empty string counts as a violation. `update_table` raises if the table or the condition column is missing.
- **`OnDiskStorage(path)`** applies the same checks and writes the tables to `path` as JSON. Row values must therefore be JSON-serialisable. Opening the same path again loads the saved tables. A file that cannot be decoded loads as empty.
  - `update_table` returns the 1-based id of the last row it changed, or 0 if it changed none.
  - `delete_table` removes no rows. It returns the number of rows in the table.
  - `clear()` deletes **every regular file in the directory that contains the storage file**, not just the storage file.
  - `save()` writes the file. `sync()` writes the file and also forces it to disk.
- **`MmapStorage(path)`** does not check constraints. When it opens an existing file, it first resizes that file to 1 MiB. Some methods behave differently:
  - `delete_table` without a condition deletes nothing.
  - A missing table or an unknown condition column matches no rows.
  - A new `TSVECTOR` column is filled with an empty list.
- **`TableStorage`** adds `copy()`, which returns an independent deep copy. Two snapshots compare equal when their tables are equal.

## Transaction state

```python
from reefdb.transaction.state import (
    IsolationLevel, TransactionStateHandler, TransactionNotActiveError,
)

handler = TransactionStateHandler(1, IsolationLevel.SERIALIZABLE)
handler.commit()             # state is now TransactionState.COMMITTED
try:
    handler.rollback()
except TransactionNotActiveError:
    pass
```

`IsolationLevel.default()` returns `READ_COMMITTED`. Each handler records its `start_timestamp` in epoch seconds.

## Savepoints

```python
from reefdb.storage.base import TableStorage
from reefdb.transaction.savepoints import SavepointHandler

savepoints = SavepointHandler()
savepoints.create_savepoint("sp1", TableStorage())
savepoints.create_savepoint("sp2", TableStorage())
snapshot, removed = savepoints.rollback_to_savepoint("sp1")   # removed == ["sp2"]
savepoints.release_savepoint("sp1")
```

Savepoints store a copy of the tables they are given. Rolling back to a savepoint discards every savepoint whose *name sorts after it*, and returns the names that were discarded.

`savepoints` is a read-only mapping of savepoints by name. The handler raises these errors:

- `SavepointExistsError` when the name is already in use.
- `SavepointNotFoundError` when no savepoint has that name.
- `SavepointNotActiveError` when the savepoint is no longer active.

## Write-ahead log

```python
from reefdb.wal.entry import WALEntry, WALOperation
from reefdb.wal.log import WriteAheadLog

with WriteAheadLog("db.wal") as wal:
    wal.append_entry(WALEntry(1, WALOperation.INSERT, "users", b"\x01"))
    for entry in wal.read_entries():
        print(entry.transaction_id, entry.operation)
```

The log opens the file in append mode and continues after any records that are already in it.

- By default (`sync_on_append=True`), every append and every truncate is forced to disk.
- `sync()` forces the log to disk on demand.
- `truncate()` discards every record.
- `WriteAheadLog.in_memory()` keeps the log in an anonymous temporary file, which disappears when the log is closed.
- Failures raise `WALError`.

`WALEntry.to_bytes()` and `WALEntry.from_bytes()` encode a record and decode it again.

## What this package does not do

This package provides storage, state and logging building blocks only. It has no SQL parser, no query execution, no joins and no indexes. It also has no lock manager, deadlock detection or multi-version concurrency control. Nothing replays the write-ahead log into storage. There is no command-line tool and no server.

## Running the tests

```
pip install .[test]
pytest
```