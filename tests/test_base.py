import pytest

from reefdb.schema import (
    ColumnDef,
    ColumnNotFoundError,
    Constraint,
    DataType,
    TableNotFoundError,
    default_value,
)
from reefdb.storage.base import Storage, TableStorage

COLUMNS = [
    ColumnDef("id", DataType.INTEGER, [Constraint.PRIMARY_KEY]),
    ColumnDef("name", DataType.TEXT),
    ColumnDef("age", DataType.INTEGER),
]
ROWS = [[1, "John", 20], [2, "Jane", 25]]


@pytest.fixture
def storage():
    store = TableStorage()
    store.insert_table("users", COLUMNS, ROWS)
    return store


def test_insert_and_get_round_trip(storage):
    columns, rows = storage.get_table("users")
    assert columns == COLUMNS
    assert rows == ROWS
    assert storage.table_exists("users")


def test_insert_copies_input():
    source_rows = [list(row) for row in ROWS]
    store = TableStorage()
    store.insert_table("users", COLUMNS, source_rows)
    source_rows[0][1] = "Changed"
    assert store.get_table("users")[1] == ROWS


def test_missing_table_lookups(storage):
    assert storage.get_table("missing") is None
    assert storage.get_schema("missing") is None
    assert not storage.table_exists("missing")


def test_push_value_returns_row_id(storage):
    new_row = [3, "Bob", 30]
    rowid = storage.push_value("users", new_row)
    rows = storage.get_table("users")[1]
    assert rowid == len(rows)
    assert rows[-1] == new_row


def test_push_value_missing_table(storage):
    with pytest.raises(TableNotFoundError) as info:
        storage.push_value("missing", [1])
    assert info.value.table_name == "missing"


def test_update_with_where(storage):
    count = storage.update_table("users", [("age", 26)], ("name", "Jane"))
    assert count == 1
    assert storage.get_table("users")[1] == [ROWS[0], [2, "Jane", 26]]


def test_update_accepts_mapping(storage):
    storage.update_table("users", {"name": "Janet"}, ("id", 2))
    assert storage.get_table("users")[1][1] == [2, "Janet", 25]


def test_update_without_where_touches_all(storage):
    count = storage.update_table("users", [("age", 40)], None)
    rows = storage.get_table("users")[1]
    assert count == len(ROWS)
    assert all(row[2] == 40 for row in rows)


def test_update_unknown_where_column_matches_nothing(storage):
    assert not storage.update_table("users", [("age", 40)], ("nope", 1))
    assert storage.get_table("users")[1] == ROWS


def test_update_missing_table(storage):
    assert not storage.update_table("missing", [("age", 40)], None)


def test_delete_with_where(storage):
    deleted = storage.delete_table("users", ("name", "John"))
    remaining = storage.get_table("users")[1]
    assert remaining == [ROWS[1]]
    assert deleted == len(ROWS) - len(remaining)


def test_delete_without_where(storage):
    deleted = storage.delete_table("users", None)
    assert deleted == len(ROWS)
    assert storage.get_table("users")[1] == []


def test_delete_unknown_column_and_missing_table(storage):
    assert not storage.delete_table("users", ("nope", 1))
    assert not storage.delete_table("missing", None)
    assert storage.get_table("users")[1] == ROWS


def test_add_column_fills_default(storage):
    storage.add_column("users", ColumnDef("email", DataType.TEXT))
    columns, rows = storage.get_table("users")
    assert columns[-1].name == "email"
    assert all(row[-1] == default_value(DataType.TEXT) for row in rows)
    assert all(len(row) == len(columns) for row in rows)


def test_drop_column(storage):
    storage.drop_column("users", "name")
    columns, rows = storage.get_table("users")
    assert [c.name for c in columns] == ["id", "age"]
    assert rows == [[row[0], row[2]] for row in ROWS]


def test_rename_column(storage):
    storage.rename_column("users", "age", "years")
    assert [c.name for c in storage.get_schema("users")] == ["id", "name", "years"]


@pytest.mark.parametrize(
    "call, error",
    [
        (lambda s: s.add_column("missing", ColumnDef("x", DataType.TEXT)), TableNotFoundError),
        (lambda s: s.drop_column("missing", "x"), TableNotFoundError),
        (lambda s: s.rename_column("missing", "x", "y"), TableNotFoundError),
        (lambda s: s.drop_column("users", "x"), ColumnNotFoundError),
        (lambda s: s.rename_column("users", "x", "y"), ColumnNotFoundError),
    ],
)
def test_alter_errors(storage, call, error):
    with pytest.raises(error):
        call(storage)


def test_fts_columns():
    store = TableStorage()
    store.insert_table(
        "docs",
        [ColumnDef("id", DataType.INTEGER), ColumnDef("body", DataType.TSVECTOR)],
        [],
    )
    assert store.get_fts_columns("docs") == ["body"]
    assert store.get_fts_columns("missing") == []


def test_remove_drop_and_clear(storage):
    assert storage.remove_table("users") is True
    assert storage.remove_table("users") is False
    storage.insert_table("a", COLUMNS, ROWS)
    storage.insert_table("b", COLUMNS, ROWS)
    storage.drop_table("a")
    assert set(storage.all_tables()) == {"b"}
    storage.clear()
    assert dict(storage.all_tables()) == {}


def test_all_tables_is_read_only(storage):
    with pytest.raises(TypeError):
        storage.all_tables()["other"] = ([], [])


def test_copy_is_independent(storage):
    duplicate = storage.copy()
    assert duplicate == storage
    duplicate.push_value("users", [3, "Bob", 30])
    duplicate.rename_column("users", "name", "label")
    assert storage.get_table("users")[1] == ROWS
    assert storage.get_schema("users") == COLUMNS
    assert duplicate != storage


def test_table_storage_restore_from(storage):
    target = TableStorage()
    target.insert_table("other", COLUMNS, [])
    target.restore_from(storage)
    assert target == storage
    target.push_value("users", [3, "Bob", 30])
    assert storage.get_table("users")[1] == ROWS


def test_plain_storage_restore_from(storage):
    plain = Storage()
    plain.insert_table("old", COLUMNS, ROWS)
    plain.restore_from(storage)
    assert set(plain.all_tables()) == {"users"}
    assert plain.get_table("users") == storage.get_table("users")