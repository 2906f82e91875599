import pytest

from reefdb.schema import (
    ColumnDef,
    ColumnNotFoundError,
    Constraint,
    ConstraintViolationError,
    DataType,
    ReefDBError,
    TableNotFoundError,
    default_value,
)


@pytest.mark.parametrize(
    "data_type, expected",
    [
        (DataType.INTEGER, 0),
        (DataType.FLOAT, 0.0),
        (DataType.BOOLEAN, False),
        (DataType.TEXT, ""),
        (DataType.DATE, "1970-01-01"),
        (DataType.TIMESTAMP, "1970-01-01 00:00:00"),
        (DataType.TSVECTOR, ""),
        (DataType.NULL, None),
    ],
)
def test_default_values(data_type, expected):
    value = default_value(data_type)
    assert value == expected
    assert type(value) is type(expected)


def test_every_type_has_a_default():
    defaults = {data_type: default_value(data_type) for data_type in DataType}
    assert set(defaults) == set(DataType)


def test_column_def_constraints_are_independent():
    first = ColumnDef("a", DataType.TEXT)
    second = ColumnDef("b", DataType.TEXT)
    first.constraints.append(Constraint.UNIQUE)
    assert second.constraints == []
    assert first.constraints == [Constraint.UNIQUE]


def test_column_def_equality():
    left = ColumnDef("id", DataType.INTEGER, [Constraint.PRIMARY_KEY])
    right = ColumnDef("id", DataType.INTEGER, [Constraint.PRIMARY_KEY])
    assert left == right
    assert left != ColumnDef("id", DataType.TEXT, [Constraint.PRIMARY_KEY])


def test_table_not_found_carries_name():
    error = TableNotFoundError("users")
    assert isinstance(error, ReefDBError)
    assert error.table_name == "users"
    assert "users" in str(error)


def test_column_not_found_carries_name():
    error = ColumnNotFoundError("email")
    assert isinstance(error, ReefDBError)
    assert isinstance(error, LookupError)
    assert error.column_name == "email"


def test_constraint_violation_carries_column():
    error = ConstraintViolationError("NOT NULL constraint violation for column name", "name")
    assert isinstance(error, ReefDBError)
    assert error.column_name == "name"
    assert str(error) == "NOT NULL constraint violation for column name"