"""Column definitions, data types and the errors raised by storage."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ReefDBError(Exception):
    """Base class for every database error."""


class TableNotFoundError(ReefDBError, LookupError):
    """Raised when a named table does not exist."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table not found: {table_name}")
        self.table_name = table_name


class ColumnNotFoundError(ReefDBError, LookupError):
    """Raised when a named column does not exist in a table."""

    def __init__(self, column_name: str) -> None:
        super().__init__(f"Column not found: {column_name}")
        self.column_name = column_name


class ConstraintViolationError(ReefDBError):
    """Raised when a row breaks a column constraint."""

    def __init__(self, message: str, column_name: str) -> None:
        super().__init__(message)
        self.column_name = column_name


class DataType(enum.Enum):
    """Types a column may hold."""

    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    TEXT = "TEXT"
    DATE = "DATE"
    TIMESTAMP = "TIMESTAMP"
    TSVECTOR = "TSVECTOR"
    NULL = "NULL"


class Constraint(enum.Enum):
    """Constraints a column may carry."""

    PRIMARY_KEY = "PRIMARY KEY"
    NOT_NULL = "NOT NULL"
    UNIQUE = "UNIQUE"


@dataclass
class ColumnDef:
    """A column's name, type and constraints."""

    name: str
    data_type: DataType
    constraints: list[Constraint] = field(default_factory=list)


_DEFAULTS: dict[DataType, Any] = {
    DataType.INTEGER: 0,
    DataType.FLOAT: 0.0,
    DataType.BOOLEAN: False,
    DataType.TEXT: "",
    DataType.DATE: "1970-01-01",
    DataType.TIMESTAMP: "1970-01-01 00:00:00",
    DataType.TSVECTOR: "",
    DataType.NULL: None,
}


def default_value(data_type: DataType) -> Any:
    """Return the value given to existing rows when a column of this type is added."""
    return _DEFAULTS[data_type]