"""Value types produced by the schema parsers.

All models are frozen dataclasses holding tuples, so two parses of the same
text compare equal and can be hashed or cached by the caller.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

# Length recorded for `varchar(max)` style columns
MAX_LENGTH_UNBOUNDED = -1

NULL_MARKER = "NULL"

STRING_SQL_TYPES = frozenset({"varchar", "nvarchar", "char", "nchar"})

_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")


@dataclass(frozen=True)
class Column:
    """Column definition from CREATE TABLE."""
    name: str
    sql_type: str
    nullable: bool = True
    max_length: int | None = None
    is_identity: bool = False
    is_primary_key: bool = False
    references_table: str | None = None  # explicit REFERENCES target, unqualified

    @property
    def is_unbounded(self) -> bool:
        return self.max_length == MAX_LENGTH_UNBOUNDED


@dataclass(frozen=True)
class Table:
    """Parsed CREATE TABLE statement."""
    schema_name: str
    table_name: str
    columns: tuple[Column, ...]
    primary_key_column: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    @property
    def primary_key_name(self) -> str:
        """Primary key column name, falling back to the `{TableName}ID` convention."""
        return self.primary_key_column or f"{self.table_name}ID"

    def column(self, name: str) -> Column | None:
        """Find a column by name (case-insensitive)."""
        wanted = name.lower()
        for col in self.columns:
            if col.name.lower() == wanted:
                return col
        return None

    def primary_key_definition(self) -> Column | None:
        if self.primary_key_column is None:
            return None
        return self.column(self.primary_key_column)

    def string_columns_with_lengths(self) -> Iterator[tuple[str, int]]:
        """Yield (name, length) for bounded character columns in declaration order."""
        for col in self.columns:
            if col.sql_type.lower() not in STRING_SQL_TYPES:
                continue
            if col.max_length is not None and col.max_length > 0:
                yield col.name, col.max_length


@dataclass(frozen=True)
class LookupRow:
    """One parenthesized row of a seed statement's VALUES clause."""
    values: tuple[str, ...]

    def value(self, index: int) -> str | None:
        if index < 0 or index >= len(self.values):
            return None
        return self.values[index]

    def is_null(self, index: int) -> bool:
        value = self.value(index)
        return value is not None and value.upper() == NULL_MARKER

    def int_value(self, index: int) -> int | None:
        """Integer at `index`, or None when missing, NULL or not an integer."""
        value = self.value(index)
        if value is None or not _INTEGER.match(value):
            return None
        return int(value)


@dataclass(frozen=True)
class LookupTableData:
    """Parsed seed (MERGE) statement for a lookup table."""
    schema_name: str
    table_name: str
    column_names: tuple[str, ...]
    rows: tuple[LookupRow, ...] = field(default_factory=tuple)

    def column_index(self, column_name: str) -> int:
        """Index of a column by name (case-insensitive), or -1."""
        wanted = column_name.lower()
        for i, name in enumerate(self.column_names):
            if name.lower() == wanted:
                return i
        return -1

    def column_index_by_suffix(self, suffix: str) -> int:
        """Index of the first column ending with `suffix` (case-insensitive), or -1."""
        wanted = suffix.lower()
        for i, name in enumerate(self.column_names):
            if name.lower().endswith(wanted):
                return i
        return -1

    def matching_rows(self) -> tuple[LookupRow, ...]:
        """Rows whose value count equals the column count."""
        width = len(self.column_names)
        return tuple(row for row in self.rows if len(row.values) == width)

    def mismatched_rows(self) -> tuple[LookupRow, ...]:
        width = len(self.column_names)
        return tuple(row for row in self.rows if len(row.values) != width)
