"""SQL schema parsing.

Provides the build-time view of a SQL Server schema:
- Parse CREATE TABLE files into Table / Column models
- Parse lookup table MERGE seed files into LookupTableData
- Resolve foreign key columns to lookup tables for navigation properties
"""
from __future__ import annotations

from .models import (
    MAX_LENGTH_UNBOUNDED,
    NULL_MARKER,
    Column,
    Table,
    LookupRow,
    LookupTableData,
)

from .errors import SchemaParseError

from .tokenizer import split_row_values

from .parser import (
    parse_create_table,
    parse_create_table_or_raise,
)

from .merge_parser import (
    parse_merge_statement,
    parse_merge_statement_or_raise,
)

from .fk_resolver import (
    NavigationProperty,
    TableNames,
    find_navigation_properties,
    resolve_lookup_reference,
)

__all__ = [
    # Models
    "MAX_LENGTH_UNBOUNDED",
    "NULL_MARKER",
    "Column",
    "Table",
    "LookupRow",
    "LookupTableData",
    # Errors
    "SchemaParseError",
    # Parsers
    "split_row_values",
    "parse_create_table",
    "parse_create_table_or_raise",
    "parse_merge_statement",
    "parse_merge_statement_or_raise",
    # Foreign key resolution
    "NavigationProperty",
    "TableNames",
    "find_navigation_properties",
    "resolve_lookup_reference",
]
