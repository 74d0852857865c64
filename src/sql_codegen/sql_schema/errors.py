"""Parse failures raised by the schema parsers."""
from __future__ import annotations


class SchemaParseError(Exception):
    """A statement could not be turned into a model."""

    reason = "malformed input"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class TableHeaderNotFoundError(SchemaParseError):
    reason = "no table found"


class UnbalancedParenthesesError(SchemaParseError):
    reason = "parentheses never balance"


class EmptyTableError(SchemaParseError):
    reason = "empty table"


class SeedHeaderNotFoundError(SchemaParseError):
    reason = "no MERGE target found"


class SeedColumnsNotFoundError(SchemaParseError):
    reason = "no source column list found"


class SeedValuesNotFoundError(SchemaParseError):
    reason = "no VALUES clause found"


class SeedClauseOrderError(SchemaParseError):
    reason = "source column list precedes VALUES"


class EmptySeedError(SchemaParseError):
    reason = "no rows"
