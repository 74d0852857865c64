"""CREATE TABLE parser.

Extracts table and column definitions from SQL Server style CREATE TABLE
scripts. The parser is lenient: it locates the `CREATE TABLE schema.table (`
header, scans forward to the balancing parenthesis, and then reads the
column block line by line with regular expressions.
"""
from __future__ import annotations

import logging
import re

from .errors import (
    EmptyTableError,
    SchemaParseError,
    TableHeaderNotFoundError,
    UnbalancedParenthesesError,
)
from .models import MAX_LENGTH_UNBOUNDED, Column, Table
from .tokenizer import find_closing_paren, mask_comments

logger = logging.getLogger(__name__)

# CREATE TABLE [schema].[TableName] ( or CREATE TABLE schema.TableName (
TABLE_HEADER_PATTERN = re.compile(
    r'CREATE\s+TABLE\s+\[?(?P<schema>\w+)\]?\.\[?(?P<table>\w+)\]?\s*\(',
    re.IGNORECASE
)

# [ColumnName] [type](length) NOT NULL CONSTRAINT ... PRIMARY KEY, IDENTITY(1,1)
COLUMN_PATTERN = re.compile(
    r'^\s*\[?(?P<name>\w+)\]?\s+\[?(?P<type>\w+)\]?'
    r'(?:\s*\(\s*(?P<length>\d+|max)\s*(?:,\s*\d+\s*)?\))?'
    r'(?P<rest>.*)$',
    re.IGNORECASE
)

NOT_NULL_PATTERN = re.compile(r'\bNOT\s+NULL\b', re.IGNORECASE)

IDENTITY_PATTERN = re.compile(r'\bIDENTITY\s*\(\s*\d+\s*,\s*\d+\s*\)', re.IGNORECASE)

INLINE_PK_PATTERN = re.compile(r'\bPRIMARY\s+KEY\b', re.IGNORECASE)

# CONSTRAINT [PK_Name] PRIMARY KEY CLUSTERED ([Column] ASC)
STANDALONE_PK_PATTERN = re.compile(
    r'CONSTRAINT\s+\[?\w+\]?\s+PRIMARY\s+KEY\s*(?:CLUSTERED|NONCLUSTERED)?\s*'
    r'\(\s*\[?(?P<column>\w+)\]?\s*(?:ASC|DESC)?\s*\)',
    re.IGNORECASE
)

# REFERENCES [dbo].[TableName](Column) or REFERENCES TableName(Column)
FOREIGN_KEY_PATTERN = re.compile(
    r'\bREFERENCES\s+(?:\[?\w+\]?\.)?\[?(?P<table>\w+)\]?\s*\(',
    re.IGNORECASE
)

# Words that show a "column" match is really constraint syntax. ASC/DESC
# appear on the column lines of a multi-line PRIMARY KEY (...) block.
CONSTRAINT_KEYWORDS = frozenset({
    "CONSTRAINT", "PRIMARY", "FOREIGN", "UNIQUE", "CHECK",
    "DEFAULT", "INDEX", "REFERENCES", "ASC", "DESC",
})


def parse_create_table(sql: str) -> Table | None:
    """Parse a CREATE TABLE statement.

    Args:
        sql: Contents of a table definition file

    Returns:
        Table, or None if the text holds no parseable table
    """
    try:
        return parse_create_table_or_raise(sql)
    except SchemaParseError as e:
        logger.debug(f"CREATE TABLE not parsed: {e}")
        return None


def parse_create_table_or_raise(sql: str) -> Table:
    """Parse a CREATE TABLE statement, raising SchemaParseError on failure.

    Column order in the result is declaration order.

    Raises:
        TableHeaderNotFoundError: No `CREATE TABLE schema.table (` header
        UnbalancedParenthesesError: The column block never closes
        EmptyTableError: No column definitions were found
    """
    if not sql or not sql.strip():
        raise TableHeaderNotFoundError()

    # Commented-out columns and trailing notes are not part of the table
    sql = mask_comments(sql)

    header = TABLE_HEADER_PATTERN.search(sql)
    if not header:
        raise TableHeaderNotFoundError()

    schema_name = header.group("schema")
    table_name = header.group("table")

    block_start = header.end()
    block_end = find_closing_paren(sql, block_start)
    if block_end < 0:
        raise UnbalancedParenthesesError(
            f"parentheses never balance in [{schema_name}].[{table_name}]"
        )

    columns, primary_key = _parse_column_block(sql[block_start:block_end])

    if not columns:
        raise EmptyTableError(f"no columns in [{schema_name}].[{table_name}]")

    if primary_key is None:
        # Constraints can sit outside the simple one-line-per-item layout
        pk_match = STANDALONE_PK_PATTERN.search(sql)
        if pk_match:
            primary_key = pk_match.group("column")

    return Table(
        schema_name=schema_name,
        table_name=table_name,
        columns=tuple(columns),
        primary_key_column=primary_key,
    )


def _parse_column_block(block: str) -> tuple[list[Column], str | None]:
    """Read column definitions and a primary key from the body of CREATE TABLE."""
    columns: list[Column] = []
    primary_key: str | None = None

    for line in re.split(r'[\r\n]+', block):
        line = line.strip()
        if not line:
            continue

        if line.upper().startswith("CONSTRAINT") and not _looks_like_column(line):
            pk_match = STANDALONE_PK_PATTERN.search(line)
            if pk_match:
                primary_key = pk_match.group("column")
            continue

        column = _parse_column_line(line)
        if column is None:
            continue

        columns.append(column)
        if column.is_primary_key:
            primary_key = column.name

    return columns, primary_key


def _looks_like_column(line: str) -> bool:
    match = COLUMN_PATTERN.match(line)
    if not match:
        return False
    return not (_is_constraint_keyword(match.group("name")) or _is_constraint_keyword(match.group("type")))


def _parse_column_line(line: str) -> Column | None:
    """Parse one column definition line; None for anything that is not a column."""
    match = COLUMN_PATTERN.match(line)
    if not match:
        return None

    name = match.group("name")
    sql_type = match.group("type")

    if _is_constraint_keyword(name) or _is_constraint_keyword(sql_type):
        return None

    rest = match.group("rest").strip()
    if rest.endswith(","):
        rest = rest[:-1].rstrip()

    fk_match = FOREIGN_KEY_PATTERN.search(rest)

    return Column(
        name=name,
        sql_type=sql_type,
        nullable=not NOT_NULL_PATTERN.search(rest),
        max_length=_parse_length(match.group("length")),
        is_identity=bool(IDENTITY_PATTERN.search(rest)),
        is_primary_key=bool(INLINE_PK_PATTERN.search(rest)),
        references_table=fk_match.group("table") if fk_match else None,
    )


def _parse_length(length: str | None) -> int | None:
    if not length:
        return None
    if length.lower() == "max":
        return MAX_LENGTH_UNBOUNDED
    return int(length)


def _is_constraint_keyword(word: str) -> bool:
    return word.upper() in CONSTRAINT_KEYWORDS
