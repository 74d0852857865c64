"""MERGE statement parser for lookup table seed data.

Seed files declare lookup rows as a bulk upsert:

    MERGE INTO dbo.ProjectStage AS Target
    USING (VALUES
        (1, 'Proposal', 'Proposal', 10),
        (2, 'PlanningDesign', 'Planning/Design', 20)
    )
    AS Source (ProjectStageID, ProjectStageName, ProjectStageDisplayName, SortOrder)
    ON Target.ProjectStageID = Source.ProjectStageID
    ...

Only the target name, the literal rows and the source column list are read;
the WHEN MATCHED / NOT MATCHED clauses are ignored.
"""
from __future__ import annotations

import logging
import re

from .errors import (
    EmptySeedError,
    SchemaParseError,
    SeedClauseOrderError,
    SeedColumnsNotFoundError,
    SeedHeaderNotFoundError,
    SeedValuesNotFoundError,
)
from .models import LookupRow, LookupTableData
from .tokenizer import (
    find_closing_paren,
    iter_paren_groups,
    mask_comments,
    search_outside_quotes,
    split_row_values,
)

logger = logging.getLogger(__name__)

# MERGE INTO [schema].[TableName] or MERGE schema.TableName
MERGE_TARGET_PATTERN = re.compile(
    r'MERGE\s+(?:INTO\s+)?\[?(?P<schema>\w+)\]?\.\[?(?P<table>\w+)\]?',
    re.IGNORECASE
)

# AS Source (col1, col2, ...)
SOURCE_COLUMNS_PATTERN = re.compile(
    r'\bAS\s+\[?(?P<alias>\w+)\]?\s*\(\s*(?P<columns>[^)]*)\)',
    re.IGNORECASE
)

# USING (VALUES
VALUES_START_PATTERN = re.compile(r'\bUSING\s*(?P<open>\()\s*VALUES\b', re.IGNORECASE)


def parse_merge_statement(sql: str) -> LookupTableData | None:
    """Parse a seed MERGE statement.

    Args:
        sql: Contents of a lookup table seed file

    Returns:
        LookupTableData, or None if the text holds no parseable seed data
    """
    try:
        return parse_merge_statement_or_raise(sql)
    except SchemaParseError as e:
        logger.debug(f"MERGE not parsed: {e}")
        return None


def parse_merge_statement_or_raise(sql: str) -> LookupTableData:
    """Parse a seed MERGE statement, raising SchemaParseError on failure.

    Rows keep their source order. Rows whose value count differs from the
    column list are kept as-is; consumers decide what to do with them.

    Raises:
        SeedHeaderNotFoundError: No `MERGE INTO schema.table` header
        SeedColumnsNotFoundError: No `AS Alias (col, ...)` source column list
        SeedValuesNotFoundError: No `USING (VALUES` clause
        SeedClauseOrderError: The column list appears before the rows
        EmptySeedError: No non-empty rows were found
    """
    if not sql or not sql.strip():
        raise SeedHeaderNotFoundError()

    # Comments may hold apostrophes or commented-out rows
    sql = mask_comments(sql)

    target = MERGE_TARGET_PATTERN.search(sql)
    if not target:
        raise SeedHeaderNotFoundError()

    schema_name = target.group("schema")
    table_name = target.group("table")

    columns_match = search_outside_quotes(SOURCE_COLUMNS_PATTERN, sql, target.end())
    if not columns_match:
        raise SeedColumnsNotFoundError(f"no source column list for [{schema_name}].[{table_name}]")

    values_match = search_outside_quotes(VALUES_START_PATTERN, sql, target.end())
    if not values_match:
        raise SeedValuesNotFoundError(f"no VALUES clause for [{schema_name}].[{table_name}]")

    if columns_match.start() < values_match.end():
        raise SeedClauseOrderError(
            f"column list precedes VALUES in [{schema_name}].[{table_name}]"
        )

    # Casts inside the rows (CAST(x AS decimal(5,2))) look like a column list,
    # so prefer the first candidate after the USING (...) group closes.
    using_end = find_closing_paren(sql, values_match.start("open") + 1)
    if using_end >= 0 and columns_match.start() < using_end:
        after_using = search_outside_quotes(SOURCE_COLUMNS_PATTERN, sql, using_end)
        if after_using:
            columns_match = after_using

    column_names = _split_column_names(columns_match.group("columns"))
    if not column_names:
        raise SeedColumnsNotFoundError(f"empty source column list for [{schema_name}].[{table_name}]")

    rows_region = sql[values_match.end():columns_match.start()]
    rows = _parse_value_rows(rows_region)
    if not rows:
        raise EmptySeedError(f"no rows in [{schema_name}].[{table_name}]")

    return LookupTableData(
        schema_name=schema_name,
        table_name=table_name,
        column_names=tuple(column_names),
        rows=tuple(rows),
    )


def _split_column_names(columns: str) -> list[str]:
    names = [c.strip().strip('[]"`').strip() for c in columns.split(",")]
    return [name for name in names if name]


def _parse_value_rows(region: str) -> list[LookupRow]:
    """Turn each top-level parenthesized group in the VALUES region into a row."""
    rows = []
    for group in iter_paren_groups(region):
        values = split_row_values(group)
        if not values:
            logger.debug("Dropping empty VALUES row")
            continue
        rows.append(LookupRow(values=tuple(values)))
    return rows
