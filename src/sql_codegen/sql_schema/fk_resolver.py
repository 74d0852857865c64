"""Foreign key resolution for generated navigation properties.

An integer column named `{Something}ID` is assumed to point at a lookup
table. The target is taken from an explicit REFERENCES clause when that
names a lookup table; otherwise it is inferred from the column name:

    ProjectStageID             -> ProjectStage       (exact)
    AssessedAsTreatmentBMPTypeID -> TreatmentBMPType (property ends with table)
    ChartTypeID                -> IndicatorChartType (table ends with property)
    CommodityConvertedToID     -> Commodity          (property starts with table)

Among several candidate tables the longest name wins. All comparisons are
case-insensitive and the result depends only on the inputs.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import reduce
from typing import Iterable, Sequence

from .models import Column

ID_SUFFIX = "ID"


class MatchPattern(IntEnum):
    """Heuristic name patterns; higher values take precedence on equal length."""
    PREFIX = 1          # property starts with the table name and is longer
    TABLE_SUFFIX = 2    # table name ends with the property
    PROPERTY_SUFFIX = 3  # property ends with the table name
    EXACT = 4


@dataclass(frozen=True)
class Candidate:
    table_name: str
    pattern: MatchPattern


@dataclass(frozen=True)
class NavigationProperty:
    """A resolved foreign key column and the accessor generated for it."""
    property_name: str
    column_name: str
    referenced_table: str
    nullable: bool


class TableNames:
    """Case-insensitive set of table names that remembers each original spelling."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: dict[str, str] = {}
        for name in names:
            self._names.setdefault(name.lower(), name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._names

    def __iter__(self):
        return iter(sorted(self._names.values(), key=str.lower))

    def __len__(self) -> int:
        return len(self._names)

    def canonical(self, name: str) -> str | None:
        return self._names.get(name.lower())


def property_name_for(column_name: str) -> str | None:
    """Strip the `ID` suffix from a column name; None when there is none."""
    if len(column_name) <= len(ID_SUFFIX) or not column_name.upper().endswith(ID_SUFFIX):
        return None
    return column_name[:-len(ID_SUFFIX)]


def match_pattern(property_name: str, table_name: str) -> MatchPattern | None:
    """Which heuristic pattern, if any, links a property name to a table name."""
    prop = property_name.lower()
    table = table_name.lower()

    if prop == table:
        return MatchPattern.EXACT
    if prop.endswith(table):
        return MatchPattern.PROPERTY_SUFFIX
    if table.endswith(prop):
        return MatchPattern.TABLE_SUFFIX
    if len(prop) > len(table) and prop.startswith(table):
        return MatchPattern.PREFIX
    return None


def _prefer(best: Candidate | None, candidate: Candidate) -> Candidate:
    """Keep the longer table name, then the stronger pattern, then the lower name."""
    if best is None:
        return candidate
    best_key = (len(best.table_name), best.pattern)
    candidate_key = (len(candidate.table_name), candidate.pattern)
    if candidate_key != best_key:
        return candidate if candidate_key > best_key else best
    return candidate if candidate.table_name.lower() < best.table_name.lower() else best


def best_heuristic_match(property_name: str, lookup_table_names: Iterable[str]) -> str | None:
    """Fold over every lookup table and return the best heuristic match."""
    candidates = []
    for table_name in lookup_table_names:
        pattern = match_pattern(property_name, table_name)
        if pattern is not None:
            candidates.append(Candidate(table_name, pattern))

    best = reduce(_prefer, candidates, None)
    return best.table_name if best else None


def resolve_lookup_reference(
    column_name: str,
    lookup_table_names: Iterable[str] | TableNames,
    all_table_names: Iterable[str] | TableNames,
    explicit_reference: str | None = None,
) -> str | None:
    """Decide which lookup table a foreign key shaped column references.

    Args:
        column_name: Column name, expected to end in `ID`
        lookup_table_names: Names of tables that have seed data
        all_table_names: Names of every table in the schema
        explicit_reference: Table named by the column's REFERENCES clause

    Returns:
        Lookup table name, or None when no navigation property should be generated
    """
    property_name = property_name_for(column_name)
    if property_name is None:
        return None

    lookups = lookup_table_names if isinstance(lookup_table_names, TableNames) else TableNames(lookup_table_names)
    tables = all_table_names if isinstance(all_table_names, TableNames) else TableNames(all_table_names)

    referenced = lookups.canonical(explicit_reference) if explicit_reference else None
    if referenced is None:
        referenced = best_heuristic_match(property_name, lookups)
    if referenced is None:
        return None

    # The ORM already maps a navigation named after another real table
    if property_name.lower() != referenced.lower() and property_name in tables:
        return None

    return referenced


def find_navigation_properties(
    columns: Sequence[Column],
    primary_key_name: str,
    lookup_table_names: Iterable[str] | TableNames,
    all_table_names: Iterable[str] | TableNames,
) -> list[NavigationProperty]:
    """Navigation properties for a table's columns, in column order.

    The primary key column is never a navigation property.
    """
    lookups = lookup_table_names if isinstance(lookup_table_names, TableNames) else TableNames(lookup_table_names)
    tables = all_table_names if isinstance(all_table_names, TableNames) else TableNames(all_table_names)

    properties = []
    for column in columns:
        if column.name.lower() == primary_key_name.lower():
            continue
        referenced = resolve_lookup_reference(
            column.name, lookups, tables, explicit_reference=column.references_table
        )
        if referenced is None:
            continue
        properties.append(NavigationProperty(
            property_name=column.name[:-len(ID_SUFFIX)],
            column_name=column.name,
            referenced_table=referenced,
            nullable=column.nullable,
        ))
    return properties
