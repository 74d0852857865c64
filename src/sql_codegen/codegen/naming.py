"""Identifier and file-name derivations shared by the generators."""
from __future__ import annotations

from typing import Literal

from ..sql_schema.models import LookupRow, LookupTableData, Table

PLACEHOLDER_IDENTIFIER = "Unknown"

IdColumnFallback = Literal["first_column", "none"]


def sanitize_identifier(value: str | None) -> str:
    """Turn a seed value into a C# / TypeScript identifier.

    Every character that is not a letter, digit or underscore is dropped, and
    a leading digit gets an underscore prefix.

    Examples:
        "Planning/Design" -> "PlanningDesign"
        "3D Model"        -> "_3DModel"
        "   "             -> "Unknown"
    """
    if value is None or not value.strip():
        return PLACEHOLDER_IDENTIFIER

    result = "".join(c for c in value if c.isalnum() or c == "_")
    if not result:
        return PLACEHOLDER_IDENTIFIER
    if result[0].isdigit():
        result = "_" + result
    return result


def to_kebab_case(name: str) -> str:
    """PascalCase to kebab-case, one separator per capital letter.

    Runs of capitals are not treated as acronyms:
    "BMPRegistrationSection" -> "b-m-p-registration-section".
    """
    result = []
    for i, char in enumerate(name):
        if char.isupper():
            if i > 0:
                result.append("-")
            result.append(char.lower())
        else:
            result.append(char)
    return "".join(result)


def typescript_file_name(table_name: str) -> str:
    return to_kebab_case(table_name) + "-enum.ts"


def pluralize(name: str) -> str:
    """Collection variable name for a table: Category -> Categories, Status -> Statuses."""
    if name.endswith("y") and not name.endswith(("ay", "ey", "oy", "uy")):
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "ch", "sh")):
        return name + "es"
    return name + "s"


def lower_camel(name: str) -> str:
    if not name:
        return name
    return name[0].lower() + name[1:]


def find_system_name_column(lookup: LookupTableData, table_name: str) -> int:
    """Index of the enum-name column: `{Table}Name`, then any `...Name` that is not `...DisplayName`."""
    exact = lookup.column_index(f"{table_name}Name")
    if exact >= 0:
        return exact

    for i, column in enumerate(lookup.column_names):
        lowered = column.lower()
        if lowered.endswith("name") and not lowered.endswith("displayname"):
            return i

    return lookup.column_index_by_suffix("Name")


def find_display_name_column(lookup: LookupTableData, table_name: str) -> int:
    """Index of `{Table}DisplayName` or any `...DisplayName` column, or -1."""
    exact = lookup.column_index(f"{table_name}DisplayName")
    if exact >= 0:
        return exact
    return lookup.column_index_by_suffix("DisplayName")


def find_id_column(
    lookup: LookupTableData,
    table: Table,
    fallback: IdColumnFallback = "first_column",
) -> int:
    """Index of the seed column holding the primary key value.

    Tries the table's primary key name, then the first `...ID` column. When
    neither exists, `fallback` decides between the first column and -1.
    """
    index = lookup.column_index(table.primary_key_name)
    if index >= 0:
        return index

    index = lookup.column_index_by_suffix("ID")
    if index >= 0:
        return index

    if fallback == "first_column" and lookup.column_names:
        return 0
    return -1


def find_sort_order_column(lookup: LookupTableData) -> int:
    index = lookup.column_index("SortOrder")
    if index >= 0:
        return index
    return lookup.column_index_by_suffix("SortOrder")


def enum_value(row: LookupRow, id_index: int) -> str:
    """Enum member value for a seed row; "0" when the ID is missing, NULL or not an integer."""
    value = row.int_value(id_index)
    return str(value) if value is not None else "0"
