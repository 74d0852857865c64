"""TypeScript enum files for lookup tables.

Each lookup table yields `{kebab-name}-enum.ts` exporting the enum, the
ordered list of LookupTableEntry records and the dropdown options derived
from it.
"""
from __future__ import annotations

import base64
import json
from dataclasses import dataclass

from ..sql_schema.models import LookupTableData, Table
from .naming import (
    IdColumnFallback,
    enum_value,
    find_display_name_column,
    find_id_column,
    find_sort_order_column,
    find_system_name_column,
    pluralize,
    sanitize_identifier,
    typescript_file_name,
)

MANIFEST_FILE_NAME = "TypeScriptEnums.manifest.json"


@dataclass(frozen=True)
class EnumEntry:
    """One row of the generated enum."""
    name: str
    display_name: str
    value: str
    sort_order: int


@dataclass(frozen=True)
class ManifestEntry:
    table_name: str
    file_name: str
    content: str


def build_entries(
    table: Table,
    lookup: LookupTableData,
    id_column_fallback: IdColumnFallback = "first_column",
) -> list[EnumEntry]:
    """Resolve name, display name, value and sort order for every usable row.

    With a SortOrder column the explicit value is used, falling back to a
    running 10, 20, 30 sequence for unparseable values. Without one the sort
    order is the ID times ten.
    """
    table_name = table.table_name
    id_index = find_id_column(lookup, table, id_column_fallback)
    name_index = find_system_name_column(lookup, table_name)
    display_index = find_display_name_column(lookup, table_name)
    if display_index < 0:
        display_index = name_index
    sort_index = find_sort_order_column(lookup)

    entries = []
    running_sort = 10
    for row in lookup.matching_rows():
        raw_name = row.value(name_index) or "Unknown"
        display_name = row.value(display_index) or raw_name

        if sort_index >= 0:
            sort_order = row.int_value(sort_index)
            if sort_order is None:
                sort_order = running_sort
        else:
            row_id = row.int_value(id_index)
            sort_order = (row_id if row_id is not None else 1) * 10

        entries.append(EnumEntry(
            name=sanitize_identifier(raw_name),
            display_name=display_name,
            value=enum_value(row, id_index),
            sort_order=sort_order,
        ))
        running_sort += 10

    return entries


def escape_js(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def generate_typescript_enum(
    table: Table,
    lookup: LookupTableData,
    id_column_fallback: IdColumnFallback = "first_column",
) -> str:
    """Render the TypeScript module for a lookup table."""
    name = table.table_name
    plural = pluralize(name)
    entries = build_entries(table, lookup, id_column_fallback)

    lines = [
        "//  IMPORTANT:",
        "//  This file is generated. Your changes will be lost.",
        f"//  Source Table: [{table.schema_name}].[{name}]",
        "",
        'import { LookupTableEntry } from "src/app/shared/models/lookup-table-entry";',
        'import { SelectDropdownOption } from "src/app/shared/components/forms/form-field/form-field.component"',
        "",
        f"export enum {name}Enum {{",
    ]
    for entry in entries:
        lines.append(f"  {entry.name} = {entry.value},")
    lines += ["}", ""]

    lines.append(f"export const {plural}: LookupTableEntry[]  = [")
    for entry in entries:
        lines.append(
            f'  {{ Name: "{entry.name}", DisplayName: "{escape_js(entry.display_name)}", '
            f'Value: {entry.value}, SortOrder: {entry.sort_order} }},'
        )
    lines.append("];")
    lines.append(
        f"export const {plural}AsSelectDropdownOptions = {plural}.map((x) => "
        f"({{ Value: x.Value, Label: x.DisplayName, SortOrder: x.SortOrder }} as SelectDropdownOption));"
    )
    return "\n".join(lines) + "\n"


def manifest_entry(table: Table, content: str) -> ManifestEntry:
    return ManifestEntry(
        table_name=table.table_name,
        file_name=typescript_file_name(table.table_name),
        content=content,
    )


def build_manifest(entries: list[ManifestEntry]) -> str:
    """JSON manifest of generated TypeScript files, content base64 encoded."""
    files = [
        {
            "tableName": entry.table_name,
            "fileName": entry.file_name,
            "content": base64.b64encode(entry.content.encode("utf-8")).decode("ascii"),
        }
        for entry in entries
    ]
    return json.dumps({"files": files}, indent=2) + "\n"
