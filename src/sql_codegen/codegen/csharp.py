"""Fragments shared by the C# binding generators."""
from __future__ import annotations

from ..sql_schema.fk_resolver import NavigationProperty
from ..sql_schema.models import Table


def binding_file_name(table: Table) -> str:
    return f"{table.table_name}.Binding.cs"


def generated_header(table: Table) -> list[str]:
    return [
        "//  IMPORTANT:",
        "//  This file is generated. Your changes will be lost.",
        "//  Use the corresponding partial class for customizations.",
        f"//  Source Table: [{table.schema_name}].[{table.table_name}]",
    ]


def navigation_property_line(nav: NavigationProperty, indent: str = "        ") -> str:
    """Expression-bodied accessor that resolves an ID column through AllLookupDictionary."""
    ref = nav.referenced_table
    if nav.nullable:
        return (
            f"{indent}public {ref}? {nav.property_name} => {nav.column_name}.HasValue"
            f" ? {ref}.AllLookupDictionary[{nav.column_name}.Value] : null;"
        )
    return f"{indent}public {ref} {nav.property_name} => {ref}.AllLookupDictionary[{nav.column_name}];"


def verbatim_string(value: str) -> str:
    """C# verbatim string literal (quotes doubled)."""
    return '@"' + value.replace('"', '""') + '"'
