"""{TableName}.Binding.cs generation for tables without seed data."""
from __future__ import annotations

from ..sql_schema.fk_resolver import TableNames, find_navigation_properties
from ..sql_schema.models import Table
from .csharp import generated_header, navigation_property_line


def generate_regular_binding(
    table: Table,
    namespace: str,
    lookup_table_names: TableNames,
    all_table_names: TableNames,
) -> str:
    """Render the PrimaryKey accessor, lookup navigation properties and FieldLengths."""
    name = table.table_name
    pk_column = table.primary_key_name
    string_columns = list(table.string_columns_with_lengths())

    lines = generated_header(table)
    lines += [
        f"namespace {namespace}",
        "{",
        f"    public partial class {name} : IHavePrimaryKey",
        "    {",
        f"        public int PrimaryKey => {pk_column};",
    ]

    navigations = find_navigation_properties(table.columns, pk_column, lookup_table_names, all_table_names)
    lines += [navigation_property_line(nav) for nav in navigations]

    if string_columns:
        lines += [
            "",
            "",
            "        public static class FieldLengths",
            "        {",
        ]
        for column_name, max_length in string_columns:
            lines.append(f"            public const int {column_name} = {max_length};")
        lines.append("        }")

    lines += ["    }", "}"]
    return "\n".join(lines) + "\n"
