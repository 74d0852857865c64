"""{TableName}.Binding.cs generation for lookup tables.

A lookup table becomes an abstract partial class with one sealed subclass
and static instance per seed row, a matching `{TableName}Enum`, and
navigation properties for ID columns that point at other lookup tables.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

from ..sql_schema.fk_resolver import TableNames, find_navigation_properties
from ..sql_schema.models import Column, LookupRow, LookupTableData, Table
from .csharp import generated_header, navigation_property_line, verbatim_string
from .naming import (
    IdColumnFallback,
    enum_value,
    find_id_column,
    find_system_name_column,
    lower_camel,
    sanitize_identifier,
)
from .type_mapping import csharp_type


@dataclass(frozen=True)
class ConstructorParam:
    name: str
    csharp_type: str
    lower_camel_name: str


def constructor_params(table: Table, lookup: LookupTableData) -> list[ConstructorParam]:
    """One parameter per seed column, typed from the table definition (string when unknown)."""
    params = []
    for column_name in lookup.column_names:
        column = table.column(column_name)
        cs_type = csharp_type(column) if column else "string"
        params.append(ConstructorParam(column_name, cs_type, lower_camel(column_name)))
    return params


def format_value(param: ConstructorParam, value: str | None) -> str:
    """Render one seed value as a C# literal for the parameter's type."""
    if value is not None and value.upper() == "NULL":
        return "null"
    if param.csharp_type.startswith("string"):
        return verbatim_string(value or "")
    if param.csharp_type in ("bool", "bool?"):
        return "true" if value == "1" or (value or "").lower() == "true" else "false"
    if param.csharp_type in ("decimal", "decimal?"):
        return (value or "0") + "m"
    return value or "0"


def _seed_columns(table: Table, lookup: LookupTableData) -> list[Column]:
    """Seed columns as Column models, keeping the seed file's spelling."""
    columns = []
    for column_name in lookup.column_names:
        column = table.column(column_name)
        if column is None:
            columns.append(Column(name=column_name, sql_type="nvarchar", nullable=False))
        else:
            columns.append(replace(column, name=column_name))
    return columns


def generate_lookup_binding(
    table: Table,
    lookup: LookupTableData,
    namespace: str,
    lookup_table_names: TableNames,
    all_table_names: TableNames,
    id_column_fallback: IdColumnFallback = "first_column",
) -> str:
    """Render the binding class for a lookup table.

    Only rows whose value count matches the seed column list are used.
    """
    name = table.table_name
    pk_column = table.primary_key_name
    pk_index = lookup.column_index(pk_column)
    if pk_index >= 0:
        # Properties follow the seed file's spelling of the key column
        pk_column = lookup.column_names[pk_index]
    rows = lookup.matching_rows()

    name_index = find_system_name_column(lookup, name)
    id_index = find_id_column(lookup, table, id_column_fallback)
    params = constructor_params(table, lookup)

    def instance_name(row: LookupRow) -> str:
        return sanitize_identifier(row.value(name_index))

    instance_names = [instance_name(row) for row in rows]

    lines = generated_header(table)
    lines += [
        "using System.Collections.ObjectModel;",
        "using System.ComponentModel.DataAnnotations;",
        "using System.ComponentModel.DataAnnotations.Schema;",
        "",
        "#nullable enable",
        "",
        f"namespace {namespace}",
        "{",
        f"    public abstract partial class {name} : IHavePrimaryKey",
        "    {",
    ]

    for instance in instance_names:
        lines.append(f"        public static readonly {name}{instance} {instance} = {name}{instance}.Instance;")
    lines.append("")

    lines += [
        f"        public static readonly List<{name}> All;",
        f"        public static readonly ReadOnlyDictionary<int, {name}> AllLookupDictionary;",
        "",
        "        /// <summary>",
        "        /// Static type constructor to coordinate static initialization order",
        "        /// </summary>",
        f"        static {name}()",
        "        {",
        f"            All = new List<{name}> {{ {', '.join(instance_names)} }};",
        f"            AllLookupDictionary = new ReadOnlyDictionary<int, {name}>(All.ToDictionary(x => x.{pk_column}));",
        "        }",
        "",
    ]

    param_decl = ", ".join(f"{p.csharp_type} {p.lower_camel_name}" for p in params)
    lines += [
        "        /// <summary>",
        "        /// Protected constructor only for use in instantiating the set of static lookup values that match database",
        "        /// </summary>",
        f"        protected {name}({param_decl})",
        "        {",
    ]
    for p in params:
        lines.append(f"            {p.name} = {p.lower_camel_name};")
    lines += ["        }", ""]

    for p in params:
        if p.name.lower() == pk_column.lower():
            lines.append("        [Key]")
        lines.append(f"        public {p.csharp_type} {p.name} {{ get; private set; }}")
    lines += [
        "        [NotMapped]",
        f"        public int PrimaryKey {{ get {{ return {pk_column}; }} }}",
        "",
    ]

    navigations = find_navigation_properties(
        _seed_columns(table, lookup), pk_column, lookup_table_names, all_table_names
    )
    if navigations:
        lines.append("        // Navigation properties for foreign keys to other lookup tables")
        lines += [navigation_property_line(nav) for nav in navigations]
        lines.append("")

    lines += _equality_members(name, pk_column)

    lines += [
        f"        public static {name} ToType({name}Enum enumValue)",
        "        {",
        "            switch (enumValue)",
        "            {",
    ]
    for instance in instance_names:
        lines.append(f"                case {name}Enum.{instance}:")
        lines.append(f"                    return {instance};")
    lines += [
        "                default:",
        '                    throw new ArgumentException($"Unable to map Enum: {enumValue}");',
        "            }",
        "        }",
        "    }",
        "",
    ]

    lines.append(f"    public enum {name}Enum")
    lines.append("    {")
    for row, instance in zip(rows, instance_names):
        lines.append(f"        {instance} = {enum_value(row, id_index)},")
    lines += ["    }", ""]

    base_call = ", ".join(p.lower_camel_name for p in params)
    for row, instance in zip(rows, instance_names):
        values = ", ".join(
            format_value(p, row.value(lookup.column_index(p.name))) for p in params
        )
        lines += [
            f"    public partial class {name}{instance} : {name}",
            "    {",
            f"        private {name}{instance}({param_decl}) : base({base_call}) {{}}",
            f"        public static readonly {name}{instance} Instance = new {name}{instance}({values});",
            "    }",
            "",
        ]

    lines.append("}")
    return "\n".join(lines) + "\n"


def _equality_members(name: str, pk_column: str) -> list[str]:
    summary = [
        "        /// <summary>",
        "        /// Enum types are equal by primary key",
        "        /// </summary>",
    ]
    return [
        *summary,
        f"        public bool Equals({name} other)",
        "        {",
        "            if (other == null)",
        "            {",
        "                return false;",
        "            }",
        f"            return other.{pk_column} == {pk_column};",
        "        }",
        "",
        *summary,
        "        public override bool Equals(object obj)",
        "        {",
        f"            return Equals(obj as {name});",
        "        }",
        "",
        *summary,
        "        public override int GetHashCode()",
        "        {",
        f"            return {pk_column};",
        "        }",
        "",
        f"        public static bool operator ==({name} left, {name} right)",
        "        {",
        "            return Equals(left, right);",
        "        }",
        "",
        f"        public static bool operator !=({name} left, {name} right)",
        "        {",
        "            return !Equals(left, right);",
        "        }",
        "",
        f"        public {name}Enum ToEnum => ({name}Enum)GetHashCode();",
        "",
        f"        public static {name} ToType(int enumValue)",
        "        {",
        f"            return ToType(({name}Enum)enumValue);",
        "        }",
        "",
    ]
