"""{TableName}PrimaryKey.cs generation for every table."""
from __future__ import annotations

from ..sql_schema.models import Table
from .naming import lower_camel


def primary_key_file_name(table: Table) -> str:
    return f"{table.table_name}PrimaryKey.cs"


def generate_primary_key(table: Table, namespace: str) -> str:
    """Render the EntityPrimaryKey wrapper class for a table."""
    name = table.table_name
    param = lower_camel(name)

    lines = [
        "//  IMPORTANT:",
        "//  This file is generated. Your changes will be lost.",
        "//  Use the corresponding partial class for customizations.",
        f"//  Source Table: {table.schema_name}.{name}",
        "",
        "",
        f"namespace {namespace}",
        "{",
        f"    public class {name}PrimaryKey : EntityPrimaryKey<{name}>",
        "    {",
        f"        public {name}PrimaryKey() : base(){{}}",
        f"        public {name}PrimaryKey(int primaryKeyValue) : base(primaryKeyValue){{}}",
        f"        public {name}PrimaryKey({name} {param}) : base({param}){{}}",
        "",
        f"        public static implicit operator {name}PrimaryKey(int primaryKeyValue)",
        "        {",
        f"            return new {name}PrimaryKey(primaryKeyValue);",
        "        }",
        "",
        f"        public static implicit operator {name}PrimaryKey({name} {param})",
        "        {",
        f"            return new {name}PrimaryKey({param});",
        "        }",
        "    }",
        "}",
    ]
    return "\n".join(lines) + "\n"
