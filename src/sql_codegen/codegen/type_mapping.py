"""SQL Server type -> C# type mapping."""
from __future__ import annotations

from ..sql_schema.models import Column

GEOMETRY_TYPE = "NetTopologySuite.Geometries.Geometry"

SQL_TO_CSHARP: dict[str, str] = {
    "int": "int",
    "bigint": "long",
    "smallint": "short",
    "tinyint": "byte",
    "bit": "bool",
    "decimal": "decimal",
    "numeric": "decimal",
    "money": "decimal",
    "smallmoney": "decimal",
    "float": "double",
    "real": "float",
    "datetime": "DateTime",
    "datetime2": "DateTime",
    "smalldatetime": "DateTime",
    "date": "DateOnly",
    "time": "TimeSpan",
    "datetimeoffset": "DateTimeOffset",
    "uniqueidentifier": "Guid",
    "varchar": "string",
    "nvarchar": "string",
    "char": "string",
    "nchar": "string",
    "text": "string",
    "ntext": "string",
    "varbinary": "byte[]",
    "binary": "byte[]",
    "image": "byte[]",
    "geometry": GEOMETRY_TYPE,
    "geography": GEOMETRY_TYPE,
}


def map_type(sql_type: str) -> str:
    """Map a SQL type name to the non-nullable C# type (`object` when unknown)."""
    return SQL_TO_CSHARP.get(sql_type.lower(), "object")


def csharp_type(column: Column) -> str:
    """C# type for a column, with `?` for nullable columns."""
    base = map_type(column.sql_type)
    return f"{base}?" if column.nullable else base
