"""sql-codegen: C# entity bindings and TypeScript enums from SQL Server schema files."""
from __future__ import annotations

__version__ = "0.1.0"
