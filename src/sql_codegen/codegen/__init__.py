"""Code generation from parsed schema models.

- {TableName}PrimaryKey.cs for every table
- {TableName}.Binding.cs (lookup or regular form)
- {kebab-name}-enum.ts for lookup tables
"""
from __future__ import annotations

from .naming import (
    sanitize_identifier,
    to_kebab_case,
    typescript_file_name,
    pluralize,
)

from .primary_key import generate_primary_key, primary_key_file_name
from .csharp import binding_file_name
from .lookup_binding import generate_lookup_binding
from .regular_binding import generate_regular_binding

from .typescript_enum import (
    MANIFEST_FILE_NAME,
    ManifestEntry,
    build_entries,
    build_manifest,
    generate_typescript_enum,
    manifest_entry,
)

__all__ = [
    # Naming
    "sanitize_identifier",
    "to_kebab_case",
    "typescript_file_name",
    "pluralize",
    # C#
    "generate_primary_key",
    "primary_key_file_name",
    "binding_file_name",
    "generate_lookup_binding",
    "generate_regular_binding",
    # TypeScript
    "MANIFEST_FILE_NAME",
    "ManifestEntry",
    "build_entries",
    "build_manifest",
    "generate_typescript_enum",
    "manifest_entry",
]
