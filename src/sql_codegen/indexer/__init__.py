"""Discovery of schema files on disk."""
from .scanner import SqlSourceSet, classify_sql_files, scan_sql_files

__all__ = [
    "SqlSourceSet",
    "classify_sql_files",
    "scan_sql_files",
]
