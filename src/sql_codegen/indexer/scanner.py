"""Schema file scanner with .gitignore support.

Walks a database project tree, yields `.sql` files and sorts them into
CREATE TABLE files and lookup-table seed files.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator
import pathspec

from ..config.generator import DiscoveryConfig


@dataclass
class SqlSourceSet:
    """Files found under a schema root, each list sorted by path."""
    table_files: list[Path] = field(default_factory=list)
    seed_files: list[Path] = field(default_factory=list)


def scan_sql_files(
    root: Path | str,
    ignore_file: str = ".gitignore",
    extensions: Iterable[str] = (".sql",),
) -> Iterator[Path]:
    """Scan a directory for SQL files, honoring .gitignore.

    Args:
        root: Root directory of the database project
        ignore_file: Name of ignore file (default: .gitignore)
        extensions: File extensions to yield (case-insensitive)

    Yields:
        File paths in sorted walk order
    """
    root = Path(root).resolve()

    if not root.exists():
        raise FileNotFoundError(f"Schema root not found: {root}")

    if not root.is_dir():
        raise NotADirectoryError(f"Schema root is not a directory: {root}")

    ignore_path = root / ignore_file
    spec = None

    if ignore_path.exists():
        with open(ignore_path, "r", encoding="utf-8") as f:
            spec = pathspec.PathSpec.from_lines("gitwildmatch", f.read().splitlines())

    wanted = {ext.lower() for ext in extensions}
    for file_path in _walk_directory(root, spec, root):
        if file_path.suffix.lower() in wanted:
            yield file_path


def _walk_directory(
    directory: Path,
    spec: pathspec.PathSpec | None,
    root: Path
) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir())
    except PermissionError:
        return

    for entry in entries:
        if entry.name.startswith("."):
            continue

        rel_path = entry.relative_to(root).as_posix()
        if entry.is_dir():
            # Directory patterns like "bin/" only match with the trailing slash
            if spec and spec.match_file(rel_path + "/"):
                continue
            yield from _walk_directory(entry, spec, root)
        elif entry.is_file():
            if spec and spec.match_file(rel_path):
                continue
            yield entry


def classify_sql_files(root: Path | str, discovery: DiscoveryConfig | None = None) -> SqlSourceSet:
    """Split scanned files into table definitions and seed scripts.

    A file with a `LookupTables` directory (case-insensitive) anywhere in its
    path is a seed file; otherwise a file under a `Tables` directory is a
    table file. Everything else is ignored.
    """
    discovery = discovery or DiscoveryConfig()
    root = Path(root).resolve()
    lookup_dir = discovery.lookup_tables_dir_name.lower()
    tables_dir = discovery.tables_dir_name.lower()

    sources = SqlSourceSet()
    for file_path in scan_sql_files(root, discovery.ignore_file, discovery.extensions):
        parts = [part.lower() for part in file_path.relative_to(root).parts[:-1]]
        if lookup_dir in parts:
            sources.seed_files.append(file_path)
        elif tables_dir in parts:
            sources.table_files.append(file_path)

    sources.table_files.sort()
    sources.seed_files.sort()
    return sources
