"""Two-phase batch driver.

Phase 1 parses every table definition and seed file independently. Phase 2
runs only after phase 1 has finished, because foreign key resolution needs
the complete sets of table and lookup-table names.
"""
from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Literal, TypeVar

from ..codegen.csharp import binding_file_name
from ..codegen.lookup_binding import generate_lookup_binding
from ..codegen.primary_key import generate_primary_key, primary_key_file_name
from ..codegen.regular_binding import generate_regular_binding
from ..codegen.typescript_enum import (
    MANIFEST_FILE_NAME,
    ManifestEntry,
    build_manifest,
    generate_typescript_enum,
    manifest_entry,
)
from ..config.generator import GeneratorConfig
from ..indexer.scanner import classify_sql_files
from ..sql_schema.errors import SchemaParseError
from ..sql_schema.fk_resolver import TableNames
from ..sql_schema.merge_parser import parse_merge_statement_or_raise
from ..sql_schema.models import LookupTableData, Table
from ..sql_schema.parser import parse_create_table_or_raise
from .writer import WriteOutcome, resolve_output_dir, write_if_changed

logger = logging.getLogger(__name__)

T = TypeVar("T")

SourceKind = Literal["table", "seed"]
Target = Literal["csharp", "typescript", "manifest"]


@dataclass(frozen=True)
class ParseDiagnostic:
    """Something the batch skipped or could not use, tied to a source file."""
    path: str
    kind: str
    message: str


@dataclass
class ParsedSchema:
    tables: list[Table] = field(default_factory=list)
    lookups: dict[str, LookupTableData] = field(default_factory=dict)  # keyed by lowercase table name
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    lookup_paths: dict[str, str] = field(default_factory=dict)

    def lookup_for(self, table_name: str) -> LookupTableData | None:
        return self.lookups.get(table_name.lower())


@dataclass(frozen=True)
class GeneratedFile:
    file_name: str
    content: str
    table_name: str
    target: Target


@dataclass
class GenerationResult:
    files: list[GeneratedFile] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    write_outcomes: list[WriteOutcome] = field(default_factory=list)
    table_count: int = 0
    lookup_count: int = 0
    cancelled: bool = False

    def files_for(self, target: Target) -> list[GeneratedFile]:
        return [f for f in self.files if f.target == target]

    @property
    def written_count(self) -> int:
        return sum(1 for outcome in self.write_outcomes if outcome.status == "written")


class GenerationCancelled(Exception):
    """Raised between files when the cancellation event is set."""


class ParseCache:
    """In-process cache of parse results keyed by the SHA-256 of the file text.

    Failures are cached too, so an unchanged broken file is not re-parsed.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[SourceKind, str], Table | LookupTableData | SchemaParseError] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def content_hash(text: str) -> str:
        return hashlib.sha256(text.encode("utf-8")).hexdigest()

    def get_or_parse(self, kind: SourceKind, text: str, parse: Callable[[str], T]) -> T:
        key = (kind, self.content_hash(text))
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
        if cached is not None:
            if isinstance(cached, SchemaParseError):
                raise cached
            return cached  # type: ignore[return-value]

        try:
            result = parse(text)
        except SchemaParseError as e:
            with self._lock:
                self._entries[key] = e
                self.misses += 1
            raise

        with self._lock:
            self._entries[key] = result  # type: ignore[assignment]
            self.misses += 1
        return result

    def __len__(self) -> int:
        return len(self._entries)


def _parse_one(
    kind: SourceKind,
    path: str,
    text: str,
    cache: ParseCache | None,
) -> tuple[str, Table | LookupTableData | None, ParseDiagnostic | None]:
    """Parse one file, turning every failure into a diagnostic."""
    parse = parse_create_table_or_raise if kind == "table" else parse_merge_statement_or_raise
    try:
        if cache is not None:
            return path, cache.get_or_parse(kind, text, parse), None
        return path, parse(text), None
    except SchemaParseError as e:
        logger.warning(f"Skipping {kind} file {path}: {e}")
        return path, None, ParseDiagnostic(path, f"{kind}_parse_error", str(e))
    except Exception as e:
        logger.warning(f"Unexpected error parsing {kind} file {path}: {e}")
        return path, None, ParseDiagnostic(path, "unexpected_error", f"{type(e).__name__}: {e}")


def parse_sources(
    table_sources: Iterable[tuple[str, str]],
    seed_sources: Iterable[tuple[str, str]],
    max_workers: int = 1,
    cache: ParseCache | None = None,
    cancel_event: threading.Event | None = None,
) -> ParsedSchema:
    """Phase 1: parse all table and seed texts.

    Args:
        table_sources: (path, text) pairs of CREATE TABLE files
        seed_sources: (path, text) pairs of MERGE seed files
        max_workers: Threads used for parsing; output order never depends on it
        cache: Optional content-hash cache shared across runs
        cancel_event: Checked between files

    Returns:
        ParsedSchema with tables in input order and lookups keyed by table name
    """
    def run(kind: SourceKind, sources: list[tuple[str, str]]):
        def task(source: tuple[str, str]):
            _check_cancelled(cancel_event)
            return _parse_one(kind, source[0], source[1], cache)

        if max_workers <= 1 or len(sources) <= 1:
            return [task(source) for source in sources]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(task, sources))

    parsed = ParsedSchema()

    for path, table, diagnostic in run("table", list(table_sources)):
        if diagnostic:
            parsed.diagnostics.append(diagnostic)
        elif table is not None:
            parsed.tables.append(table)

    _check_cancelled(cancel_event)

    for path, lookup, diagnostic in run("seed", list(seed_sources)):
        if diagnostic:
            parsed.diagnostics.append(diagnostic)
            continue
        if lookup is None:
            continue
        key = lookup.table_name.lower()
        if key in parsed.lookups:
            first = parsed.lookup_paths[key]
            logger.warning(f"Duplicate seed data for {lookup.table_name} in {path}, keeping {first}")
            parsed.diagnostics.append(ParseDiagnostic(
                path, "duplicate_seed", f"seed data for {lookup.table_name} already read from {first}"
            ))
            continue
        parsed.lookups[key] = lookup
        parsed.lookup_paths[key] = path

    return parsed


def generate(
    parsed: ParsedSchema,
    config: GeneratorConfig,
    cancel_event: threading.Event | None = None,
) -> GenerationResult:
    """Phase 2: resolve foreign keys and render every output file.

    Identical inputs produce identical files in identical order.
    """
    lookup_table_names = TableNames(lookup.table_name for lookup in parsed.lookups.values())
    all_table_names = TableNames(table.table_name for table in parsed.tables)

    result = GenerationResult(diagnostics=list(parsed.diagnostics))
    manifest: list[ManifestEntry] = []
    seen_tables: set[str] = set()

    for table in parsed.tables:
        _check_cancelled(cancel_event)
        name = table.table_name
        if config.is_excluded(name):
            logger.debug(f"Excluded table: {name}")
            continue
        if name.lower() in seen_tables:
            result.diagnostics.append(ParseDiagnostic(
                table.qualified_name, "duplicate_table", f"table {name} defined more than once, keeping the first"
            ))
            continue
        seen_tables.add(name.lower())

        result.files.append(GeneratedFile(
            primary_key_file_name(table), generate_primary_key(table, config.namespace), name, "csharp"
        ))

        lookup = parsed.lookup_for(name)
        if lookup is None:
            binding = generate_regular_binding(table, config.namespace, lookup_table_names, all_table_names)
            result.files.append(GeneratedFile(binding_file_name(table), binding, name, "csharp"))
            result.table_count += 1
            continue

        source_path = parsed.lookup_paths.get(name.lower(), table.qualified_name)
        width = len(lookup.column_names)
        for row in lookup.mismatched_rows():
            logger.warning(
                f"Skipping seed row for {name}: {len(row.values)} values for {width} columns"
            )
            result.diagnostics.append(ParseDiagnostic(
                source_path, "row_width_mismatch",
                f"row ({', '.join(row.values)}) has {len(row.values)} values, expected {width}"
            ))

        binding = generate_lookup_binding(
            table, lookup, config.namespace, lookup_table_names, all_table_names,
            id_column_fallback=config.id_column_fallback,
        )
        result.files.append(GeneratedFile(binding_file_name(table), binding, name, "csharp"))

        ts_content = generate_typescript_enum(table, lookup, config.id_column_fallback)
        entry = manifest_entry(table, ts_content)
        manifest.append(entry)
        result.files.append(GeneratedFile(entry.file_name, ts_content, name, "typescript"))
        result.table_count += 1
        result.lookup_count += 1

    for key, lookup in sorted(parsed.lookups.items()):
        if key not in all_table_names:
            result.diagnostics.append(ParseDiagnostic(
                parsed.lookup_paths.get(key, lookup.table_name), "orphan_seed",
                f"seed data for {lookup.table_name} has no matching table definition"
            ))

    if manifest:
        result.files.append(GeneratedFile(MANIFEST_FILE_NAME, build_manifest(manifest), "", "manifest"))

    return result


def read_sources(paths: Iterable[Path]) -> tuple[list[tuple[str, str]], list[ParseDiagnostic]]:
    """Read files as UTF-8 text; unreadable files become diagnostics."""
    sources = []
    diagnostics = []
    for path in paths:
        try:
            sources.append((str(path), path.read_text(encoding="utf-8-sig", errors="replace")))
        except OSError as e:
            logger.warning(f"Failed to read SQL file {path}: {e}")
            diagnostics.append(ParseDiagnostic(str(path), "read_error", str(e)))
    return sources, diagnostics


def write_outputs(result: GenerationResult, config: GeneratorConfig) -> list[WriteOutcome]:
    """Write generated files to the configured directories."""
    outcomes = []
    if config.output_dir:
        csharp_dir = resolve_output_dir(config.output_dir, config.project_dir)
        for generated in result.files_for("csharp"):
            outcomes.append(write_if_changed(csharp_dir, generated.file_name, generated.content))
        if config.write_typescript_manifest:
            for generated in result.files_for("manifest"):
                outcomes.append(write_if_changed(csharp_dir, generated.file_name, generated.content))

    if config.typescript_output_dir:
        ts_dir = resolve_output_dir(config.typescript_output_dir, config.project_dir)
        for generated in result.files_for("typescript"):
            outcomes.append(write_if_changed(ts_dir, generated.file_name, generated.content))

    return outcomes


def run_generation(
    config: GeneratorConfig,
    cancel_event: threading.Event | None = None,
    cache: ParseCache | None = None,
    dry_run: bool = False,
) -> GenerationResult:
    """Discover, parse, generate and write.

    Args:
        config: Generator configuration
        cancel_event: When set, the run stops at the next file boundary
        cache: Optional parse cache reused across runs
        dry_run: Generate in memory without writing

    Returns:
        GenerationResult; `cancelled` is True when the event stopped the run
    """
    discovery = config.discovery
    sources = classify_sql_files(discovery.schema_root, discovery)
    logger.info(
        f"Found {len(sources.table_files)} table files and {len(sources.seed_files)} seed files "
        f"under {discovery.schema_root}"
    )

    try:
        table_sources, table_read_errors = read_sources(sources.table_files)
        seed_sources, seed_read_errors = read_sources(sources.seed_files)
        _check_cancelled(cancel_event)

        parsed = parse_sources(
            table_sources, seed_sources,
            max_workers=config.max_workers, cache=cache, cancel_event=cancel_event,
        )
        parsed.diagnostics[:0] = table_read_errors + seed_read_errors
        _check_cancelled(cancel_event)

        result = generate(parsed, config, cancel_event)
        _check_cancelled(cancel_event)
    except GenerationCancelled:
        logger.info("Generation cancelled")
        return GenerationResult(cancelled=True)

    if not dry_run:
        result.write_outcomes = write_outputs(result, config)

    logger.info(
        f"{result.table_count} tables, {result.lookup_count} lookup tables, "
        f"{result.written_count} files written"
    )
    return result


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise GenerationCancelled()
