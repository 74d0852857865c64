from __future__ import annotations
import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from dotenv import load_dotenv

from sql_codegen.config import GeneratorConfig, load_generator_config
from sql_codegen.pipeline import GenerationResult, run_generation
from sql_codegen.sql_schema.errors import SchemaParseError
from sql_codegen.sql_schema.fk_resolver import resolve_lookup_reference
from sql_codegen.sql_schema.merge_parser import parse_merge_statement_or_raise
from sql_codegen.sql_schema.parser import parse_create_table_or_raise


class ConfigurationError(Exception):
    """The run could not be configured; maps to exit code 1."""


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Load environment variables first
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="sql-codegen",
        description="Generate C# entity bindings and TypeScript enums from SQL Server schema files"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate code for a database project")
    gen.add_argument("--config", help="Path to configuration YAML file")
    gen.add_argument("--schema-root", help="Root directory of the database project")
    gen.add_argument("--output-dir", help="C# output directory")
    gen.add_argument("--typescript-output-dir", help="TypeScript output directory")
    gen.add_argument("--namespace", help="C# namespace for generated classes")
    gen.add_argument("--exclude", help="Comma separated table names to skip")
    gen.add_argument("--dry-run", action="store_true",
                     help="Generate in memory and report without writing files")
    gen.add_argument("--verbose", action="store_true", help="Enable debug logging")

    parse_table = sub.add_parser("parse-table", help="Parse a CREATE TABLE file and print it as JSON")
    parse_table.add_argument("file", help="Path to the .sql file")

    parse_seed = sub.add_parser("parse-seed", help="Parse a MERGE seed file and print it as JSON")
    parse_seed.add_argument("file", help="Path to the .sql file")

    resolve = sub.add_parser("resolve", help="Resolve a foreign key column to a lookup table")
    resolve.add_argument("--column", required=True, help="Column name, e.g. ProjectStageID")
    resolve.add_argument("--lookup", required=True, help="Comma separated lookup table names")
    resolve.add_argument("--table", default="", help="Comma separated names of all other tables")
    resolve.add_argument("--references", help="Table named by an explicit REFERENCES clause")

    args = parser.parse_args(argv)

    try:
        if args.cmd == "generate":
            config = build_config(args)
            configure_logging(config, args.verbose)
            result = run_generation(config, dry_run=args.dry_run)
            print_summary(result, args.dry_run)
        elif args.cmd == "parse-table":
            logging.basicConfig(level=logging.WARNING, handlers=[logging.StreamHandler(sys.stderr)])
            print_model(parse_create_table_or_raise(read_sql(args.file)))
        elif args.cmd == "parse-seed":
            logging.basicConfig(level=logging.WARNING, handlers=[logging.StreamHandler(sys.stderr)])
            print_model(parse_merge_statement_or_raise(read_sql(args.file)))
        elif args.cmd == "resolve":
            lookups = split_names(args.lookup)
            tables = split_names(args.table) + lookups
            resolved = resolve_lookup_reference(
                args.column, lookups, tables, explicit_reference=args.references
            )
            print(resolved or "(none)")
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except SchemaParseError as e:
        print(f"Could not parse {args.file}: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Load configuration and apply command line overrides.

    Args:
        args: Parsed `generate` arguments

    Returns:
        Validated GeneratorConfig

    Raises:
        ConfigurationError: If the file is missing or any value is invalid
    """
    try:
        config = load_generator_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e

    data = config.model_dump()
    if args.schema_root:
        data["discovery"]["schema_root"] = args.schema_root
    if args.output_dir:
        data["output_dir"] = args.output_dir
    if args.typescript_output_dir:
        data["typescript_output_dir"] = args.typescript_output_dir
    if args.namespace:
        data["namespace"] = args.namespace
    if args.exclude:
        data["exclude_tables"] = args.exclude

    try:
        config = GeneratorConfig.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    schema_root = Path(config.discovery.schema_root)
    if not schema_root.is_dir():
        raise ConfigurationError(f"Schema root is not a directory: {schema_root}")
    return config


def configure_logging(config: GeneratorConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level.upper())
    logging.basicConfig(
        level=level,
        format=config.logging.format,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def read_sql(file_path: str) -> str:
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"SQL file not found: {path}")
    return path.read_text(encoding="utf-8-sig", errors="replace")


def print_model(model) -> None:
    print(json.dumps(asdict(model), indent=2))


def split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def print_summary(result: GenerationResult, dry_run: bool = False) -> None:
    """Print a human readable summary of a generation run.

    Args:
        result: Outcome of run_generation
        dry_run: Whether files were left unwritten
    """
    if result.cancelled:
        print("Generation cancelled")
        return

    print("\n✓ Generation complete" + (" (dry run)" if dry_run else ""))
    print(f"  Tables:          {result.table_count}")
    print(f"  Lookup tables:   {result.lookup_count}")
    print(f"  Files generated: {len(result.files)}")

    if not dry_run:
        unchanged = sum(1 for o in result.write_outcomes if o.status == "unchanged")
        failed = [o for o in result.write_outcomes if o.status == "failed"]
        print(f"  Files written:   {result.written_count} ({unchanged} unchanged, {len(failed)} failed)")
        for outcome in failed:
            print(f"    ✗ {outcome.path}: {outcome.error}")

    if result.diagnostics:
        print(f"\nDiagnostics ({len(result.diagnostics)}):")
        for diagnostic in result.diagnostics:
            print(f"  ! {diagnostic.path} [{diagnostic.kind}] {diagnostic.message}")
