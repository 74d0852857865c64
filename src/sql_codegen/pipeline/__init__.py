"""Batch driver: parse every schema file, then resolve and generate."""
from .generator import (
    GeneratedFile,
    GenerationCancelled,
    GenerationResult,
    ParseCache,
    ParseDiagnostic,
    ParsedSchema,
    generate,
    parse_sources,
    run_generation,
)
from .writer import WriteOutcome, resolve_output_dir, write_if_changed

__all__ = [
    "GeneratedFile",
    "GenerationCancelled",
    "GenerationResult",
    "ParseCache",
    "ParseDiagnostic",
    "ParsedSchema",
    "generate",
    "parse_sources",
    "run_generation",
    "WriteOutcome",
    "resolve_output_dir",
    "write_if_changed",
]
