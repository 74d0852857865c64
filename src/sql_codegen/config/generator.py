"""Generator configuration loading and validation.

Loads YAML configuration for a generation run, with environment variable
overrides when no file is present.
"""
from __future__ import annotations
import os
import re
import yaml
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field, field_validator

from ..codegen.naming import IdColumnFallback

DEFAULT_CONFIG_FILE = "sql-codegen.yaml"

_DOTTED_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


class DiscoveryConfig(BaseModel):
    """Where the schema files live on disk."""
    schema_root: str = Field(".", description="Root directory of the database project")
    tables_dir_name: str = Field("Tables", description="Directory holding CREATE TABLE files")
    lookup_tables_dir_name: str = Field("LookupTables", description="Directory holding MERGE seed files")
    ignore_file: str = Field(".gitignore", description="Ignore file honored while scanning")
    extensions: list[str] = Field(default_factory=lambda: [".sql"], description="File extensions to scan")

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lowercase extensions and make sure each starts with a dot."""
        result = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            result.append(ext if ext.startswith(".") else "." + ext)
        if not result:
            raise ValueError("extensions must contain at least one entry")
        return result


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )


class GeneratorConfig(BaseModel):
    """Complete generator configuration."""
    namespace: str = Field("Generated.Entities", description="C# namespace for generated classes")
    output_dir: str | None = Field(None, description="C# output directory")
    typescript_output_dir: str | None = Field(None, description="TypeScript output directory")
    project_dir: str | None = Field(None, description="Base directory for relative output paths")
    exclude_tables: list[str] = Field(default_factory=list, description="Tables to skip")
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    id_column_fallback: IdColumnFallback = Field(
        "first_column",
        description="Seed column used as the ID when no primary key or ID column matches"
    )
    max_workers: int = Field(1, ge=1, le=32, description="Threads used for parsing")
    write_typescript_manifest: bool = Field(False, description="Write TypeScriptEnums.manifest.json")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Validate the namespace is a dotted C# identifier."""
        v = v.strip()
        if not _DOTTED_IDENTIFIER.match(v):
            raise ValueError(f"namespace must be a dotted identifier, got {v!r}")
        return v

    @field_validator("exclude_tables", mode="before")
    @classmethod
    def split_exclude_tables(cls, v):
        """Accept a comma separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [name.strip() for name in v if name and name.strip()]

    def is_excluded(self, table_name: str) -> bool:
        wanted = table_name.lower()
        return any(name.lower() == wanted for name in self.exclude_tables)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GeneratorConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated GeneratorConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, env_var: str = "SQL_CODEGEN_CONFIG") -> GeneratorConfig:
        """Load configuration from path in environment variable.

        Falls back to `sql-codegen.yaml` in the current directory, then to
        defaults overridden by SQL_CODEGEN_* variables.

        Raises:
            ValueError: If configuration is invalid
        """
        config_path = os.getenv(env_var)
        if config_path:
            return cls.from_yaml(config_path)

        default_path = Path(DEFAULT_CONFIG_FILE)
        if default_path.exists():
            return cls.from_yaml(default_path)

        overrides = {
            "namespace": os.getenv("SQL_CODEGEN_NAMESPACE"),
            "output_dir": os.getenv("SQL_CODEGEN_OUTPUT_DIR"),
            "typescript_output_dir": os.getenv("SQL_CODEGEN_TYPESCRIPT_OUTPUT_DIR"),
            "exclude_tables": os.getenv("SQL_CODEGEN_EXCLUDE_TABLES"),
            "project_dir": os.getenv("SQL_CODEGEN_PROJECT_DIR"),
        }
        data = {key: value for key, value in overrides.items() if value}

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration from environment: {e}") from e


def load_generator_config(config_path: str | Path | None = None) -> GeneratorConfig:
    """Load generator configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated GeneratorConfig instance
    """
    if config_path:
        return GeneratorConfig.from_yaml(config_path)

    return GeneratorConfig.from_env()
