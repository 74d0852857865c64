"""Configuration management for sql-codegen."""
from .generator import (
    GeneratorConfig,
    DiscoveryConfig,
    LoggingConfig,
    load_generator_config,
)

__all__ = [
    "GeneratorConfig",
    "DiscoveryConfig",
    "LoggingConfig",
    "load_generator_config",
]
