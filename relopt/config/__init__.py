"""Configuration management."""

from .config import (
    Config,
    OptimizerConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "Config",
    "OptimizerConfig",
    "LoggingConfig",
    "load_config",
]
