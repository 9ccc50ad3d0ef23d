"""Configuration management for the plan optimiser."""

from dataclasses import dataclass, field
from typing import Optional
import yaml
from pathlib import Path


@dataclass
class OptimizerConfig:
    """Configuration for the plan optimiser."""

    enable_projection_pushdown: bool = True
    enable_join_reordering: bool = True  # False: materialise candidates in query order


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "WARNING"
    structured: bool = False
    log_file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    catalogue: Optional[str] = None
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        catalogue: data/company.cat

        optimizer:
          enable_projection_pushdown: true
          enable_join_reordering: true

        logging:
          level: DEBUG
          structured: false
          log_file: relopt.log
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    optimizer_data = data.get("optimizer") or {}
    optimizer = OptimizerConfig(**optimizer_data)

    logging_data = data.get("logging") or {}
    logging_config = LoggingConfig(**logging_data)

    catalogue = data.get("catalogue")
    if catalogue is not None and not Path(catalogue).is_absolute():
        # Relative catalogue paths are resolved against the config file
        catalogue = str(path.parent / catalogue)

    return Config(catalogue=catalogue, optimizer=optimizer, logging=logging_config)
