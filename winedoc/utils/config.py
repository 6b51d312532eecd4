"""Configuration management for the wine document parser.

Loads and validates YAML configuration with sensible defaults for
classification thresholds, field parsing limits and logging.
"""

import logging
from datetime import date
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ClassifierConfig(BaseModel):
    """Thresholds for indicator-based document classification."""

    floor: float = 0.4
    tie_band: float = 0.1
    max_confidence: float = 0.95
    density_weight: float = 4.0
    vocabulary_path: str | None = None


class ParsingConfig(BaseModel):
    """Range limits applied by the field extractors."""

    min_vintage: int = 1800
    max_vintage: int | None = None
    max_alcohol: float = 25.0

    def vintage_upper_bound(self) -> int:
        """Return the latest acceptable vintage (next year unless pinned)."""
        if self.max_vintage is not None:
            return self.max_vintage
        return date.today().year + 1


class LoggingConfig(BaseModel):
    """Configuration for the root logger."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseModel):
    """Top-level application configuration."""

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    parsing: ParsingConfig = Field(default_factory=ParsingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
