"""
Project settings loaded from ``.iacgraph/config.yaml``.

Example:

    graph:
      max_nodes: 5000
      max_edges_per_node: 50
    scoring:
      heuristic_weight: 0.5
      explicit_bonus: 15
"""

import logging
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .config import CONFIG_FILE
from .core.exceptions import ConfigError
from .scoring.engine import ScoringConfig
from .service import GraphServiceConfig

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    graph: GraphServiceConfig = Field(default_factory=GraphServiceConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


def load_settings(path: Union[str, Path, None] = None) -> Settings:
    """
    Load settings from a YAML file, falling back to defaults when it is absent.

    Raises:
        ConfigError: If the file is not valid YAML or holds invalid values.
    """
    config_path = Path(path) if path is not None else CONFIG_FILE
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return Settings()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(str(config_path), f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(str(config_path), "Top-level document must be a mapping")

    try:
        settings = Settings.model_validate({k: v for k, v in data.items() if k in ("graph", "scoring") and v is not None})
    except ValidationError as e:
        raise ConfigError(str(config_path), str(e)) from e

    logger.debug("Loaded settings from %s", config_path)
    return settings


def find_config(start: Optional[Path] = None) -> Optional[Path]:
    """Walk up from ``start`` looking for a project config file."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE
        if candidate.exists():
            return candidate
    return None
