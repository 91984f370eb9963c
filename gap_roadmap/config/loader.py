# gap_roadmap/config/loader.py
"""
YAML config loading.

The user config lives under the platformdirs config directory and is
written with defaults on first use; an explicit --config file is read as is.
"""

import logging
from pathlib import Path

import yaml
from platformdirs import user_config_path

from .schema import GapRoadmapConfig

logger = logging.getLogger(__name__)


def get_config_path() -> Path:
    """User config file path (the directory is created if needed)."""
    config_dir = user_config_path("gap-roadmap", ensure_exists=True)
    return config_dir / "config.yaml"


def load_config(path: Path | None = None) -> GapRoadmapConfig:
    """
    Load and validate the configuration.

    With no explicit path, the user config file is used and created with
    defaults if missing. An explicit path must exist.

    Args:
        path: Optional config file to load instead of the user config

    Returns:
        Validated GapRoadmapConfig

    Raises:
        FileNotFoundError: If an explicit path does not exist
        pydantic.ValidationError: If the file contains invalid values
    """
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return _read(path)

    config_path = get_config_path()

    if not config_path.exists():
        default_config = GapRoadmapConfig()
        config_dict = default_config.model_dump(mode="json")

        with config_path.open("w") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Created default config at {config_path}")
        return default_config

    return _read(config_path)


def _read(config_path: Path) -> GapRoadmapConfig:
    with config_path.open("r") as f:
        config_data = yaml.safe_load(f) or {}

    config = GapRoadmapConfig(**config_data)
    logger.info(f"Loaded config from {config_path}")
    return config
