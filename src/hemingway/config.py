"""Configuration loader with YAML and environment variable support.

Reads ``hemingway.yaml`` from the project root (or an explicit path) and
applies environment variable overrides using the HEMINGWAY_* prefix.

Environment variables:
- HEMINGWAY_PORT: Override the companion server port
- HEMINGWAY_MODEL: Override the copy generation model
- HEMINGWAY_SOURCE_PATTERNS: Comma-separated source glob patterns
- HEMINGWAY_EXCLUDE_PATTERNS: Comma-separated excluded directory names
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from hemingway.models.config import HemingwayConfig
from hemingway.utils.logging import get_logger


logger = get_logger(__name__)

CONFIG_FILENAME = "hemingway.yaml"


def load_config(
    project_root: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> HemingwayConfig:
    """Load configuration from YAML file with environment variable overrides.

    A missing config file is not an error: defaults apply.

    Args:
        project_root: Project directory (default: current working directory)
        config_path: Explicit config file (default: <project_root>/hemingway.yaml)

    Returns:
        Validated HemingwayConfig

    Raises:
        ValueError: If the YAML is malformed or fails validation
    """
    if project_root is None:
        project_root = Path.cwd()
    if config_path is None:
        config_path = project_root / CONFIG_FILENAME

    data: Dict[str, Any] = {}
    if config_path.exists():
        logger.info("config_loading", path=str(config_path))
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config_yaml_error", path=str(config_path), error=str(e))
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {config_path} must be a mapping")
    else:
        logger.info("config_defaults", path=str(config_path))

    data = _apply_env_overrides(data)
    data.setdefault("project_root", str(Path(project_root).resolve()))

    # Relative project roots in the file are relative to the file's directory
    root = Path(data["project_root"]).expanduser()
    if not root.is_absolute():
        data["project_root"] = str((config_path.parent / root).resolve())

    try:
        config = HemingwayConfig(**data)
    except ValidationError as e:
        logger.error("config_validation_error", path=str(config_path), error=str(e))
        raise ValueError(f"Configuration validation failed: {e}") from e

    logger.info(
        "config_loaded",
        project_root=config.project_root,
        source_patterns=config.source_patterns,
    )
    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    data = dict(data)

    if env_port := os.getenv("HEMINGWAY_PORT"):
        try:
            data["port"] = int(env_port)
        except ValueError:
            pass  # Invalid value, ignore

    if env_model := os.getenv("HEMINGWAY_MODEL"):
        data["model"] = env_model

    if env_sources := os.getenv("HEMINGWAY_SOURCE_PATTERNS"):
        data["source_patterns"] = _split_list(env_sources)

    if env_excludes := os.getenv("HEMINGWAY_EXCLUDE_PATTERNS"):
        data["exclude_patterns"] = _split_list(env_excludes)

    return data


def _split_list(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


def render_config_template() -> str:
    """Return the hemingway.yaml scaffold written by ``hemingway init``."""
    defaults = HemingwayConfig()
    template = {
        "port": defaults.port,
        "model": defaults.model,
        "source_patterns": defaults.source_patterns,
        "exclude_patterns": defaults.exclude_patterns,
        "shortcut": defaults.shortcut,
    }
    header = (
        "# Hemingway configuration\n"
        "# source_patterns: globs (relative to this file) of files that hold page copy\n"
        "# exclude_patterns: directory names that are never scanned\n"
        "# port, model, shortcut: read by the companion server and page overlay only\n"
    )
    return header + yaml.safe_dump(template, sort_keys=False)
