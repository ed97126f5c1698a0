"""Build configuration file loading."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import GenerationConfig

logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {path}")
    return data


def parse_config(data: dict[str, Any], base_dir: Path) -> GenerationConfig:
    """Validate raw configuration data.

    Args:
        data: Mapping with ``project`` and ``templates`` sections
        base_dir: Directory relative project paths are anchored to

    Returns:
        Validated generation configuration
    """
    project = dict(data.get("project") or {})
    basedir = Path(project.get("basedir", "."))
    if not basedir.is_absolute():
        basedir = base_dir / basedir
    project["basedir"] = basedir.resolve()

    try:
        return GenerationConfig.model_validate({**data, "project": project})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid generation configuration:\n{e}") from e


def load_config(path: Path) -> GenerationConfig:
    """Load and validate a YAML build file.

    Args:
        path: Path to the build file

    Returns:
        Validated generation configuration
    """
    logger.debug(f"Loading configuration: {path}")
    config = parse_config(_read_yaml(path), path.resolve().parent)
    logger.debug(
        f"Config: {len(config.templates)} unit(s), basedir={config.project.basedir}"
    )
    return config
