"""Read the optional YAML config file and the .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger


def load_config(path: str | Path) -> dict[str, Any]:
    """Parse a YAML mapping with SafeLoader.

    A missing file, an empty file or a top-level non-mapping yields {}.
    Malformed YAML is logged and re-raised as yaml.YAMLError.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("Config file not found: {}", path)
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse config {}: {}", path, exc)
        raise

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config {}: top level is a {}, expected a mapping", path, type(data).__name__)
        return {}
    return data


def load_config_with_env(path: str | Path | None) -> dict[str, Any]:
    """Populate os.environ from .env (existing vars win), then load the YAML file if one was given."""
    from dotenv import load_dotenv

    load_dotenv(override=False)
    return load_config(path) if path is not None else {}
