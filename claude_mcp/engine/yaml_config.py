"""YAML configuration loader.

Overlays a ``server:`` section from a YAML file on top of the
environment-derived ServerConfig. When no file is given, env vars
work exactly as before.

Example YAML:
    server:
      claude_command: /opt/claude/bin/claude
      default_model: claude-opus-4-6
      structured_content_enabled: true
      log_level: DEBUG
"""
from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path

import yaml

from .config import ServerConfig, is_truthy

logger = logging.getLogger(__name__)

_BOOL_FIELDS = {"structured_content_enabled"}


def load_yaml_config(
    path: str | Path,
    base: ServerConfig | None = None,
) -> ServerConfig:
    """Load *path* and apply its ``server`` section over *base*.

    Unknown keys are logged and ignored.
    """
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(
            "load_yaml_config: config file not found at %s", path.absolute()
        )
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    config = base or ServerConfig.from_env()
    section = raw.get("server") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'server' section in {path} must be a mapping")

    known = {f.name for f in fields(ServerConfig)}
    for key, value in section.items():
        if key not in known:
            logger.warning("Ignoring unknown server config key %r in %s", key, path)
            continue
        if key in _BOOL_FIELDS and not isinstance(value, bool):
            value = is_truthy(str(value))
        elif key == "log_level" and isinstance(value, str):
            value = value.upper()
        setattr(config, key, value)

    logger.info(
        "Loaded YAML config %s (%d server keys)", path.name, len(section)
    )
    return config
