"""Configuration loaded from environment variables.

All settings have sensible defaults. Override via CLAUDE_* env vars
or a YAML file (see yaml_config.py).
"""
from __future__ import annotations

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .. import __version__

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-6"
CLAUDE_DEFAULT_MODEL_ENV_VAR = "CLAUDE_DEFAULT_MODEL"

# Documented model options; any string is accepted.
AVAILABLE_CLAUDE_MODELS = (
    "claude-sonnet-4-6",
    "claude-opus-4-6",
    "claude-haiku-4-5-20251001",
)

_TRUTHY = {"1", "true", "yes", "on"}

# Async sink for progress notifications.
# Signature: async def sink(message, progress=None, total=None) -> None
ProgressSink = Callable[[str, float | None, float | None], Awaitable[None]]


def is_truthy(value: str | None) -> bool:
    """True for 1/true/yes/on, case-insensitive."""
    if not value:
        return False
    return value.strip().lower() in _TRUTHY


@dataclass
class ServerConfig:
    """MCP server configuration."""

    name: str = "claude-mcp-server"
    version: str = __version__

    # External CLI binary
    claude_command: str = "claude"

    # Hardcoded fallback when neither the request nor the
    # environment names a model.
    default_model: str = DEFAULT_CLAUDE_MODEL
    # Read on every call so a live environment change is honored.
    default_model_env_var: str = CLAUDE_DEFAULT_MODEL_ENV_VAR

    # Duplicate tool metadata into structuredContent in addition to
    # content[0]._meta. Some clients mis-handle structuredContent.
    structured_content_enabled: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Load configuration from environment variables."""
        config = cls(
            claude_command=os.getenv("CLAUDE_CLI_PATH", cls.claude_command),
            structured_content_enabled=is_truthy(
                os.getenv("STRUCTURED_CONTENT_ENABLED")
            ),
            log_level=os.getenv("CLAUDE_MCP_LOG_LEVEL", cls.log_level).upper(),
            log_file=os.getenv("CLAUDE_MCP_LOG_FILE") or None,
        )
        logger.debug(
            "ServerConfig.from_env: command=%s structured_content=%s log_level=%s",
            config.claude_command,
            config.structured_content_enabled,
            config.log_level,
        )
        return config

    def resolve_default_model(self) -> str:
        """Environment default if set, otherwise the hardcoded fallback."""
        return os.getenv(self.default_model_env_var) or self.default_model
