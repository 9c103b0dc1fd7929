from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from claude_mcp.engine.config import ServerConfig
from claude_mcp.engine.executor import CommandExecutor
from claude_mcp.engine.models import CommandResult
from claude_mcp.engine.session_store import InMemorySessionStore


@pytest.fixture(autouse=True)
def _clear_model_env(monkeypatch):
    monkeypatch.delenv("CLAUDE_DEFAULT_MODEL", raising=False)


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def executor() -> CommandExecutor:
    """Executor whose run() is an AsyncMock returning empty output."""
    runner = CommandExecutor()
    runner.run = AsyncMock(return_value=CommandResult(stdout="", stderr=""))
    return runner
