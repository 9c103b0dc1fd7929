"""Tests for ping, help, listSessions, and handler wiring."""
from __future__ import annotations

import json

import pytest

from claude_mcp.engine.errors import CommandExecutionError, ToolExecutionError
from claude_mcp.engine.models import CommandResult, ConversationTurn
from claude_mcp.engine.tool_handlers import (
    ClaudeToolHandler,
    HelpToolHandler,
    ListSessionsToolHandler,
    PingToolHandler,
    ToolContext,
    build_tool_handlers,
)


# ── ping ──


@pytest.mark.asyncio
async def test_ping_default():
    response = await PingToolHandler().execute({})
    assert response.text == "pong"
    assert response.content[0].meta is None


@pytest.mark.asyncio
async def test_ping_echoes_message():
    assert (await PingToolHandler().execute({"message": "hello"})).text == "hello"


@pytest.mark.asyncio
async def test_ping_echoes_empty_message():
    assert (await PingToolHandler().execute({"message": ""})).text == ""


# ── help ──


@pytest.mark.asyncio
async def test_help_returns_cli_help(executor):
    executor.run.return_value = CommandResult(stdout="Usage: claude [options]", stderr="")
    response = await HelpToolHandler(executor).execute({})
    assert response.text == "Usage: claude [options]"
    executor.run.assert_awaited_once_with(["--help"])


@pytest.mark.asyncio
async def test_help_empty_output(executor):
    response = await HelpToolHandler(executor).execute()
    assert response.text == "No help information available"


@pytest.mark.asyncio
async def test_help_failure(executor):
    executor.run.side_effect = CommandExecutionError("claude", "'claude' CLI not found")
    with pytest.raises(ToolExecutionError) as exc_info:
        await HelpToolHandler(executor).execute({})
    assert str(exc_info.value).startswith("Failed to execute help command: ")


# ── listSessions ──


@pytest.mark.asyncio
async def test_list_sessions_empty(store):
    response = await ListSessionsToolHandler(store).execute({})
    assert response.text == "No active sessions"


@pytest.mark.asyncio
async def test_list_sessions_json(store):
    store.ensure_session("a")
    store.add_turn("b", ConversationTurn(prompt="q", response="r"))

    response = await ListSessionsToolHandler(store).execute({})

    assert "\n  " in response.text
    data = json.loads(response.text)
    assert [d["id"] for d in data] == ["a", "b"]
    assert [d["turnCount"] for d in data] == [0, 1]
    assert set(data[0]) == {"id", "createdAt", "lastAccessedAt", "turnCount"}


# ── ToolContext ──


def test_tool_context_without_token_is_buffered():
    context = ToolContext()
    assert context.streaming is False
    assert context.output_forwarder() is None


@pytest.mark.asyncio
async def test_default_progress_sink_is_noop():
    await ToolContext().send_progress("message", 0, None)


# ── wiring ──


def test_build_tool_handlers_shares_store(config, store, executor):
    handlers = build_tool_handlers(config, store, executor)
    assert set(handlers) == {"claude", "review", "ping", "help", "listSessions"}
    claude = handlers["claude"]
    assert isinstance(claude, ClaudeToolHandler)
    assert claude.session_store is store
    assert handlers["listSessions"].session_store is store
    assert handlers["help"].executor is executor


def test_build_tool_handlers_defaults(config):
    config.claude_command = "/opt/bin/claude"
    handlers = build_tool_handlers(config)
    assert handlers["claude"].executor.command == "/opt/bin/claude"
    assert handlers["claude"].session_store is handlers["listSessions"].session_store
