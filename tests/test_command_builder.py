"""Tests for CLI argument construction and context synthesis."""
from __future__ import annotations

from claude_mcp.engine.command_builder import (
    build_context_prompt,
    build_fresh_args,
    build_resume_args,
    build_review_args,
    build_review_prompt,
    plan_invocation,
    resolve_model,
)
from claude_mcp.engine.models import ConversationTurn, InvocationRequest, OutputFormat
from claude_mcp.engine.session_store import InMemorySessionStore

DEFAULT = "claude-sonnet-4-6"
ENV_VAR = "CLAUDE_DEFAULT_MODEL"


def _plan(request: InvocationRequest, store: InMemorySessionStore, environ=None):
    return plan_invocation(
        request,
        store,
        default_model=DEFAULT,
        env_var=ENV_VAR,
        environ=environ if environ is not None else {},
    )


# ── resolve_model ──


def test_resolve_model_prefers_explicit():
    env = {ENV_VAR: "claude-opus-4-6"}
    assert resolve_model("custom", default_model=DEFAULT, env_var=ENV_VAR, environ=env) == "custom"


def test_resolve_model_env_then_default():
    env = {ENV_VAR: "claude-opus-4-6"}
    assert resolve_model(None, default_model=DEFAULT, env_var=ENV_VAR, environ=env) == "claude-opus-4-6"
    assert resolve_model(None, default_model=DEFAULT, env_var=ENV_VAR, environ={}) == DEFAULT
    # Empty strings count as unset
    assert resolve_model("", default_model=DEFAULT, env_var=ENV_VAR, environ={ENV_VAR: ""}) == DEFAULT


# ── fresh / resume args ──


def test_fresh_args_minimal():
    args = build_fresh_args("hi", model=DEFAULT)
    assert args == ["-p", "hi", "--model", DEFAULT, "--output-format", "json"]


def test_fresh_args_all_flags_in_order():
    args = build_fresh_args(
        "do it",
        model="m",
        output_format=OutputFormat.TEXT,
        max_turns=3,
        skip_permissions=True,
        allowed_tools="Read,Edit",
        working_directory="/repo",
    )
    assert args == [
        "-p", "do it",
        "--model", "m",
        "--output-format", "text",
        "--max-turns", "3",
        "--dangerously-skip-permissions",
        "--allowedTools", "Read,Edit",
        "--cwd", "/repo",
    ]


def test_resume_args_omit_start_only_flags():
    args = build_resume_args(
        "next",
        native_session_id="abc-123",
        model="m",
        output_format="stream-json",
        working_directory="/repo",
    )
    assert args == [
        "-p", "next",
        "--resume", "abc-123",
        "--model", "m",
        "--output-format", "stream-json",
        "--cwd", "/repo",
    ]


def test_prompt_is_single_argument():
    prompt = "rm -rf / ; echo $(whoami) && `id`"
    args = build_fresh_args(prompt, model="m")
    assert args[1] == prompt


# ── context synthesis ──


def test_context_prompt_without_turns_is_unchanged():
    assert build_context_prompt([], "task") == "task"


def test_context_prompt_text_and_code_turns():
    turns = [
        ConversationTurn(prompt="old", response="ignored"),
        ConversationTurn(prompt="what is x", response="x is a variable"),
        ConversationTurn(prompt="write it", response="def foo():\n    return 1"),
    ]
    prompt = build_context_prompt(turns, "now test it")
    assert prompt == (
        "Context: what is x -> x is a variable...\n"
        "Previous code context: def foo():\n    return 1...\n"
        "\nTask: now test it"
    )
    assert "old" not in prompt


def test_context_prompt_truncates_responses():
    turns = [
        ConversationTurn(prompt="a", response="t" * 500),
        ConversationTurn(prompt="b", response="function " + "c" * 500),
    ]
    prompt = build_context_prompt(turns, "go")
    lines = prompt.split("\n")
    assert lines[0] == "Context: a -> " + "t" * 100 + "..."
    assert lines[1] == "Previous code context: " + ("function " + "c" * 500)[:200] + "..."


def test_context_prompt_is_bounded_by_window():
    turns = [ConversationTurn(prompt=f"p{i}", response="r" * 1000) for i in range(10)]
    prompt = build_context_prompt(turns, "final")
    assert prompt.count("Context:") == 2
    assert "p8" in prompt and "p9" in prompt
    assert "p7" not in prompt
    assert prompt.endswith("\n\nTask: final")


# ── plan_invocation ──


def test_plan_without_session_is_fresh():
    store = InMemorySessionStore()
    plan = _plan(InvocationRequest(prompt="hello"), store)
    assert plan.resume is False
    assert plan.session_id is None
    assert plan.args == ["-p", "hello", "--model", DEFAULT, "--output-format", "json"]
    assert len(store) == 0


def test_plan_new_session_is_created_and_fresh():
    store = InMemorySessionStore()
    plan = _plan(InvocationRequest(prompt="hello", session_id="s1"), store)
    assert plan.resume is False
    assert plan.args[1] == "hello"
    assert store.get_session("s1") is not None


def test_plan_resumes_when_native_handle_exists():
    store = InMemorySessionStore()
    store.ensure_session("s1")
    store.set_native_session_id("s1", "abc-123")
    store.add_turn("s1", ConversationTurn(prompt="q", response="a"))

    plan = _plan(
        InvocationRequest(
            prompt="again",
            session_id="s1",
            max_turns=4,
            skip_permissions=True,
            allowed_tools="Read",
        ),
        store,
    )
    assert plan.resume is True
    assert plan.native_session_id == "abc-123"
    assert plan.args[:4] == ["-p", "again", "--resume", "abc-123"]
    assert "--max-turns" not in plan.args
    assert "--dangerously-skip-permissions" not in plan.args
    assert "--allowedTools" not in plan.args


def test_plan_synthesizes_context_without_native_handle():
    store = InMemorySessionStore()
    store.add_turn("s1", ConversationTurn(prompt="q", response="a"))
    plan = _plan(InvocationRequest(prompt="follow up", session_id="s1"), store)
    assert plan.resume is False
    assert plan.args[1] == "Context: q -> a...\n\nTask: follow up"


def test_plan_reset_forces_fresh_without_context():
    store = InMemorySessionStore()
    store.ensure_session("s1")
    store.set_native_session_id("s1", "abc-123")
    store.add_turn("s1", ConversationTurn(prompt="q", response="a"))

    plan = _plan(
        InvocationRequest(prompt="start over", session_id="s1", reset_session=True),
        store,
    )
    assert plan.resume is False
    assert "--resume" not in plan.args
    assert plan.args[1] == "start over"
    assert store.get_session("s1").turns == []


def test_plan_model_from_environment():
    store = InMemorySessionStore()
    plan = _plan(InvocationRequest(prompt="x"), store, environ={ENV_VAR: "claude-opus-4-6"})
    assert plan.model == "claude-opus-4-6"
    assert plan.args[plan.args.index("--model") + 1] == "claude-opus-4-6"


# ── review ──


def test_review_prompt_default():
    assert build_review_prompt() == (
        "Please review the current code changes and provide feedback."
    )


def test_review_prompt_context_only():
    prompt = build_review_prompt(uncommitted=True, title="Cleanup")
    assert prompt == (
        "Review staged, unstaged, and untracked changes (working tree diff). "
        "Review title: Cleanup. Please provide a detailed code review."
    )


def test_review_prompt_with_base_commit_and_prompt():
    prompt = build_review_prompt(prompt="Focus on security", base="main", commit="abc123")
    assert prompt == (
        "Review changes against base branch: main. "
        "Review changes introduced by commit: abc123. "
        "Focus on security"
    )


def test_review_prompt_user_prompt_alone():
    assert build_review_prompt(prompt="Look at naming") == "Look at naming"


def test_review_args():
    assert build_review_args("review it", model="m") == [
        "-p", "review it", "--model", "m", "--output-format", "json",
    ]
    assert build_review_args("r", model="m", working_directory="/w")[-2:] == ["--cwd", "/w"]
