"""Argument construction for the claude CLI.

Decides between resuming the CLI's own conversation (``--resume``) and
starting fresh, synthesizes bounded context from prior turns when no
resume handle exists, and maps request fields onto CLI flags.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence

from .models import (
    CommandPlan,
    ConversationTurn,
    InvocationRequest,
    OutputFormat,
)
from .session_store import SessionStore

logger = logging.getLogger(__name__)

PRINT_FLAG = "-p"
RESUME_FLAG = "--resume"
MODEL_FLAG = "--model"
OUTPUT_FORMAT_FLAG = "--output-format"
MAX_TURNS_FLAG = "--max-turns"
SKIP_PERMISSIONS_FLAG = "--dangerously-skip-permissions"
ALLOWED_TOOLS_FLAG = "--allowedTools"
CWD_FLAG = "--cwd"

DEFAULT_OUTPUT_FORMAT = OutputFormat.JSON

# Context synthesis bounds
CONTEXT_TURN_WINDOW = 2
CODE_CONTEXT_CHARS = 200
TEXT_CONTEXT_CHARS = 100
_CODE_MARKERS = ("function", "def ")


def resolve_model(
    requested: str | None,
    *,
    default_model: str,
    env_var: str,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Explicit model, else the env-configured default, else *default_model*."""
    if requested:
        return requested
    env = os.environ if environ is None else environ
    return env.get(env_var) or default_model


def _output_format_value(output_format: OutputFormat | str | None) -> str:
    if output_format is None:
        return DEFAULT_OUTPUT_FORMAT.value
    if isinstance(output_format, OutputFormat):
        return output_format.value
    return output_format


def build_context_prompt(
    turns: Sequence[ConversationTurn],
    new_prompt: str,
) -> str:
    """Prefix *new_prompt* with a compressed view of the last few turns.

    Only the last CONTEXT_TURN_WINDOW turns are used and each response is
    truncated, so the result stays bounded however long the history is.
    """
    if not turns:
        return new_prompt

    lines: list[str] = []
    for turn in turns[-CONTEXT_TURN_WINDOW:]:
        if any(marker in turn.response for marker in _CODE_MARKERS):
            lines.append(
                f"Previous code context: {turn.response[:CODE_CONTEXT_CHARS]}..."
            )
        else:
            lines.append(
                f"Context: {turn.prompt} -> {turn.response[:TEXT_CONTEXT_CHARS]}..."
            )
    return "\n".join(lines) + f"\n\nTask: {new_prompt}"


def build_resume_args(
    prompt: str,
    *,
    native_session_id: str,
    model: str,
    output_format: OutputFormat | str | None = None,
    working_directory: str | None = None,
) -> list[str]:
    """Arguments for continuing an existing CLI conversation.

    Max-turns, permission bypass and the tool allowlist are only applied
    when a conversation starts, so they are never emitted here.
    """
    args = [
        PRINT_FLAG, prompt,
        RESUME_FLAG, native_session_id,
        MODEL_FLAG, model,
        OUTPUT_FORMAT_FLAG, _output_format_value(output_format),
    ]
    if working_directory:
        args.extend([CWD_FLAG, working_directory])
    return args


def build_fresh_args(
    prompt: str,
    *,
    model: str,
    output_format: OutputFormat | str | None = None,
    max_turns: int | None = None,
    skip_permissions: bool = False,
    allowed_tools: str | None = None,
    working_directory: str | None = None,
) -> list[str]:
    """Arguments for a new CLI conversation."""
    args = [
        PRINT_FLAG, prompt,
        MODEL_FLAG, model,
        OUTPUT_FORMAT_FLAG, _output_format_value(output_format),
    ]
    if max_turns:
        args.extend([MAX_TURNS_FLAG, str(max_turns)])
    if skip_permissions:
        args.append(SKIP_PERMISSIONS_FLAG)
    if allowed_tools:
        args.extend([ALLOWED_TOOLS_FLAG, allowed_tools])
    if working_directory:
        args.extend([CWD_FLAG, working_directory])
    return args


def plan_invocation(
    request: InvocationRequest,
    store: SessionStore,
    *,
    default_model: str,
    env_var: str,
    environ: Mapping[str, str] | None = None,
) -> CommandPlan:
    """Prepare session state and choose the CLI arguments for *request*.

    With a session id the session is ensured (and reset first when asked).
    The native handle is looked up after the reset: if one exists the call
    resumes it, otherwise it starts fresh, folding recent turns into the
    prompt when the session has history.
    """
    model = resolve_model(
        request.model,
        default_model=default_model,
        env_var=env_var,
        environ=environ,
    )
    session_id = request.session_id
    native_session_id: str | None = None
    prompt = request.prompt

    if session_id:
        store.ensure_session(session_id)
        if request.reset_session:
            store.reset_session(session_id)
        native_session_id = store.get_native_session_id(session_id)
        if not native_session_id:
            session = store.get_session(session_id)
            if session is not None and session.turns:
                prompt = build_context_prompt(session.turns, request.prompt)

    if native_session_id:
        logger.debug(
            "Resuming CLI conversation %s for session %s",
            native_session_id, session_id,
        )
        args = build_resume_args(
            prompt,
            native_session_id=native_session_id,
            model=model,
            output_format=request.output_format,
            working_directory=request.working_directory,
        )
        return CommandPlan(
            args=args,
            model=model,
            resume=True,
            session_id=session_id,
            native_session_id=native_session_id,
        )

    args = build_fresh_args(
        prompt,
        model=model,
        output_format=request.output_format,
        max_turns=request.max_turns,
        skip_permissions=request.skip_permissions,
        allowed_tools=request.allowed_tools,
        working_directory=request.working_directory,
    )
    return CommandPlan(args=args, model=model, session_id=session_id)


def build_review_prompt(
    *,
    prompt: str | None = None,
    uncommitted: bool = False,
    base: str | None = None,
    commit: str | None = None,
    title: str | None = None,
) -> str:
    """Turn structured review options into a single review prompt."""
    context: list[str] = []
    if uncommitted:
        context.append(
            "Review staged, unstaged, and untracked changes (working tree diff)."
        )
    if base:
        context.append(f"Review changes against base branch: {base}.")
    if commit:
        context.append(f"Review changes introduced by commit: {commit}.")
    if title:
        context.append(f"Review title: {title}.")

    if prompt:
        return " ".join([*context, prompt])
    if context:
        return " ".join(context) + " Please provide a detailed code review."
    return "Please review the current code changes and provide feedback."


def build_review_args(
    review_prompt: str,
    *,
    model: str,
    working_directory: str | None = None,
) -> list[str]:
    """Reviews always start a fresh conversation with JSON output."""
    args = [
        PRINT_FLAG, review_prompt,
        MODEL_FLAG, model,
        OUTPUT_FORMAT_FLAG, DEFAULT_OUTPUT_FORMAT.value,
    ]
    if working_directory:
        args.extend([CWD_FLAG, working_directory])
    return args
