"""Tool handlers: one class per MCP tool.

Each handler validates its arguments, drives the session store, the
command builder and the executor, and returns a ToolResponse. Errors
leave a handler only as ValidationError or ToolExecutionError.
"""
from __future__ import annotations

import abc
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .command_builder import (
    build_review_args,
    build_review_prompt,
    plan_invocation,
    resolve_model,
)
from .config import ProgressSink, ServerConfig
from .errors import ToolExecutionError, ValidationError
from .executor import CommandExecutor, OutputCallback
from .models import ConversationTurn, ToolName, ToolResponse
from .schemas import (
    ClaudeToolArgs,
    HelpToolArgs,
    ListSessionsToolArgs,
    PingToolArgs,
    ReviewToolArgs,
    format_validation_error,
)
from .session_store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)

NO_CLAUDE_OUTPUT = "No output from Claude"
NO_REVIEW_OUTPUT = "No review output from Claude"
NO_HELP_OUTPUT = "No help information available"
NO_SESSIONS = "No active sessions"


async def _no_progress(
    message: str,
    progress: float | None = None,
    total: float | None = None,
) -> None:
    return None


@dataclass
class ToolContext:
    """Per-call context handed to a handler by the transport.

    A progress token means the client asked for progress, which also
    switches CLI execution to streaming mode.
    """
    progress_token: str | int | None = None
    send_progress: ProgressSink = _no_progress

    @property
    def streaming(self) -> bool:
        return self.progress_token is not None

    def output_forwarder(self) -> OutputCallback | None:
        """Callback that relays each CLI output chunk as progress, if streaming."""
        if not self.streaming:
            return None

        async def forward(chunk: str) -> None:
            await self.send_progress(chunk, None, None)

        return forward


class ToolHandler(abc.ABC):
    """Validate, run, and convert failures into the error taxonomy."""

    tool_name: str
    failure_message: str

    async def execute(
        self,
        args: Mapping[str, Any] | None = None,
        context: ToolContext | None = None,
    ) -> ToolResponse:
        try:
            return await self._run(dict(args or {}), context or ToolContext())
        except ValidationError:
            raise
        except PydanticValidationError as exc:
            raise ValidationError(
                self.tool_name, format_validation_error(exc)
            ) from exc
        except Exception as exc:
            logger.error("%s tool failed: %s", self.tool_name, exc)
            raise ToolExecutionError(
                self.tool_name, self.failure_message, exc
            ) from exc

    @abc.abstractmethod
    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        """Handler body; may raise anything."""


class ClaudeToolHandler(ToolHandler):
    """Runs a task through the CLI with optional session continuity."""

    tool_name = ToolName.CLAUDE.value
    failure_message = "Failed to execute claude command"

    def __init__(
        self,
        session_store: SessionStore,
        executor: CommandExecutor,
        config: ServerConfig,
    ) -> None:
        self.session_store = session_store
        self.executor = executor
        self.config = config

    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        request = ClaudeToolArgs.model_validate(args).to_request()
        plan = plan_invocation(
            request,
            self.session_store,
            default_model=self.config.default_model,
            env_var=self.config.default_model_env_var,
        )

        await context.send_progress("Starting Claude execution...", 0, None)

        env_override = (
            {"ANTHROPIC_BASE_URL": request.router_base_url}
            if request.router_base_url
            else None
        )
        result = await self.executor.invoke(
            plan.args,
            env_override=env_override,
            on_output=context.output_forwarder(),
        )
        response = result.response_text(NO_CLAUDE_OUTPUT)

        if plan.session_id:
            # A resumed conversation keeps its existing handle.
            if not plan.resume and result.native_session_id:
                self.session_store.set_native_session_id(
                    plan.session_id, result.native_session_id
                )
            self.session_store.add_turn(
                plan.session_id,
                ConversationTurn(prompt=request.prompt, response=response),
            )

        # Metadata goes to content[0]._meta for clients that mis-read
        # structuredContent, and to structuredContent when enabled.
        metadata: dict[str, Any] = {"model": plan.model}
        if plan.session_id:
            metadata["sessionId"] = plan.session_id

        return ToolResponse.from_text(
            response,
            meta=metadata,
            structured_content=(
                dict(metadata) if self.config.structured_content_enabled else None
            ),
        )


class ReviewToolHandler(ToolHandler):
    """Code review as a one-shot CLI run; never touches sessions."""

    tool_name = ToolName.REVIEW.value
    failure_message = "Failed to execute claude review"

    def __init__(self, executor: CommandExecutor, config: ServerConfig) -> None:
        self.executor = executor
        self.config = config

    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        review = ReviewToolArgs.model_validate(args)
        if review.prompt and review.uncommitted:
            raise ValidationError(
                self.tool_name,
                "The review prompt cannot be combined with uncommitted=true. "
                "Use a base/commit review or omit the prompt.",
            )

        model = resolve_model(
            review.model,
            default_model=self.config.default_model,
            env_var=self.config.default_model_env_var,
        )
        review_prompt = build_review_prompt(
            prompt=review.prompt,
            uncommitted=bool(review.uncommitted),
            base=review.base,
            commit=review.commit,
            title=review.title,
        )
        cmd_args = build_review_args(
            review_prompt, model=model, working_directory=review.working_directory
        )

        await context.send_progress("Starting code review...", 0, None)

        result = await self.executor.invoke(
            cmd_args, on_output=context.output_forwarder()
        )

        metadata: dict[str, Any] = {"model": model}
        if review.base:
            metadata["base"] = review.base
        if review.commit:
            metadata["commit"] = review.commit

        return ToolResponse.from_text(
            result.response_text(NO_REVIEW_OUTPUT),
            meta=metadata,
            structured_content=(
                dict(metadata) if self.config.structured_content_enabled else None
            ),
        )


class PingToolHandler(ToolHandler):
    tool_name = ToolName.PING.value
    failure_message = "Failed to execute ping command"

    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        ping = PingToolArgs.model_validate(args)
        return ToolResponse.from_text("pong" if ping.message is None else ping.message)


class HelpToolHandler(ToolHandler):
    """Returns the CLI's own --help text verbatim."""

    tool_name = ToolName.HELP.value
    failure_message = "Failed to execute help command"

    def __init__(self, executor: CommandExecutor) -> None:
        self.executor = executor

    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        HelpToolArgs.model_validate(args)
        result = await self.executor.run(["--help"])
        return ToolResponse.from_text(result.stdout or NO_HELP_OUTPUT)


class ListSessionsToolHandler(ToolHandler):
    tool_name = ToolName.LIST_SESSIONS.value
    failure_message = "Failed to list sessions"

    def __init__(self, session_store: SessionStore) -> None:
        self.session_store = session_store

    async def _run(self, args: dict[str, Any], context: ToolContext) -> ToolResponse:
        ListSessionsToolArgs.model_validate(args)
        sessions = [s.to_dict() for s in self.session_store.list_sessions()]
        if not sessions:
            return ToolResponse.from_text(NO_SESSIONS)
        return ToolResponse.from_text(json.dumps(sessions, indent=2))


def build_tool_handlers(
    config: ServerConfig,
    session_store: SessionStore | None = None,
    executor: CommandExecutor | None = None,
) -> dict[str, ToolHandler]:
    """Wire every handler to one shared store and executor."""
    store = session_store if session_store is not None else InMemorySessionStore()
    runner = executor if executor is not None else CommandExecutor(config.claude_command)
    return {
        ToolName.CLAUDE.value: ClaudeToolHandler(store, runner, config),
        ToolName.REVIEW.value: ReviewToolHandler(runner, config),
        ToolName.PING.value: PingToolHandler(),
        ToolName.HELP.value: HelpToolHandler(runner),
        ToolName.LIST_SESSIONS.value: ListSessionsToolHandler(store),
    }
