"""FastMCP tool registrations.

Thin adapters: collect the wire arguments, build a ToolContext bound to
the request's progress channel, delegate to the handler from the
lifespan context, and return the handler's envelope as a CallToolResult
so per-item ``_meta`` and ``structuredContent`` survive intact.
Handler errors propagate; FastMCP reports them as isError results.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal

from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..models import ToolName, ToolResponse
from ..schemas import MAX_FALLBACK_PROVIDERS
from ..tool_handlers import ToolContext, ToolHandler
from .definitions import (
    PARAM_DESCRIPTIONS as D,
    TOOL_ANNOTATIONS,
    TOOL_DESCRIPTIONS,
    model_description,
)


def _get_handler(ctx: Context, tool: ToolName) -> ToolHandler:
    """Get a tool handler from lifespan context."""
    return ctx.request_context.lifespan_context["handlers"][tool.value]


def _tool_context(ctx: Context) -> ToolContext:
    """Bind progress notifications to this request.

    Chunk notifications carry no progress value of their own, so a
    running counter is reported for them.
    """
    meta = ctx.request_context.meta
    token = meta.progressToken if meta is not None else None
    step = 0.0

    async def send_progress(
        message: str,
        progress: float | None = None,
        total: float | None = None,
    ) -> None:
        nonlocal step
        step = progress if progress is not None else step + 1
        await ctx.report_progress(step, total, message)

    return ToolContext(progress_token=token, send_progress=send_progress)


def _arguments(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def to_call_tool_result(response: ToolResponse) -> CallToolResult:
    return CallToolResult.model_validate(response.to_dict())


def register_tools(mcp: FastMCP) -> None:
    """Register all tools with the FastMCP instance."""

    @mcp.tool(
        name=ToolName.CLAUDE.value,
        description=TOOL_DESCRIPTIONS[ToolName.CLAUDE],
        annotations=TOOL_ANNOTATIONS[ToolName.CLAUDE],
        structured_output=False,
    )
    async def claude(
        prompt: Annotated[str, Field(description=D["prompt"])],
        sessionId: Annotated[str | None, Field(description=D["sessionId"])] = None,  # noqa: N803
        resetSession: Annotated[bool | None, Field(description=D["resetSession"])] = None,  # noqa: N803
        model: Annotated[
            str | None, Field(description=model_description(ToolName.CLAUDE))
        ] = None,
        workingDirectory: Annotated[  # noqa: N803
            str | None, Field(description=D["workingDirectory"])
        ] = None,
        allowedTools: Annotated[str | None, Field(description=D["allowedTools"])] = None,  # noqa: N803
        dangerouslySkipPermissions: Annotated[  # noqa: N803
            bool | None, Field(description=D["dangerouslySkipPermissions"])
        ] = None,
        outputFormat: Annotated[  # noqa: N803
            Literal["text", "json", "stream-json"] | None,
            Field(description=D["outputFormat"]),
        ] = None,
        maxTurns: Annotated[int | None, Field(description=D["maxTurns"])] = None,  # noqa: N803
        routerBaseUrl: Annotated[str | None, Field(description=D["routerBaseUrl"])] = None,  # noqa: N803
        fallbackProviders: Annotated[  # noqa: N803
            list[dict[str, Any]] | None,
            Field(description=D["fallbackProviders"], max_length=MAX_FALLBACK_PROVIDERS),
        ] = None,
        ctx: Context = None,
    ) -> CallToolResult:
        handler = _get_handler(ctx, ToolName.CLAUDE)
        response = await handler.execute(
            _arguments(
                prompt=prompt,
                sessionId=sessionId,
                resetSession=resetSession,
                model=model,
                workingDirectory=workingDirectory,
                allowedTools=allowedTools,
                dangerouslySkipPermissions=dangerouslySkipPermissions,
                outputFormat=outputFormat,
                maxTurns=maxTurns,
                routerBaseUrl=routerBaseUrl,
                fallbackProviders=fallbackProviders,
            ),
            _tool_context(ctx),
        )
        return to_call_tool_result(response)

    @mcp.tool(
        name=ToolName.REVIEW.value,
        description=TOOL_DESCRIPTIONS[ToolName.REVIEW],
        annotations=TOOL_ANNOTATIONS[ToolName.REVIEW],
        structured_output=False,
    )
    async def review(
        prompt: Annotated[str | None, Field(description=D["reviewPrompt"])] = None,
        uncommitted: Annotated[bool | None, Field(description=D["uncommitted"])] = None,
        base: Annotated[str | None, Field(description=D["base"])] = None,
        commit: Annotated[str | None, Field(description=D["commit"])] = None,
        title: Annotated[str | None, Field(description=D["title"])] = None,
        model: Annotated[
            str | None, Field(description=model_description(ToolName.REVIEW))
        ] = None,
        workingDirectory: Annotated[  # noqa: N803
            str | None, Field(description=D["reviewWorkingDirectory"])
        ] = None,
        ctx: Context = None,
    ) -> CallToolResult:
        handler = _get_handler(ctx, ToolName.REVIEW)
        response = await handler.execute(
            _arguments(
                prompt=prompt,
                uncommitted=uncommitted,
                base=base,
                commit=commit,
                title=title,
                model=model,
                workingDirectory=workingDirectory,
            ),
            _tool_context(ctx),
        )
        return to_call_tool_result(response)

    @mcp.tool(
        name=ToolName.PING.value,
        description=TOOL_DESCRIPTIONS[ToolName.PING],
        annotations=TOOL_ANNOTATIONS[ToolName.PING],
        structured_output=False,
    )
    async def ping(
        message: Annotated[str | None, Field(description=D["message"])] = None,
        ctx: Context = None,
    ) -> CallToolResult:
        handler = _get_handler(ctx, ToolName.PING)
        response = await handler.execute(_arguments(message=message))
        return to_call_tool_result(response)

    @mcp.tool(
        name=ToolName.HELP.value,
        description=TOOL_DESCRIPTIONS[ToolName.HELP],
        annotations=TOOL_ANNOTATIONS[ToolName.HELP],
        structured_output=False,
    )
    async def help(ctx: Context = None) -> CallToolResult:  # noqa: A001
        handler = _get_handler(ctx, ToolName.HELP)
        response = await handler.execute({}, _tool_context(ctx))
        return to_call_tool_result(response)

    @mcp.tool(
        name=ToolName.LIST_SESSIONS.value,
        description=TOOL_DESCRIPTIONS[ToolName.LIST_SESSIONS],
        annotations=TOOL_ANNOTATIONS[ToolName.LIST_SESSIONS],
        structured_output=False,
    )
    async def list_sessions(ctx: Context = None) -> CallToolResult:
        handler = _get_handler(ctx, ToolName.LIST_SESSIONS)
        response = await handler.execute({})
        return to_call_tool_result(response)
