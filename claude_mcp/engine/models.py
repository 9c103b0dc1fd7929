"""Core data models for sessions, invocations, and tool responses.

All dataclasses and enums live here so the store, the command builder,
the executor, and the handlers can share them without circular imports.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


class ToolName(str, Enum):
    """Names of the tools exposed over MCP."""
    CLAUDE = "claude"
    REVIEW = "review"
    PING = "ping"
    HELP = "help"
    LIST_SESSIONS = "listSessions"


class OutputFormat(str, Enum):
    """Values accepted by the CLI's --output-format flag."""
    TEXT = "text"
    JSON = "json"
    STREAM_JSON = "stream-json"


def _make_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConversationTurn:
    """One prompt/response pair recorded against a session."""
    prompt: str
    response: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass
class Session:
    """Conversation state tracked across calls under one session id.

    ``native_session_id`` is the handle the CLI issued for its own
    resumable conversation; it stays None until a fresh invocation
    returns one.
    """
    session_id: str = field(default_factory=_make_id)
    created_at: datetime = field(default_factory=_utcnow)
    last_accessed_at: datetime = field(default_factory=_utcnow)
    turns: list[ConversationTurn] = field(default_factory=list)
    native_session_id: str | None = None

    def touch(self) -> None:
        self.last_accessed_at = _utcnow()

    @property
    def turn_count(self) -> int:
        return len(self.turns)

    def snapshot(self) -> Session:
        """Copy that callers can read without reaching the stored turn list."""
        return Session(
            session_id=self.session_id,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
            turns=list(self.turns),
            native_session_id=self.native_session_id,
        )


@dataclass(frozen=True)
class SessionSummary:
    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    turn_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "lastAccessedAt": self.last_accessed_at.isoformat(),
            "turnCount": self.turn_count,
        }


@dataclass(frozen=True)
class FallbackProvider:
    """Alternate endpoint/model pair declared on a request.

    Accepted for interface compatibility; no retry logic consumes it.
    """
    router_base_url: str | None = None
    model: str | None = None


@dataclass
class InvocationRequest:
    """Validated parameters for a single claude tool call."""
    prompt: str
    session_id: str | None = None
    reset_session: bool = False
    model: str | None = None
    working_directory: str | None = None
    allowed_tools: str | None = None
    skip_permissions: bool = False
    output_format: OutputFormat | None = None
    max_turns: int | None = None
    router_base_url: str | None = None
    fallback_providers: list[FallbackProvider] = field(default_factory=list)


@dataclass(frozen=True)
class CommandPlan:
    """The argument list chosen for one invocation and why."""
    args: list[str]
    model: str
    resume: bool = False
    session_id: str | None = None
    native_session_id: str | None = None


@dataclass(frozen=True)
class CommandResult:
    """Raw output captured from one CLI run."""
    stdout: str
    stderr: str
    returncode: int = 0


@dataclass(frozen=True)
class StructuredOutput:
    """Stdout parsed as a JSON object.

    ``result`` and ``session_id`` are None when the object lacks them.
    """
    data: dict[str, Any]
    result: str | None = None
    session_id: str | None = None


@dataclass(frozen=True)
class UnstructuredOutput:
    """Stdout that was not a JSON object."""
    text: str


ParsedOutput = Union[StructuredOutput, UnstructuredOutput]


@dataclass(frozen=True)
class InvocationResult:
    """Captured output plus its parsed form."""
    command_result: CommandResult
    parsed: ParsedOutput

    @property
    def native_session_id(self) -> str | None:
        if isinstance(self.parsed, StructuredOutput):
            return self.parsed.session_id
        return None

    def response_text(self, no_output: str) -> str:
        """Human-readable text, falling back to stdout, stderr, then *no_output*."""
        if isinstance(self.parsed, StructuredOutput):
            if self.parsed.result is not None:
                return self.parsed.result
            return self.command_result.stdout
        return (
            self.command_result.stdout
            or self.command_result.stderr
            or no_output
        )


@dataclass
class ContentItem:
    """A text content item with optional per-item metadata."""
    text: str
    meta: dict[str, Any] | None = None
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "text": self.text}
        if self.meta is not None:
            d["_meta"] = self.meta
        return d


@dataclass
class ToolResponse:
    """Response envelope returned by every tool handler."""
    content: list[ContentItem]
    structured_content: dict[str, Any] | None = None

    @classmethod
    def from_text(
        cls,
        text: str,
        meta: dict[str, Any] | None = None,
        structured_content: dict[str, Any] | None = None,
    ) -> ToolResponse:
        return cls(
            content=[ContentItem(text=text, meta=meta)],
            structured_content=structured_content,
        )

    @property
    def text(self) -> str:
        return self.content[0].text if self.content else ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"content": [item.to_dict() for item in self.content]}
        if self.structured_content is not None:
            d["structuredContent"] = self.structured_content
        return d
