"""Request schemas for the MCP tools.

Wire names are camelCase; attributes are snake_case and either form is
accepted. Unknown keys are ignored.
"""
from __future__ import annotations

import re
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .models import FallbackProvider, InvocationRequest, OutputFormat

SESSION_ID_MAX_LENGTH = 256
MAX_FALLBACK_PROVIDERS = 5
_SESSION_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _check_url(value: str | None) -> str | None:
    """Validate as an http(s) URL but keep the caller's exact spelling."""
    if value is None:
        return value
    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError:
        raise PydanticCustomError(
            "url", "Input should be a valid http or https URL"
        ) from None
    return value


class _ToolArgs(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ProviderEntry(_ToolArgs):
    router_base_url: str | None = None
    model: str | None = None

    @field_validator("router_base_url")
    @classmethod
    def _check_router_base_url(cls, value: str | None) -> str | None:
        return _check_url(value)


class ClaudeToolArgs(_ToolArgs):
    prompt: str
    session_id: str | None = None
    reset_session: bool | None = None
    model: str | None = None
    working_directory: str | None = None
    allowed_tools: str | None = None
    dangerously_skip_permissions: bool | None = None
    output_format: Literal["text", "json", "stream-json"] | None = None
    max_turns: PositiveInt | None = None
    router_base_url: str | None = None
    fallback_providers: list[ProviderEntry] | None = Field(
        default=None,
        max_length=MAX_FALLBACK_PROVIDERS,
        description="Ordered list of fallback providers to try if the primary call fails",
    )

    @field_validator("session_id")
    @classmethod
    def _check_session_id(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if len(value) > SESSION_ID_MAX_LENGTH:
            raise PydanticCustomError(
                "session_id_length",
                "Session ID must be 256 characters or fewer",
            )
        if not _SESSION_ID_RE.match(value):
            raise PydanticCustomError(
                "session_id_chars",
                "Session ID can only contain letters, numbers, hyphens, and underscores",
            )
        return value

    @field_validator("router_base_url")
    @classmethod
    def _check_router_base_url(cls, value: str | None) -> str | None:
        return _check_url(value)

    def to_request(self) -> InvocationRequest:
        return InvocationRequest(
            prompt=self.prompt,
            session_id=self.session_id or None,
            reset_session=bool(self.reset_session),
            model=self.model or None,
            working_directory=self.working_directory or None,
            allowed_tools=self.allowed_tools or None,
            skip_permissions=bool(self.dangerously_skip_permissions),
            output_format=OutputFormat(self.output_format) if self.output_format else None,
            max_turns=self.max_turns,
            router_base_url=self.router_base_url or None,
            fallback_providers=[
                FallbackProvider(
                    router_base_url=p.router_base_url or None,
                    model=p.model,
                )
                for p in self.fallback_providers or []
            ],
        )


class ReviewToolArgs(_ToolArgs):
    prompt: str | None = None
    uncommitted: bool | None = None
    base: str | None = None
    commit: str | None = None
    title: str | None = None
    model: str | None = None
    working_directory: str | None = None


class PingToolArgs(_ToolArgs):
    message: str | None = None


class HelpToolArgs(_ToolArgs):
    pass


class ListSessionsToolArgs(_ToolArgs):
    pass


def format_validation_error(exc: PydanticValidationError) -> str:
    """One line per problem: ``field: message``."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
