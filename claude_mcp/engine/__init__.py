"""Session-aware invocation of the Claude Code CLI."""
from .config import DEFAULT_CLAUDE_MODEL, ServerConfig
from .errors import (
    ClaudeMcpError,
    CommandExecutionError,
    ToolExecutionError,
    ValidationError,
)
from .executor import CommandExecutor, parse_cli_output
from .models import (
    CommandPlan,
    CommandResult,
    ConversationTurn,
    InvocationRequest,
    InvocationResult,
    OutputFormat,
    Session,
    SessionSummary,
    StructuredOutput,
    ToolName,
    ToolResponse,
    UnstructuredOutput,
)
from .session_store import InMemorySessionStore, SessionStore
from .tool_handlers import ToolContext, ToolHandler, build_tool_handlers

__all__ = [
    "DEFAULT_CLAUDE_MODEL",
    "ServerConfig",
    # Errors
    "ClaudeMcpError",
    "CommandExecutionError",
    "ToolExecutionError",
    "ValidationError",
    # Execution
    "CommandExecutor",
    "parse_cli_output",
    # Models
    "CommandPlan",
    "CommandResult",
    "ConversationTurn",
    "InvocationRequest",
    "InvocationResult",
    "OutputFormat",
    "Session",
    "SessionSummary",
    "StructuredOutput",
    "ToolName",
    "ToolResponse",
    "UnstructuredOutput",
    # Sessions and handlers
    "InMemorySessionStore",
    "SessionStore",
    "ToolContext",
    "ToolHandler",
    "build_tool_handlers",
]
