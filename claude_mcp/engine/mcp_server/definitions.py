"""Tool names, descriptions and annotations published over MCP."""
from __future__ import annotations

from mcp.types import ToolAnnotations

from ..config import AVAILABLE_CLAUDE_MODELS, DEFAULT_CLAUDE_MODEL
from ..models import ToolName


def model_description(tool: ToolName) -> str:
    if tool is ToolName.CLAUDE:
        return (
            f"Specify which model to use (defaults to {DEFAULT_CLAUDE_MODEL}). "
            f"Options: {', '.join(AVAILABLE_CLAUDE_MODELS)}"
        )
    return f"Specify which model to use for the review (defaults to {DEFAULT_CLAUDE_MODEL})"


TOOL_DESCRIPTIONS: dict[ToolName, str] = {
    ToolName.CLAUDE: "Execute Claude Code CLI in non-interactive mode for AI assistance",
    ToolName.REVIEW: (
        "Run a code review using Claude Code CLI by passing review context as a prompt"
    ),
    ToolName.PING: "Test MCP server connection",
    ToolName.HELP: "Get Claude Code CLI help information",
    ToolName.LIST_SESSIONS: "List all active conversation sessions with metadata",
}

TOOL_ANNOTATIONS: dict[ToolName, ToolAnnotations] = {
    ToolName.CLAUDE: ToolAnnotations(
        title="Execute Claude Code CLI",
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=True,
    ),
    ToolName.REVIEW: ToolAnnotations(
        title="Code Review",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=True,
    ),
    ToolName.PING: ToolAnnotations(
        title="Ping Server",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
    ToolName.HELP: ToolAnnotations(
        title="Get Help",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
    ToolName.LIST_SESSIONS: ToolAnnotations(
        title="List Sessions",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    ),
}

# Parameter descriptions shown in the tool input schemas.
PARAM_DESCRIPTIONS: dict[str, str] = {
    "prompt": "The coding task, question, or analysis request",
    "sessionId": (
        "Optional session ID for conversational context. When resuming a "
        "session, allowedTools and workingDirectory are applied normally."
    ),
    "resetSession": "Reset the session history before processing this request",
    "workingDirectory": (
        "Working directory for the agent to use as its root (passed via --cwd flag)"
    ),
    "allowedTools": (
        'Comma-separated list of tools to allow (e.g. "Bash,Read,Write"). '
        "Passed via --allowedTools flag."
    ),
    "dangerouslySkipPermissions": "Skip permission prompts. Use with caution.",
    "outputFormat": "Output format for the claude CLI response (default: json)",
    "maxTurns": "Maximum number of agentic turns before stopping",
    "routerBaseUrl": (
        "Override ANTHROPIC_BASE_URL for this call (e.g. for claude-code-router)"
    ),
    "fallbackProviders": (
        "Ordered list of fallback providers to try if the primary call fails. "
        "Each entry can override model and/or routerBaseUrl."
    ),
    "reviewPrompt": (
        "Custom review instructions or focus areas (cannot be used with "
        "uncommitted=true; use base/commit review instead)"
    ),
    "uncommitted": (
        "Review staged, unstaged, and untracked changes (working tree) - "
        "cannot be combined with custom prompt"
    ),
    "base": 'Review changes against a specific base branch (e.g., "main", "develop")',
    "commit": "Review the changes introduced by a specific commit SHA",
    "title": "Optional title to display in the review summary",
    "reviewWorkingDirectory": (
        "Working directory to run the review in (passed via --cwd flag)"
    ),
    "message": "Message to echo back",
}
