"""Exception hierarchy for the tool layer.

Validation failures and execution failures are kept apart so the
transport can report them differently. Output parsing never raises.
"""
from __future__ import annotations


class ClaudeMcpError(Exception):
    """Base exception for all server errors."""


class ValidationError(ClaudeMcpError):
    """Tool arguments were malformed or violate a usage policy."""
    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"Validation failed for {tool_name}: {message}")


class ToolExecutionError(ClaudeMcpError):
    """A tool failed while running, tagged with the tool and the cause."""
    def __init__(
        self,
        tool_name: str,
        message: str,
        cause: BaseException | None = None,
    ):
        self.tool_name = tool_name
        self.message = message
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{message}{detail}")


class CommandExecutionError(ClaudeMcpError):
    """The external CLI could not be started or exited non-zero."""
    def __init__(
        self,
        command: str,
        reason: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        self.command = command
        self.reason = reason
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command '{command}' failed: {reason}")
