"""MCP transport for the tool handlers."""
from .stdio_server import build_server, main
from .tools import register_tools

__all__ = ["build_server", "main", "register_tools"]
