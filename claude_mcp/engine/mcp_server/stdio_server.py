"""Stdio MCP server exposing the Claude Code CLI as tools.

Usage:
    claude-mcp-server
    claude-mcp-server --config claude-mcp.yaml --verbose
    python -m claude_mcp.engine.mcp_server.stdio_server --log-file /tmp/claude-mcp.log
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from ..config import ServerConfig
from ..executor import CommandExecutor
from ..session_store import InMemorySessionStore
from ..tool_handlers import build_tool_handlers
from ..yaml_config import load_yaml_config
from .tools import register_tools

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# Parsed CLI args; set in main() before the server starts
_parsed_args: argparse.Namespace | None = None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="claude-mcp-server",
        description="MCP server for the Claude Code CLI",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file. Also reads CLAUDE_MCP_CONFIG env var.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file. Also reads CLAUDE_MCP_LOG_FILE.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> ServerConfig:
    """Env config, overlaid by the YAML file when one is named."""
    config = ServerConfig.from_env()
    config_file = args.config or os.getenv("CLAUDE_MCP_CONFIG")
    if config_file:
        config = load_yaml_config(config_file, base=config)
    if args.log_file:
        config.log_file = args.log_file
    if args.verbose:
        config.log_level = "DEBUG"
    return config


def configure_logging(config: ServerConfig) -> None:
    # stdout is the stdio transport; logs go to stderr
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format=_LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logging.getLogger().addHandler(file_handler)


def build_server(config: ServerConfig) -> FastMCP:
    """FastMCP instance whose lifespan owns the session store and handlers."""

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        session_store = InMemorySessionStore()
        executor = CommandExecutor(config.claude_command)
        handlers = build_tool_handlers(config, session_store, executor)
        logger.info(
            "%s %s ready (cli=%s, default_model=%s, structured_content=%s)",
            config.name,
            config.version,
            config.claude_command,
            config.resolve_default_model(),
            config.structured_content_enabled,
        )
        try:
            yield {
                "config": config,
                "session_store": session_store,
                "handlers": handlers,
            }
        finally:
            logger.info(
                "%s shut down (%d sessions)", config.name, len(session_store)
            )

    mcp = FastMCP(name=config.name, lifespan=lifespan)
    register_tools(mcp)
    return mcp


def main(argv: list[str] | None = None) -> None:
    """Entry point for the MCP server."""
    global _parsed_args
    _parsed_args = _parse_args(argv)
    config = load_config(_parsed_args)
    configure_logging(config)
    logger.info("Starting stdio MCP server (pid=%s)", os.getpid())

    try:
        build_server(config).run(transport="stdio")
    except Exception:
        logger.exception("Fatal stdio MCP server error (pid=%s)", os.getpid())
        raise


if __name__ == "__main__":
    main()
