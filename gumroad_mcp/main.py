"""Gumroad MCP Server.

Exposes the Gumroad REST API as MCP tools for AI agent interaction.
This is a thin adapter: tool calls map one-to-one onto Gumroad endpoints
and responses are returned verbatim.

Usage:
    gumroad-mcp                                   # serve over stdio
    gumroad-mcp init --access-token TOKEN         # register with Claude Desktop
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import structlog
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from gumroad_mcp import __version__
from gumroad_mcp.api_client import GumroadAPIClient
from gumroad_mcp.config import Settings
from gumroad_mcp.installer import run_init
from gumroad_mcp.tools import ToolDispatcher

SERVER_NAME = "gumroad-mcp"

logger = structlog.get_logger()


# ============================================================================
# Logging
# ============================================================================


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog to emit JSON lines on stderr.

    stdout carries the MCP stdio transport and must stay clean.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ============================================================================
# MCP Server Implementation
# ============================================================================


def create_mcp_server(dispatcher: ToolDispatcher) -> Server:
    """Create the MCP server and register the tool handlers."""
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List all available MCP tools."""
        return dispatcher.list_tools()

    # Registered directly so a missing argument map reaches the dispatcher
    # unchanged and every failure is reported as an {"error": ...} payload.
    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        """Handle tool invocation."""
        content = await dispatcher.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    server.request_handlers[types.CallToolRequest] = call_tool

    return server


def build_api_client(settings: Settings) -> GumroadAPIClient:
    """Create the Gumroad client from settings.

    Raises:
        ValueError: If no access token is configured.
    """
    token = settings.gumroad_access_token
    if token is None or not token.get_secret_value():
        raise ValueError("Please set GUMROAD_ACCESS_TOKEN environment variable.")
    return GumroadAPIClient(
        access_token=token.get_secret_value(),
        base_url=settings.gumroad_base_url,
    )


async def run_server(api_client: GumroadAPIClient) -> None:
    """Run the MCP server using stdio transport."""
    logger.info("Starting Gumroad MCP Server", api_url=api_client.api_url)

    server = create_mcp_server(ToolDispatcher(api_client))

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
    finally:
        await api_client.close()


# ============================================================================
# Command line
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="Gumroad MCP Server",
        epilog=(
            "Environment: GUMROAD_ACCESS_TOKEN (required), "
            "GUMROAD_BASE_URL (optional, defaults to https://api.gumroad.com)"
        ),
    )
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command")
    init_parser = subparsers.add_parser(
        "init",
        help="Register Gumroad MCP in Claude Desktop",
    )
    init_parser.add_argument(
        "--access-token",
        default=os.environ.get("GUMROAD_ACCESS_TOKEN"),
        help="Gumroad API access token (default: $GUMROAD_ACCESS_TOKEN)",
    )
    init_parser.add_argument(
        "--base-url",
        default=os.environ.get("GUMROAD_BASE_URL"),
        help="Custom Gumroad URL (default: https://api.gumroad.com)",
    )
    init_parser.add_argument(
        "--config-path",
        type=Path,
        default=None,
        help="Path to claude_desktop_config.json (default: platform location)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the command line entry point.

    Without a subcommand the MCP server is started on stdio.
    """
    args = build_parser().parse_args(argv)

    if args.command == "init":
        sys.exit(
            run_init(
                access_token=args.access_token,
                base_url=args.base_url,
                config_path=args.config_path,
            )
        )

    settings = Settings()
    configure_logging(settings.log_level)

    try:
        api_client = build_api_client(settings)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    asyncio.run(run_server(api_client))


if __name__ == "__main__":
    main()
