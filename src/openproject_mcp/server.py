"""OpenProject MCP Server - Expose work packages to AI assistants over stdio."""
import asyncio
import logging
import sys
from typing import Any, Optional, Sequence

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, Tool

from openproject_core.client import OpenProjectClient, create_http_client
from openproject_core.config import ConfigurationError, Settings, load_settings

from . import handlers
from . import tools

logger = logging.getLogger("openproject-mcp")

# MCP Server instance
app = Server("openproject-mcp")

# Loaded once in main(); read-only afterwards
_settings: Optional[Settings] = None


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the MCP protocol."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available MCP tools for OpenProject work packages."""
    return tools.get_tools()


async def dispatch_tool(name: str, arguments: Optional[dict], settings: Settings) -> CallToolResult:
    """Run one tool call with its own HTTP client."""
    handler = handlers.HANDLERS.get(name)
    if not handler:
        logger.warning(f"Unknown tool requested: {name}")
        return handlers.text_result(f"Unknown tool: {name}", is_error=True)

    async with create_http_client(settings) as http:
        return await handler(arguments or {}, OpenProjectClient(http), settings)


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> CallToolResult:
    """Handle MCP tool calls by delegating to the handlers."""
    logger.info(f"Tool call: {name} with arguments: {arguments}")
    if _settings is None:
        return handlers.text_result("Error: server is not configured", is_error=True)
    return await dispatch_tool(name, arguments, _settings)


async def serve(settings: Settings) -> None:
    """Run the MCP server on stdio until the host disconnects."""
    global _settings
    _settings = settings
    logger.info(f"MCP Server starting with API URL: {settings.api_url}")
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point. Refuses to start without an API URL and key."""
    try:
        settings = load_settings(argv)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    asyncio.run(serve(settings))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
