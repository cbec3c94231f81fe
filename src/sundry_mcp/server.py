from __future__ import annotations

import asyncio
import logging
import sys

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from sundry_common.tooling import InstrumentConfig, instrument_async_handler
from sundry_config import settings
from sundry_mcp import __version__
from sundry_mcp.backend import SundryClient
from sundry_mcp.credentials import load_credentials
from sundry_mcp.dispatcher import RequestDispatcher
from sundry_mcp.http_client import DEFAULT_USER_AGENT
from sundry_mcp.tools import ToolRegistry


logger = logging.getLogger(__name__)

SERVER_NAME = "Sundry"


def _instrument(name: str):
    return instrument_async_handler(InstrumentConfig(kind="mcp", name=name))


def build_server(
    backend: SundryClient,
    *,
    registry: ToolRegistry | None = None,
    dispatcher: RequestDispatcher | None = None,
) -> Server:
    """Create the MCP server with list-tools and call-tool handlers bound to `backend`."""
    registry = registry or ToolRegistry(backend)
    dispatcher = dispatcher or RequestDispatcher(backend)

    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    @_instrument("tools/list")
    async def handle_list_tools() -> list[types.Tool]:
        return await registry.list_tools()

    @_instrument("tools/call")
    async def dispatch(name: str, arguments: dict | None) -> list[types.TextContent]:
        return await dispatcher.dispatch(name, arguments)

    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        try:
            content = await dispatch(req.params.name, req.params.arguments)
        except Exception as e:
            return types.ServerResult(
                types.CallToolResult(content=[types.TextContent(type="text", text=str(e))], isError=True)
            )
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    # call_tool() in the SDK re-runs tools/list on a cache miss; register the raw handler instead.
    server.request_handlers[types.CallToolRequest] = handle_call_tool

    return server


def initialization_options(server: Server) -> InitializationOptions:
    return InitializationOptions(
        server_name=server.name,
        server_version=server.version or __version__,
        capabilities=types.ServerCapabilities(
            resources=types.ResourcesCapability(),
            tools=types.ToolsCapability(),
            prompts=types.PromptsCapability(),
        ),
    )


async def serve(backend: SundryClient) -> None:
    """Serve MCP over stdin/stdout until the channel closes."""
    server = build_server(backend)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s MCP server %s ready on stdio", SERVER_NAME, __version__)
        await server.run(read_stream, write_stream, initialization_options(server))


def main() -> None:
    # Entry points (console_scripts) call main() directly, so we must perform
    # runtime initialization here (dotenv + logging).
    try:
        settings.init_runtime()
        credentials = load_credentials()
        backend = SundryClient.from_credentials(
            credentials,
            timeout=settings.http_timeout(),
            user_agent=settings.http_user_agent() or DEFAULT_USER_AGENT,
        )
        with backend:
            asyncio.run(serve(backend))
    except Exception:
        # Exit status is the only startup diagnostic; details only at DEBUG.
        logger.debug("Sundry MCP server failed", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
