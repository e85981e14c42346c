"""MCP stdio server entry point.

Run with ``python -m context7_relay.server`` or the ``context7-relay``
console script. All decision logic lives in ``LibraryService``; this module
only wires settings, logging, the HTTP client and the cache sweep around
the protocol server.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

import mcp.types as types
import structlog
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError

from context7_relay import __version__
from context7_relay.cache import run_cleanup_loop
from context7_relay.config import LoggingSettings, load_settings
from context7_relay.errors import Context7RelayError, ErrorCode, ToolErrorEnvelope
from context7_relay.http_client import build_http_client
from context7_relay.logging_setup import setup_logging
from context7_relay.models.tools import GetLibraryDocsInput, ResolveLibraryInput
from context7_relay.state import build_state
from context7_relay.tools import cache_stats, get_library_docs, resolve_library

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from context7_relay.config import Settings
    from context7_relay.state import AppState

log = structlog.get_logger()

SERVER_NAME = "context7-relay"

_HANDLERS: dict[str, Callable[[dict[str, Any], AppState], Awaitable[str]]] = {
    resolve_library.NAME: resolve_library.handle,
    get_library_docs.NAME: get_library_docs.handle,
    cache_stats.NAME: cache_stats.handle,
}


def tool_definitions() -> list[types.Tool]:
    return [
        types.Tool(
            name=resolve_library.NAME,
            description=resolve_library.DESCRIPTION,
            inputSchema=ResolveLibraryInput.model_json_schema(by_alias=True),
        ),
        types.Tool(
            name=get_library_docs.NAME,
            description=get_library_docs.DESCRIPTION,
            inputSchema=GetLibraryDocsInput.model_json_schema(by_alias=True),
        ),
        types.Tool(
            name=cache_stats.NAME,
            description=cache_stats.DESCRIPTION,
            inputSchema=cache_stats.INPUT_SCHEMA,
        ),
    ]


async def dispatch(name: str, arguments: dict[str, Any], state: AppState) -> str:
    """Run a tool by name. Raises ``ToolErrorEnvelope`` on any relay error."""
    handler = _HANDLERS.get(name)
    try:
        if handler is None:
            raise Context7RelayError(ErrorCode.UNKNOWN_TOOL, f"Unknown tool: {name}")
        return await handler(arguments, state)
    except Context7RelayError as exc:
        log.warning("tool_failed", tool=name, code=exc.code, error=exc.message)
        raise ToolErrorEnvelope(exc) from exc


def create_server(state: AppState) -> Server:
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_definitions()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        log.debug("tool_called", tool=name)
        text = await dispatch(name, arguments or {}, state)
        return [types.TextContent(type="text", text=text)]

    return server


async def serve(settings: Settings) -> None:
    async with build_http_client(settings.upstream) as http_client:
        state = build_state(settings, http_client)
        cleanup_task = asyncio.create_task(
            run_cleanup_loop(state.cache, settings.cache.cleanup_interval_seconds)
        )
        server = create_server(state)
        log.info(
            "server_starting",
            version=__version__,
            transport=settings.server.transport,
            mcp_url=settings.upstream.mcp_url,
            api_base=settings.upstream.api_base,
            authenticated=settings.upstream.api_key is not None,
        )
        try:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())
        finally:
            cleanup_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cleanup_task
            log.info("server_stopped")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=SERVER_NAME, description=__doc__.splitlines()[0])
    parser.add_argument("--api-key", help="Context7 API key (bearer credential)")
    parser.add_argument("--transport", help="Transport to serve (stdio)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    try:
        settings = load_settings(api_key=args.api_key, transport=args.transport)
    except ValidationError as exc:
        setup_logging(LoggingSettings())
        log.error("config_invalid", error=str(exc))
        raise SystemExit(1) from exc

    setup_logging(settings.logging)
    asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
