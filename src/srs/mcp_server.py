"""
MCP server exposing the deck operations as tools over stdio.

stdout carries the protocol, so all logging goes to stderr.
"""

import asyncio
import logging
import sys
from typing import Any

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from srs.application.config import AppConfig, resolve_config
from srs.application.deck_service import DeckService
from srs.domain.errors import ValidationError

logger = logging.getLogger(__name__)

_DECK_PATH_SCHEMA = {
    "type": "string",
    "description": "Path to deck (relative to the base deck path, defaults to '.')",
}

TOOLS = [
    types.Tool(
        name="get_due_cards",
        description="Get cards that are due for review, with question and answer.",
        inputSchema={"type": "object", "properties": {"deck_path": _DECK_PATH_SCHEMA}},
    ),
    types.Tool(
        name="rate_card",
        description="Rate a card and update its scheduling (1=Again, 2=Hard, 3=Good, 4=Easy).",
        inputSchema={
            "type": "object",
            "properties": {
                "file_path": {
                    "type": "string",
                    "description": "Path to the card file (relative to the base deck path, or absolute)",
                },
                "rating": {
                    "type": "integer",
                    "description": "Rating (1=Again, 2=Hard, 3=Good, 4=Easy)",
                },
            },
            "required": ["file_path", "rating"],
        },
    ),
    types.Tool(
        name="get_deck_stats",
        description="Get total, due and per-state card counts for a deck.",
        inputSchema={"type": "object", "properties": {"deck_path": _DECK_PATH_SCHEMA}},
    ),
    types.Tool(
        name="list_decks",
        description="List every deck under the base deck with its statistics.",
        inputSchema={"type": "object", "properties": {}},
    ),
]


async def call_tool(
    service: DeckService, name: str, arguments: dict[str, Any] | None
) -> list[types.TextContent]:
    """
    Run one tool and return its result as pretty-printed JSON text.

    Errors propagate; the MCP runtime reports them as an error result.
    """
    args = arguments or {}
    logger.info(f"Tool call: {name} {args}")

    if name == "get_due_cards":
        result = service.get_due_cards(args.get("deck_path") or ".")
    elif name == "rate_card":
        result = service.rate_card(args.get("file_path"), args.get("rating"))
    elif name == "get_deck_stats":
        result = service.get_deck_stats(args.get("deck_path") or ".")
    elif name == "list_decks":
        result = service.list_decks()
    else:
        raise ValidationError(f"unknown tool: {name}")

    return [types.TextContent(type="text", text=result.model_dump_json(indent=2))]


def create_server(service: DeckService) -> Server:
    server = Server("srs")

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return TOOLS

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        return await call_tool(service, name, arguments)

    return server


async def serve(service: DeckService) -> None:
    server = create_server(service)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main(config: AppConfig | None = None) -> None:
    config = config or resolve_config()
    logging.basicConfig(
        level=logging.DEBUG if config.verbose >= 2 else logging.INFO,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )
    from srs.application.factory import get_deck_service

    service = get_deck_service(config)
    if service.config.base_deck_path is None:
        logger.warning("No base deck configured; relative deck paths will be rejected.")
    asyncio.run(serve(service))
