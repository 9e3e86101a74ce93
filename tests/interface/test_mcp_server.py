import json

import mcp.types as types
import pytest

from srs.application.card_repository import CardRepository
from srs.application.deck_service import DeckService
from srs.domain.errors import FileIOError, ValidationError
from srs.mcp_server import TOOLS, call_tool, create_server


@pytest.fixture
def service(config, stub_scheduler, clock):
    return DeckService(config, repository=CardRepository(), scheduler=stub_scheduler, clock=clock)


def _payload(content) -> dict:
    assert len(content) == 1
    assert content[0].type == "text"
    return json.loads(content[0].text)


def test_tool_definitions():
    by_name = {tool.name: tool for tool in TOOLS}
    assert set(by_name) == {"get_due_cards", "rate_card", "get_deck_stats", "list_decks"}
    assert by_name["rate_card"].inputSchema["required"] == ["file_path", "rating"]
    assert by_name["rate_card"].inputSchema["properties"]["rating"]["type"] == "integer"


def test_create_server(service):
    server = create_server(service)
    assert server.name == "srs"
    assert types.ListToolsRequest in server.request_handlers
    assert types.CallToolRequest in server.request_handlers


@pytest.mark.asyncio
async def test_get_due_cards(service, make_card):
    make_card("a.md", "Front\n---\nBack")

    data = _payload(await call_tool(service, "get_due_cards", {}))

    assert data["deck_path"] == "."
    assert data["due_count"] == 1
    assert data["due_cards"][0]["question"] == "Front"
    assert data["due_cards"][0]["answer"] == "Back"


@pytest.mark.asyncio
async def test_rate_card(service, make_card):
    make_card("spanish/hola.md", "Hola\n---\nHello")

    data = _payload(
        await call_tool(service, "rate_card", {"file_path": "spanish/hola.md", "rating": 4})
    )

    assert data["success"] is True
    assert data["rating"] == "Easy"
    assert data["new_state"] == "Review"


@pytest.mark.asyncio
async def test_rate_card_rejects_bad_rating(service, make_card):
    path = make_card("a.md", "Q\n---\nA")

    with pytest.raises(ValidationError):
        await call_tool(service, "rate_card", {"file_path": str(path), "rating": 9})

    assert path.read_text(encoding="utf-8") == "Q\n---\nA"


@pytest.mark.asyncio
async def test_rate_card_missing_file(service):
    with pytest.raises(FileIOError):
        await call_tool(service, "rate_card", {"file_path": "ghost.md", "rating": 3})


@pytest.mark.asyncio
async def test_get_deck_stats_and_list_decks(service, make_card):
    make_card("one.md", "Q")
    make_card("sub/two.md", "Q")

    stats = _payload(await call_tool(service, "get_deck_stats", {"deck_path": "sub"}))
    decks = _payload(await call_tool(service, "list_decks", None))

    assert stats["total"] == 1
    assert stats["deck_path"] == "sub"
    assert sorted(decks["decks"]) == [".", "sub"]


@pytest.mark.asyncio
async def test_unknown_tool(service):
    with pytest.raises(ValidationError, match="unknown tool"):
        await call_tool(service, "delete_everything", {})
