from __future__ import annotations

from typing import Any, Dict

import pytest
from pydantic import BaseModel, ValidationError

from loom_agents.agent_core.tools.definitions import EmptyInput, ToolDefinition, ToolSet


class _SearchInput(BaseModel):
    query: str
    limit: int = 5


class _SearchOutput(BaseModel):
    hits: list[str]


def _search_tool(**kwargs: Any) -> ToolDefinition:
    return ToolDefinition(name="search", description="Search cards", input_schema=_SearchInput, **kwargs)


@pytest.mark.asyncio
async def test_invoke_validates_and_calls_sync_handler() -> None:
    seen: Dict[str, Any] = {}

    def handler(payload: _SearchInput) -> Dict[str, Any]:
        seen["payload"] = payload
        return {"count": payload.limit}

    tool = _search_tool(handler=handler)
    result = await tool.invoke({"query": "notes"})

    assert result == {"count": 5}
    assert seen["payload"].query == "notes"


@pytest.mark.asyncio
async def test_invoke_awaits_async_handler_and_dumps_models() -> None:
    async def handler(payload: _SearchInput) -> _SearchOutput:
        return _SearchOutput(hits=[payload.query])

    tool = _search_tool(handler=handler)
    assert await tool.invoke({"query": "x"}) == {"hits": ["x"]}


@pytest.mark.asyncio
async def test_invoke_rejects_invalid_args() -> None:
    tool = _search_tool(handler=lambda p: None)
    with pytest.raises(ValidationError):
        await tool.invoke({"limit": "not-a-number"})


@pytest.mark.asyncio
async def test_invoke_without_handler_raises() -> None:
    tool = _search_tool()
    assert tool.has_handler() is False
    with pytest.raises(RuntimeError):
        await tool.invoke({"query": "x"})

    tool.set_handler(lambda p: "ok")
    assert tool.has_handler() is True
    assert await tool.invoke({"query": "x"}) == "ok"


def test_to_dict_exposes_json_schema() -> None:
    d = _search_tool().to_dict()
    assert d["name"] == "search"
    assert d["input_schema"]["properties"]["query"]["type"] == "string"
    assert "query" in d["input_schema"]["required"]


def test_default_input_schema_is_empty() -> None:
    tool = ToolDefinition(name="ping", description="Ping")
    assert tool.input_schema is EmptyInput
    assert tool.get_input_schema_json()["properties"] == {}


def test_tool_set_registry() -> None:
    first = ToolDefinition(name="a", description="first")
    replacement = ToolDefinition(name="a", description="second")
    tools = ToolSet([first, ToolDefinition(name="b", description="b")])

    assert len(tools) == 2
    assert tools.names() == ["a", "b"]
    assert tools.has("a") and not tools.has("c")

    tools.register(replacement)
    assert tools.get("a") is replacement
    assert [t.name for t in tools] == ["a", "b"]

    with pytest.raises(KeyError):
        tools.get("c")
