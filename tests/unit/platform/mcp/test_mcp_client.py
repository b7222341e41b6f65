"""Unit tests for MCPClient.

Sessions are replaced with AsyncMock-backed fakes; no MCP server is needed.
"""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from tenacity import wait_none

from yodaai.platform.constants import USER_AGENT
from yodaai.platform.mcp.client import MCPClient, MCPClientError, ServerInfo, ToolCallOutcome
from yodaai.platform.mcp.config import MCPServerConfig, MCPTransport


@pytest.fixture(autouse=True)
def disable_tenacity_wait():
    """Disable tenacity wait times to speed up retry tests."""
    methods = (MCPClient.initialize, MCPClient.list_tools, MCPClient.call_tool)
    originals = [method.retry.wait for method in methods]  # type: ignore[attr-defined]
    for method in methods:
        method.retry.wait = wait_none()  # type: ignore[attr-defined]

    yield

    for method, original in zip(methods, originals, strict=True):
        method.retry.wait = original  # type: ignore[attr-defined]


@pytest.fixture
def config() -> MCPServerConfig:
    return MCPServerConfig(
        name="Search",
        endpoint="http://localhost:8000/mcp",
        api_key="secret",
        custom_headers={"X-Team": "chat"},
    )


def fake_session(client: MCPClient, session: Mock, info: ServerInfo | None = None) -> Mock:
    """Patch the client's session factory to yield the given session."""
    opened = Mock()

    @asynccontextmanager
    async def _session():
        opened()
        yield session, info or ServerInfo(name="search-server", version="2.1")

    client._session = _session  # type: ignore[method-assign]
    return opened


def failing_session(client: MCPClient, error: Exception) -> Mock:
    opened = Mock()

    @asynccontextmanager
    async def _session():
        opened()
        raise error
        yield  # pragma: no cover

    client._session = _session  # type: ignore[method-assign]
    return opened


class TestMCPClientConfig:
    def test_headers_exclude_sdk_managed_defaults(self, config):
        client = MCPClient(config)
        assert client._base_headers == {
            "Authorization": "Bearer secret",
            "X-Team": "chat",
            "user-agent": USER_AGENT,
        }

    def test_repr_obfuscates_headers(self, config):
        text = repr(MCPClient(config))
        assert "secret" not in text
        assert "<obfuscated>" in text
        assert "'http_streamable'" in text

    def test_server_url(self, config):
        assert MCPClient(config).server_url == "http://localhost:8000/mcp"

    def test_sse_transport_is_kept(self):
        config = MCPServerConfig(name="Legacy", endpoint="http://localhost:8000/sse", transport=MCPTransport.SSE)
        assert MCPClient(config).config.transport is MCPTransport.SSE


class TestMCPClientOperations:
    async def test_initialize_returns_server_info(self, config):
        client = MCPClient(config)
        fake_session(client, AsyncMock())
        assert await client.initialize() == ServerInfo(name="search-server", version="2.1")

    async def test_list_tools(self, config):
        client = MCPClient(config)
        session = AsyncMock()
        session.list_tools.return_value = SimpleNamespace(tools=["tool-a", "tool-b"])
        fake_session(client, session)
        assert await client.list_tools() == ["tool-a", "tool-b"]

    async def test_call_tool_joins_text_content(self, config):
        client = MCPClient(config)
        session = AsyncMock()
        session.call_tool.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="line 1"),
                SimpleNamespace(type="image", data="..."),
                SimpleNamespace(type="text", text="line 2"),
            ],
            isError=False,
        )
        fake_session(client, session)

        outcome = await client.call_tool("web", {"query": "cats"})

        assert outcome == ToolCallOutcome(text="line 1\nline 2", is_error=False)
        session.call_tool.assert_awaited_once_with("web", {"query": "cats"})

    async def test_call_tool_without_arguments_sends_empty_object(self, config):
        client = MCPClient(config)
        session = AsyncMock()
        session.call_tool.return_value = SimpleNamespace(content=[], isError=True)
        fake_session(client, session)

        outcome = await client.call_tool("ping")

        assert outcome == ToolCallOutcome(text="", is_error=True)
        session.call_tool.assert_awaited_once_with("ping", {})


class TestMCPClientRetries:
    async def test_list_tools_retries_then_raises(self, config):
        client = MCPClient(config)
        opened = failing_session(client, ConnectionError("refused"))

        with pytest.raises(MCPClientError, match="Failed to list tools"):
            await client.list_tools()
        assert opened.call_count == 3

    async def test_initialize_error_names_server(self, config):
        client = MCPClient(config)
        failing_session(client, ConnectionError("refused"))

        with pytest.raises(MCPClientError, match="Failed to initialize 'Search'"):
            await client.test_connection()

    async def test_call_tool_error_is_chained(self, config):
        client = MCPClient(config)
        failing_session(client, ConnectionError("refused"))

        with pytest.raises(MCPClientError) as exc_info:
            await client.call_tool("web", {})
        assert isinstance(exc_info.value.__cause__, ConnectionError)
