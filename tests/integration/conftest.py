"""Integration test fixtures.

This module provides shared fixtures for chat session tests:
- A scripted stand-in for the OpenAI-compatible client
- A tool registry whose MCP clients are AsyncMock-backed
- A recording app context provider
"""

from collections.abc import AsyncIterator, Sequence
from unittest.mock import AsyncMock, Mock

import pytest
from mcp.types import Tool as MCPTool

from yodaai.chat.context import AppContextSnapshot, RunningApp
from yodaai.chat.session import ChatSession
from yodaai.platform.llm.exceptions import LLMClientError
from yodaai.platform.llm.messages import ChatMessage
from yodaai.platform.llm.providers import LLMProvider, ProviderRegistry
from yodaai.platform.mcp.client import MCPClient, ServerInfo, ToolCallOutcome
from yodaai.platform.mcp.config import MCPServerConfig
from yodaai.platform.mcp.registry import MCPToolRegistry

# =============================================================================
# LLM Client Fixtures
# =============================================================================


class ScriptedClient:
    """Streams one scripted reply per request and records the requests.

    A reply is a list of deltas, or an LLMClientError raised instead of
    streaming.
    """

    def __init__(self, *replies: list[str] | LLMClientError) -> None:
        self.replies = list(replies)
        self.requests: list[list[ChatMessage]] = []

    async def stream_chat_completion(
        self,
        provider: LLMProvider,
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        self.requests.append(list(messages))
        reply = self.replies.pop(0)
        if isinstance(reply, LLMClientError):
            raise reply
        for delta in reply:
            yield delta


@pytest.fixture
def scripted_client() -> type[ScriptedClient]:
    return ScriptedClient


@pytest.fixture
def providers() -> ProviderRegistry:
    return ProviderRegistry([LLMProvider(name="Test", base_url="http://llm.test/v1", selected_model="test-model")])


# =============================================================================
# MCP Fixtures
# =============================================================================

SEARCH_SERVER = MCPServerConfig(name="Search", endpoint="http://search.test/mcp")


@pytest.fixture
def search_server() -> MCPServerConfig:
    return SEARCH_SERVER


@pytest.fixture
def mcp_client() -> Mock:
    client = Mock(spec=MCPClient)
    client.initialize = AsyncMock(return_value=ServerInfo(name="search", version="1.0"))
    client.list_tools = AsyncMock(
        return_value=[MCPTool(name="web", description="Search the web", inputSchema={"type": "object"})]
    )
    client.call_tool = AsyncMock(return_value=ToolCallOutcome(text="3 results about cats"))
    return client


@pytest.fixture
def tool_registry(mcp_client: Mock) -> MCPToolRegistry:
    return MCPToolRegistry(enabled=True, client_factory=lambda config: mcp_client)


# =============================================================================
# App Context Fixtures
# =============================================================================


class RecordingContextProvider:
    """App context provider with canned snapshots that records insertions."""

    def __init__(
        self,
        frontmost: AppContextSnapshot | None = None,
        apps: dict[str, AppContextSnapshot] | None = None,
    ) -> None:
        self.frontmost = frontmost
        self.apps = apps or {}
        self.inserted: list[str] = []

    def capture_frontmost(self) -> AppContextSnapshot | None:
        return self.frontmost

    def capture_app(self, bundle_identifier: str) -> AppContextSnapshot | None:
        return self.apps.get(bundle_identifier)

    def list_running_apps(self) -> list[RunningApp]:
        return [RunningApp(snapshot.bundle_identifier, snapshot.app_name) for snapshot in self.apps.values()]

    def insert_text(self, text: str) -> bool:
        self.inserted.append(text)
        return True


@pytest.fixture
def context_provider() -> type[RecordingContextProvider]:
    return RecordingContextProvider


@pytest.fixture
def safari() -> AppContextSnapshot:
    return AppContextSnapshot(
        bundle_identifier="com.apple.Safari",
        app_name="Safari",
        window_title="Cats - Wikipedia",
        focused_value_preview="cats are mammals",
    )


@pytest.fixture
def notes() -> AppContextSnapshot:
    return AppContextSnapshot(bundle_identifier="com.apple.Notes", app_name="Notes", focused_value_preview="todo")


@pytest.fixture
def make_session(providers):
    """Build a ChatSession around a scripted client."""

    def builder(client: ScriptedClient, **kwargs) -> ChatSession:
        kwargs.setdefault("always_attach_app_context", False)
        return ChatSession(client=client, providers=providers, **kwargs)  # type: ignore[arg-type]

    return builder
