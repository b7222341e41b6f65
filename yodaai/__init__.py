"""yodaai - A terminal chat client for OpenAI-compatible LLM endpoints with MCP tool integration."""

from .chat.session import ChatSession, RequestOptions
from .platform.llm.client import OpenAICompatibleClient
from .platform.llm.providers import ProviderRegistry
from .platform.mcp.registry import MCPToolRegistry
from .platform.settings import Settings


def create_session(settings: Settings | None = None) -> ChatSession:
    """Create a chat session wired from settings."""
    settings = settings or Settings()
    return ChatSession(
        client=OpenAICompatibleClient(timeout=settings.provider.timeout),
        providers=ProviderRegistry([settings.provider.to_provider()]),
        tool_registry=MCPToolRegistry(
            enabled=settings.mcp.enabled,
            cache_ttl_seconds=settings.mcp.cache_ttl_seconds,
        ),
        mcp_servers=settings.mcp.server_configs(),
        always_attach_app_context=settings.chat.always_attach_app_context,
        max_tool_rounds=settings.mcp.max_tool_rounds,
        options=RequestOptions(
            temperature=settings.provider.temperature,
            max_tokens=settings.provider.max_tokens,
        ),
    )
