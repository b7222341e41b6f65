"""Chat client infrastructure module.

This module provides the infrastructure the chat features are built on:
- OpenAI-compatible LLM client and provider registry
- MCP (Model Context Protocol) tool runtime
- Settings loaded from the environment
- Logging and error reporting
"""

from yodaai.platform.llm import LLMProvider, OpenAICompatibleClient, ProviderRegistry
from yodaai.platform.mcp import MCPClient, MCPServerConfig, MCPToolRegistry
from yodaai.platform.settings import Settings

__all__ = [
    # LLM
    "LLMProvider",
    "OpenAICompatibleClient",
    "ProviderRegistry",
    # MCP
    "MCPClient",
    "MCPServerConfig",
    "MCPToolRegistry",
    # Configuration
    "Settings",
]
