"""MCP (Model Context Protocol) tool runtime.

This module provides:
- Server configuration
- MCP client over streamable HTTP or SSE
- Tool registry spanning all configured servers
- Extraction of inline tool calls from assistant text
"""

from yodaai.platform.mcp.client import MCPClient, MCPClientError, ServerInfo, ToolCallOutcome
from yodaai.platform.mcp.config import MCPServerConfig, MCPTransport
from yodaai.platform.mcp.registry import (
    ConnectionState,
    MCPToolRegistry,
    RegisteredTool,
    ServerStatus,
    ToolNotFoundError,
)
from yodaai.platform.mcp.tool_calls import (
    ToolCallRequest,
    contains_tool_calls,
    format_tool_result,
    parse_tool_calls,
)

__all__ = [
    "MCPClient",
    "MCPClientError",
    "ServerInfo",
    "ToolCallOutcome",
    "MCPServerConfig",
    "MCPTransport",
    "ConnectionState",
    "MCPToolRegistry",
    "RegisteredTool",
    "ServerStatus",
    "ToolNotFoundError",
    "ToolCallRequest",
    "contains_tool_calls",
    "format_tool_result",
    "parse_tool_calls",
]
