"""Registry of MCP tools across all configured servers.

The registry fetches tools from every enabled server, caches them for a
configurable TTL, renders the tool catalogue for the system prompt and routes
tool calls back to the server that owns the tool.

The registry is an explicit dependency: create one per chat client and pass
it to the consumers that need it.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

from mcp.types import Tool as MCPTool

from yodaai.platform.mcp.client import MCPClient, MCPClientError, ServerInfo
from yodaai.platform.mcp.config import MCPServerConfig

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 300.0

# Type alias for client factories (injectable dependency)
ClientFactory: TypeAlias = Callable[[MCPServerConfig], MCPClient]


class ToolNotFoundError(MCPClientError):
    """Raised when no connected server offers the requested tool."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No connected MCP server provides tool '{name}'")


class ConnectionState(StrEnum):
    UNKNOWN = "unknown"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass(frozen=True)
class ServerStatus:
    """Connection status of one server, keyed by endpoint in the registry."""

    state: ConnectionState = ConnectionState.UNKNOWN
    server_name: str | None = None
    server_version: str | None = None
    error: str | None = None

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    @classmethod
    def connected(cls, info: ServerInfo) -> "ServerStatus":
        return cls(ConnectionState.CONNECTED, server_name=info.name, server_version=info.version)

    @classmethod
    def failed(cls, error: str) -> "ServerStatus":
        return cls(ConnectionState.ERROR, error=error)


@dataclass(frozen=True)
class RegisteredTool:
    """A tool along with the server it came from."""

    tool: MCPTool
    server_name: str
    server_endpoint: str

    @property
    def id(self) -> str:
        return f"{self.server_endpoint}:{self.tool.name}"

    @property
    def prefixed_name(self) -> str:
        return f"{self.server_name}.{self.tool.name}"


def split_tool_name(full_name: str) -> tuple[str | None, str]:
    """Split "ServerName.tool_name" into (server_name, tool_name).

    Names without a dot have no server prefix.
    """
    server_name, dot, tool_name = full_name.partition(".")
    if not dot:
        return None, full_name
    return server_name, tool_name


class MCPToolRegistry:
    """Central registry for MCP tools from all configured servers."""

    def __init__(
        self,
        enabled: bool = False,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        client_factory: ClientFactory = MCPClient,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.enabled = enabled
        self.cache_ttl_seconds = cache_ttl_seconds
        self._client_factory = client_factory
        self._clock = clock
        self._tools: list[RegisteredTool] = []
        self._clients: dict[str, MCPClient] = {}
        self._status: dict[str, ServerStatus] = {}
        self._last_fetch: float | None = None
        self._loading = False
        self.last_error: str | None = None

    @property
    def tools(self) -> list[RegisteredTool]:
        return list(self._tools)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def server_status(self) -> dict[str, ServerStatus]:
        return dict(self._status)

    async def refresh_tools(self, servers: Sequence[MCPServerConfig]) -> None:
        """Refresh tools from all enabled servers with valid endpoints.

        Servers are queried concurrently; a failing server is marked with an
        error status and does not affect the others. A refresh requested while
        another is in flight is skipped.
        """
        if not self.enabled:
            self.clear_cache()
            return
        if self._loading:
            logger.info("Tool refresh already in progress, skipping")
            return

        self._loading = True
        self.last_error = None
        try:
            active = [server for server in servers if server.enabled and server.has_valid_endpoint]
            logger.info("Refreshing tools from %d MCP servers", len(active))
            self._tools = []
            results = await asyncio.gather(*(self._fetch_server_tools(server) for server in active))
            for server_tools in results:
                self._tools.extend(server_tools)
            self._last_fetch = self._clock()
        finally:
            self._loading = False
        logger.info("Tool refresh complete, %d tools available", len(self._tools))

    async def _fetch_server_tools(self, server: MCPServerConfig) -> list[RegisteredTool]:
        self._status[server.endpoint] = ServerStatus(ConnectionState.CONNECTING)
        client = self._get_or_create_client(server)
        try:
            info = await client.initialize()
            self._status[server.endpoint] = ServerStatus.connected(info)
            server_tools = await client.list_tools()
        except MCPClientError as e:
            logger.warning("Failed to fetch tools from %s: %s", server.name, e)
            self._status[server.endpoint] = ServerStatus.failed(str(e))
            self._clients.pop(server.endpoint, None)
            self.last_error = str(e)
            return []

        logger.info("Fetched %d tools from %s", len(server_tools), server.name)
        return [
            RegisteredTool(tool=tool, server_name=server.name, server_endpoint=server.endpoint)
            for tool in server_tools
        ]

    def _cache_is_fresh(self) -> bool:
        if self._last_fetch is None or not self._tools:
            return False
        return self._clock() - self._last_fetch < self.cache_ttl_seconds

    async def get_tools_for_prompt(self, servers: Sequence[MCPServerConfig]) -> list[RegisteredTool]:
        """Return cached tools, refreshing first when the cache has expired."""
        if not self.enabled:
            return []
        if not self._cache_is_fresh() and not self._loading:
            await self.refresh_tools(servers)
        return self.tools

    async def get_tools_system_prompt(self, servers: Sequence[MCPServerConfig]) -> str:
        """Return the system prompt block describing available tools."""
        await self.get_tools_for_prompt(servers)
        return self.tools_system_prompt()

    def tools_system_prompt(self) -> str:
        """Format the cached tools for the system prompt, grouped by server."""
        if not self.enabled or not self._tools:
            return ""

        lines = ["You have access to the following tools from connected MCP servers:", ""]

        by_server: dict[str, list[RegisteredTool]] = {}
        for registered in self._tools:
            by_server.setdefault(registered.server_name, []).append(registered)

        for server_name in sorted(by_server):
            lines.append(f"## {server_name} Tools:")
            lines.append("")
            for registered in by_server[server_name]:
                lines.extend(_describe_tool(registered))
                lines.append("")

        lines.extend(_TOOL_CALL_INSTRUCTIONS)
        return "\n".join(lines)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Call a tool by "ServerName.tool_name" or plain "tool_name".

        Returns:
            The tool's text output, or "Tool error: ..." when the server
            flagged the result as an error

        Raises:
            ToolNotFoundError: If no connected server offers the tool
            MCPClientError: If the call itself fails
        """
        registered = self._find_tool(name)
        if registered is None:
            raise ToolNotFoundError(name)
        client = self._clients.get(registered.server_endpoint)
        if client is None:
            raise MCPClientError(f"MCP server '{registered.server_name}' is not connected")

        logger.info("Calling tool %s on %s", registered.tool.name, registered.server_name)
        outcome = await client.call_tool(registered.tool.name, arguments)
        if outcome.is_error:
            return f"Tool error: {outcome.text or 'Unknown error'}"
        return outcome.text

    def _find_tool(self, name: str) -> RegisteredTool | None:
        server_name, tool_name = split_tool_name(name)
        if server_name is not None:
            for registered in self._tools:
                if registered.server_name == server_name and registered.tool.name == tool_name:
                    return registered
        # Bare names, and dotted names that are not server-prefixed
        for registered in self._tools:
            if registered.tool.name == name:
                return registered
        return None

    async def test_connection(self, server: MCPServerConfig) -> ServerInfo:
        """Test connectivity to one server, recording its status."""
        self._status[server.endpoint] = ServerStatus(ConnectionState.CONNECTING)
        try:
            info = await self._client_factory(server).test_connection()
        except MCPClientError as e:
            self._status[server.endpoint] = ServerStatus.failed(str(e))
            raise
        self._status[server.endpoint] = ServerStatus.connected(info)
        return info

    def remove_server(self, endpoint: str) -> None:
        """Forget a server's client, status and tools (e.g. when it is deleted)."""
        self._clients.pop(endpoint, None)
        self._status.pop(endpoint, None)
        self._tools = [registered for registered in self._tools if registered.server_endpoint != endpoint]

    def clear_cache(self) -> None:
        self._tools = []
        self._clients.clear()
        self._status.clear()
        self._last_fetch = None

    def _get_or_create_client(self, server: MCPServerConfig) -> MCPClient:
        client = self._clients.get(server.endpoint)
        if client is None:
            client = self._client_factory(server)
            self._clients[server.endpoint] = client
        return client


def _describe_tool(registered: RegisteredTool) -> list[str]:
    tool = registered.tool
    lines = [f"### {registered.prefixed_name}"]
    if tool.description:
        lines.append(tool.description)

    schema = tool.inputSchema if isinstance(tool.inputSchema, dict) else {}
    properties = schema.get("properties") or {}
    required = set(schema.get("required") or [])
    if properties:
        lines.append("Parameters:")
        for param_name in sorted(properties):
            info = properties[param_name] if isinstance(properties[param_name], dict) else {}
            param_type = info.get("type", "any")
            marker = "required" if param_name in required else "optional"
            lines.append(f"  - {param_name}: {param_type} ({marker}) - {info.get('description', '')}")
    return lines


_TOOL_CALL_INSTRUCTIONS = [
    "## How to Call Tools",
    "",
    "When you need to use a tool, you MUST use this EXACT format with JSON inside <tool_call> tags:",
    "",
    "```",
    "<tool_call>",
    '{"name": "ServerName.tool_name", "arguments": {"param1": "value1", "param2": "value2"}}',
    "</tool_call>",
    "```",
    "",
    "CRITICAL RULES:",
    "1. Use EXACTLY <tool_call> and </tool_call> tags (not <execute>, <invoke>, or any other format)",
    '2. The content MUST be valid JSON with "name" and "arguments" fields',
    '3. Always include the server prefix in the tool name (e.g., "ServerName.tool_name")',
    "4. After I execute the tool, I will provide the results, then you should continue your response",
    "5. Do NOT hallucinate or make up tool results - wait for actual results",
]
