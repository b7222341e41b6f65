"""MCP client for tool servers.

Provides a small MCP client over the streamable HTTP or SSE transports,
used by the tool registry to discover and call tools.

Usage:
    client = MCPClient(MCPServerConfig(name="Search", endpoint="http://localhost:8000/mcp"))
    info = await client.initialize()
    tools = await client.list_tools()
    outcome = await client.call_tool("search", {"query": "cats"})
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import httpx
from mcp.client.session import ClientSession
from mcp.client.sse import sse_client
from mcp.client.streamable_http import streamable_http_client
from mcp.types import Implementation
from mcp.types import Tool as MCPTool
from tenacity import retry, stop_after_attempt, stop_after_delay, wait_fixed

from yodaai.platform.constants import SERVICE_NAME, SERVICE_VERSION, USER_AGENT
from yodaai.platform.mcp.config import MCPServerConfig, MCPTransport

# Negotiated by the MCP SDK itself; these are only defaults for the wire.
_SDK_MANAGED_HEADERS = frozenset({"content-type", "accept"})


class MCPClientError(Exception):
    """MCP client error."""


@dataclass(frozen=True)
class ServerInfo:
    """Server identity reported by the MCP initialize handshake."""

    name: str | None
    version: str | None


@dataclass(frozen=True)
class ToolCallOutcome:
    """Result of an MCP tool call.

    Attributes:
        text: Text content items joined with newlines
        is_error: True if the server flagged the result as an error
    """

    text: str
    is_error: bool = False


class MCPClient:
    """MCP client for a single configured server.

    Each operation opens its own session. Includes automatic retry logic
    for transient failures.
    """

    def __init__(self, config: MCPServerConfig) -> None:
        """Initialize the MCP client.

        Args:
            config: Server configuration (endpoint, transport, auth, timeouts)
        """
        self.config = config
        self._base_headers = {
            key: value
            for key, value in config.build_headers().items()
            if key.lower() not in _SDK_MANAGED_HEADERS
        } | {"user-agent": USER_AGENT}
        self.timeout = config.timeout
        self.sse_read_timeout = config.sse_read_timeout
        self.read_timeout = timedelta(seconds=config.read_timeout)

    @property
    def server_url(self) -> str:
        return self.config.endpoint

    def __repr__(self) -> str:
        """Obfuscate sensitive fields in string representation."""
        headers_repr = "<obfuscated>" if self._base_headers else "None"
        return (
            f"MCPClient(server_url={self.server_url!r}, "
            f"transport={self.config.transport.value!r}, "
            f"headers={headers_repr}, "
            f"timeout={self.timeout}, "
            f"sse_read_timeout={self.sse_read_timeout}, "
            f"read_timeout={self.read_timeout})"
        )

    @asynccontextmanager
    async def _streams(self) -> AsyncGenerator[tuple[Any, Any]]:
        """Open the read/write streams for the configured transport."""
        if self.config.transport is MCPTransport.SSE:
            async with sse_client(
                url=self.server_url,
                headers=self._base_headers,
                timeout=self.timeout,
                sse_read_timeout=self.sse_read_timeout,
            ) as (read_stream, write_stream):
                yield read_stream, write_stream
            return

        http_client = httpx.AsyncClient(
            headers=self._base_headers,
            timeout=httpx.Timeout(
                connect=self.timeout,
                read=self.sse_read_timeout,
                write=self.timeout,
                pool=self.timeout,
            ),
        )
        async with http_client:
            async with streamable_http_client(
                url=self.server_url,
                http_client=http_client,
            ) as (read_stream, write_stream, _):
                yield read_stream, write_stream

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[tuple[ClientSession, ServerInfo]]:
        """Create an initialized MCP session."""
        async with self._streams() as (read_stream, write_stream):
            async with ClientSession(
                read_stream,
                write_stream,
                read_timeout_seconds=self.read_timeout,
                client_info=Implementation(name=SERVICE_NAME, version=SERVICE_VERSION),
            ) as session:
                result = await session.initialize()
                server_info = ServerInfo(
                    name=getattr(result.serverInfo, "name", None),
                    version=getattr(result.serverInfo, "version", None),
                )
                yield session, server_info

    @retry(
        wait=wait_fixed(2),
        stop=(stop_after_attempt(3) | stop_after_delay(10)),
        reraise=True,
    )
    async def initialize(self) -> ServerInfo:
        """Perform the initialize handshake and return the server identity.

        Raises:
            MCPClientError: If the handshake fails after retries
        """
        try:
            async with self._session() as (_, server_info):
                return server_info
        except Exception as e:
            raise MCPClientError(f"Failed to initialize '{self.config.name}': {e}") from e

    async def test_connection(self) -> ServerInfo:
        """Check that the server is reachable and answers initialize."""
        return await self.initialize()

    @retry(
        wait=wait_fixed(2),
        stop=(stop_after_attempt(3) | stop_after_delay(10)),
        reraise=True,
    )
    async def list_tools(self) -> list[MCPTool]:
        """Fetch available tools from the MCP server.

        Retries up to 3 times with 2-second delays on transient failures.

        Returns:
            List of MCPTool definitions available on the server

        Raises:
            MCPClientError: If tool listing fails after retries
        """
        try:
            async with self._session() as (session, _):
                response = await session.list_tools()
                return response.tools
        except Exception as e:
            raise MCPClientError(f"Failed to list tools: {e}") from e

    @retry(
        wait=wait_fixed(2),
        stop=(stop_after_attempt(3) | stop_after_delay(10)),
        reraise=True,
    )
    async def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolCallOutcome:
        """Call a tool on the MCP server.

        Retries up to 3 times with 2-second delays on transient failures.

        Args:
            name: Name of the tool to invoke (without server prefix)
            arguments: Dictionary of arguments to pass to the tool

        Returns:
            ToolCallOutcome with the text content and error flag

        Raises:
            MCPClientError: If tool invocation fails after retries
        """
        try:
            async with self._session() as (session, _):
                result = await session.call_tool(name, arguments or {})
                return self._parse_result(result)
        except Exception as e:
            raise MCPClientError(f"Failed to call tool '{name}': {e}") from e

    def _parse_result(self, result: Any) -> ToolCallOutcome:
        """Collapse a CallToolResult into text.

        Only text content items are kept; they are joined with newlines.
        """
        texts = [
            item.text
            for item in (result.content or [])
            if getattr(item, "type", None) == "text" and getattr(item, "text", None) is not None
        ]
        return ToolCallOutcome(text="\n".join(texts), is_error=bool(getattr(result, "isError", False)))
