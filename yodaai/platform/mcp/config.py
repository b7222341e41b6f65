"""Configuration for MCP (Model Context Protocol) tool servers.

This module provides immutable configuration objects describing the servers
the tool registry connects to.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from urllib.parse import urlparse


class MCPTransport(StrEnum):
    """Transport used to reach an MCP server."""

    HTTP_STREAMABLE = "http_streamable"
    SSE = "sse"

    @property
    def display_name(self) -> str:
        if self is MCPTransport.SSE:
            return "Server-Sent Events (SSE)"
        return "HTTP Streamable"


@dataclass(frozen=True)
class MCPServerConfig:
    """Configuration for a single MCP server.

    Attributes:
        name: Human-readable server name, used as the tool name prefix
              in prompts ("<name>.<tool>")
        endpoint: Server endpoint URL (e.g. "https://mcp.example.com/mcp")
        transport: Transport protocol (default: HTTP streamable)
        enabled: Whether the registry fetches tools from this server
        api_key: Optional bearer token
        custom_headers: Extra headers; these override the defaults
        timeout: Connection timeout in seconds (default: 30.0)
        sse_read_timeout: SSE stream read timeout in seconds (default: 300.0)
        read_timeout: Per-request read timeout in seconds (default: 120.0)
    """

    name: str
    endpoint: str
    transport: MCPTransport = MCPTransport.HTTP_STREAMABLE
    enabled: bool = True
    api_key: str = ""
    custom_headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 30.0
    sse_read_timeout: float = 300.0
    read_timeout: float = 120.0

    @property
    def has_valid_endpoint(self) -> bool:
        """True if the endpoint is an http(s) URL with a host."""
        parsed = urlparse(self.endpoint.strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def build_headers(self) -> dict[str, str]:
        """Build HTTP headers for requests to this server."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        headers.update(self.custom_headers)
        return headers

    def __repr__(self) -> str:
        """Obfuscate sensitive fields in string representation."""
        api_key_repr = "<obfuscated>" if self.api_key else "''"
        headers_repr = "<obfuscated>" if self.custom_headers else "{}"
        return (
            f"MCPServerConfig(name={self.name!r}, endpoint={self.endpoint!r}, "
            f"transport={self.transport.value!r}, enabled={self.enabled}, "
            f"api_key={api_key_repr}, custom_headers={headers_repr})"
        )
