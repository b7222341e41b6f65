"""Application settings and configuration.

This module provides Pydantic settings classes for application configuration,
loaded from environment variables with support for nested configuration.

Example:
    YODAAI_PROVIDER__BASE_URL=http://localhost:11434/v1
    YODAAI_MCP__ENABLED=true
    YODAAI_MCP__SERVERS='[{"name":"Search","endpoint":"http://localhost:8000/mcp"}]'
"""

import logging

import pydantic_settings
from pydantic import BaseModel, Field, field_validator

from yodaai.platform.llm.providers import LLMProvider
from yodaai.platform.mcp.config import MCPServerConfig, MCPTransport


class AppSettings(BaseModel):
    log_level: str = Field("WARNING")
    log_json: bool = Field(False, description="True=JSON log lines, False=console")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class ProviderSettings(BaseModel):
    """Default OpenAI-compatible provider.

    Attributes:
        name: Display name of the provider
        base_url: OpenAI-compatible base URL, e.g. http://localhost:11434/v1
        api_key: Optional bearer token
        model: Model used for new requests
        temperature: Optional sampling temperature
        max_tokens: Optional completion token limit
        timeout: HTTP timeout in seconds
    """

    name: str = Field("Local (Ollama)")
    base_url: str = Field("http://localhost:11434/v1")
    api_key: str = Field("")
    model: str = Field("llama3.1")
    temperature: float | None = None
    max_tokens: int | None = None
    timeout: float = Field(120.0)

    def to_provider(self) -> LLMProvider:
        return LLMProvider(
            name=self.name,
            base_url=self.base_url,
            api_key=self.api_key,
            selected_model=self.model,
            is_default=True,
        )


class MCPServerSettings(BaseModel):
    """Configuration for a single MCP server.

    Attributes:
        name: Human-readable server name, also used as the tool name prefix
        endpoint: URL of the MCP server endpoint
        transport: "http_streamable" or "sse"
        enabled: Whether tools from this server are offered to the model
        api_key: Optional bearer token
        headers: Extra HTTP headers, overriding the defaults
    """

    name: str
    endpoint: str
    transport: MCPTransport = MCPTransport.HTTP_STREAMABLE
    enabled: bool = True
    api_key: str = ""
    headers: dict[str, str] = {}

    def to_config(self) -> MCPServerConfig:
        return MCPServerConfig(
            name=self.name,
            endpoint=self.endpoint,
            transport=self.transport,
            enabled=self.enabled,
            api_key=self.api_key,
            custom_headers=dict(self.headers),
        )


class MCPSettings(BaseModel):
    """MCP tool runtime configuration.

    Servers are configured as a JSON list:
    YODAAI_MCP__SERVERS='[{"name":"Search","endpoint":"http://localhost:8000/mcp"}]'
    """

    enabled: bool = Field(False)
    cache_ttl_seconds: float = Field(300.0)
    max_tool_rounds: int = Field(5, ge=0)
    servers: list[MCPServerSettings] = []

    def server_configs(self) -> list[MCPServerConfig]:
        return [server.to_config() for server in self.servers]


class ChatSettings(BaseModel):
    always_attach_app_context: bool = Field(True)


class BugsnagSettings(BaseModel):
    api_key: str | None = None
    release_stage: str = Field("local")

    @field_validator("release_stage")
    @classmethod
    def _validate_bugsnag_release_stage(cls, v):
        if v not in ["development", "production", "local"]:
            raise ValueError(f'invalid bugsnag release stage "{v}"')
        return v


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="YODAAI_",
        env_nested_delimiter="__",
    )

    app: AppSettings = AppSettings()
    bugsnag: BugsnagSettings = BugsnagSettings()

    # Default LLM provider
    provider: ProviderSettings = ProviderSettings()

    # MCP tool servers
    mcp: MCPSettings = MCPSettings()

    chat: ChatSettings = ChatSettings()
