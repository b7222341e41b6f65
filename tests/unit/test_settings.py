"""Unit tests for application settings.

This module tests all Pydantic settings classes and their validators.
"""

import pytest
from pydantic import ValidationError

from yodaai.platform.mcp.config import MCPTransport
from yodaai.platform.settings import (
    AppSettings,
    BugsnagSettings,
    MCPServerSettings,
    MCPSettings,
    ProviderSettings,
    Settings,
)


class TestAppSettings:
    """Tests for AppSettings configuration."""

    def test_default_values(self):
        settings = AppSettings()
        assert settings.log_level == "WARNING"
        assert settings.log_json is False

    def test_log_level_validation_valid(self):
        """Valid log levels should be accepted and upper-cased."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "debug", "info"]:
            settings = AppSettings(log_level=level)
            assert settings.log_level == level.upper()

    def test_log_level_validation_invalid(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="INVALID")


class TestBugsnagSettings:
    """Tests for BugsnagSettings configuration."""

    def test_valid_release_stages(self):
        for stage in ["development", "production", "local"]:
            settings = BugsnagSettings(api_key="test-key", release_stage=stage)
            assert settings.release_stage == stage

    def test_invalid_release_stage(self):
        with pytest.raises(ValidationError):
            BugsnagSettings(api_key="test-key", release_stage="staging")


class TestProviderSettings:
    def test_to_provider(self):
        provider = ProviderSettings(base_url="http://llm.test/v1", api_key="k", model="m").to_provider()
        assert provider.base_url == "http://llm.test/v1"
        assert provider.api_key == "k"
        assert provider.selected_model == "m"
        assert provider.is_default is True


class TestMCPSettings:
    def test_defaults(self):
        settings = MCPSettings()
        assert settings.enabled is False
        assert settings.cache_ttl_seconds == 300.0
        assert settings.max_tool_rounds == 5
        assert settings.servers == []

    def test_negative_tool_rounds_rejected(self):
        with pytest.raises(ValidationError):
            MCPSettings(max_tool_rounds=-1)

    def test_server_configs(self):
        settings = MCPSettings(
            servers=[
                MCPServerSettings(
                    name="Search",
                    endpoint="http://localhost:8000/sse",
                    transport="sse",
                    headers={"X-Team": "chat"},
                )
            ]
        )
        [config] = settings.server_configs()
        assert config.name == "Search"
        assert config.transport is MCPTransport.SSE
        assert config.custom_headers == {"X-Team": "chat"}


class TestSettingsFromEnvironment:
    def test_nested_environment_variables(self, monkeypatch):
        monkeypatch.setenv("YODAAI_APP__LOG_LEVEL", "debug")
        monkeypatch.setenv("YODAAI_PROVIDER__BASE_URL", "https://api.openai.com/v1")
        monkeypatch.setenv("YODAAI_PROVIDER__MODEL", "gpt-4o-mini")
        monkeypatch.setenv("YODAAI_MCP__ENABLED", "true")
        monkeypatch.setenv(
            "YODAAI_MCP__SERVERS",
            '[{"name": "Search", "endpoint": "http://localhost:8000/mcp"}]',
        )

        settings = Settings()

        assert settings.app.log_level == "DEBUG"
        assert settings.provider.base_url == "https://api.openai.com/v1"
        assert settings.provider.model == "gpt-4o-mini"
        assert settings.mcp.enabled is True
        assert settings.mcp.servers[0].name == "Search"
        assert settings.mcp.servers[0].transport is MCPTransport.HTTP_STREAMABLE

    def test_defaults_without_environment(self):
        settings = Settings()
        assert settings.provider.base_url == "http://localhost:11434/v1"
        assert settings.chat.always_attach_app_context is True
