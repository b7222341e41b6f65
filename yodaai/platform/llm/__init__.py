"""LLM client module.

This module provides the OpenAI-compatible transport used by the chat session:
- Chat completion client (non-streaming and SSE streaming)
- Wire message types, including multimodal content parts
- Provider records and the provider registry
- User-facing error hierarchy
"""

from yodaai.platform.llm.client import OpenAICompatibleClient
from yodaai.platform.llm.exceptions import (
    EmptyResponseError,
    InvalidBaseURLError,
    LLMClientError,
    LLMDecodingError,
    LLMStatusError,
    LLMStreamError,
    LLMTransportError,
    ProviderNotConfiguredError,
)
from yodaai.platform.llm.messages import ChatMessage, ContentPart, ModelInfo, Role, encode_image_data_url
from yodaai.platform.llm.providers import LLMProvider, ProviderNotFoundError, ProviderRegistry

__all__ = [
    "OpenAICompatibleClient",
    # Messages
    "ChatMessage",
    "ContentPart",
    "ModelInfo",
    "Role",
    "encode_image_data_url",
    # Providers
    "LLMProvider",
    "ProviderNotFoundError",
    "ProviderRegistry",
    # Errors
    "EmptyResponseError",
    "InvalidBaseURLError",
    "LLMClientError",
    "LLMDecodingError",
    "LLMStatusError",
    "LLMStreamError",
    "LLMTransportError",
    "ProviderNotConfiguredError",
]
