"""OpenAI-compatible chat completions client.

Talks to any server implementing the OpenAI `/chat/completions` and `/models`
endpoints (OpenAI, Ollama, LM Studio, LiteLLM proxies, ...).

Usage:
    client = OpenAICompatibleClient()
    async for delta in client.stream_chat_completion(provider, messages):
        print(delta, end="")
"""

import json
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from yodaai.platform.constants import USER_AGENT
from yodaai.platform.llm.exceptions import (
    EmptyResponseError,
    InvalidBaseURLError,
    LLMDecodingError,
    LLMStatusError,
    LLMStreamError,
    LLMTransportError,
    ProviderNotConfiguredError,
)
from yodaai.platform.llm.messages import ChatMessage, ModelInfo
from yodaai.platform.llm.providers import LLMProvider

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"


class OpenAICompatibleClient:
    """Async HTTP client for OpenAI-compatible endpoints."""

    def __init__(
        self,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Request timeout in seconds (default: 120.0)
            http_client: Optional shared client; when omitted a client is
                created per request and closed afterwards
        """
        self.timeout = timeout
        self._http_client = http_client

    @asynccontextmanager
    async def _client(self) -> AsyncGenerator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def create_chat_completion(
        self,
        provider: LLMProvider,
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send a non-streaming chat completion request.

        Returns:
            Content of the first choice

        Raises:
            EmptyResponseError: If the response has no choices
            LLMClientError: For URL, transport, status and decoding failures
        """
        body = self._completion_body(provider, messages, False, temperature, max_tokens)
        data = await self._send_json(provider, "POST", "chat/completions", body)

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list):
            raise LLMDecodingError("missing choices")
        if not choices:
            raise EmptyResponseError()
        if not isinstance(choices[0], dict):
            raise LLMDecodingError(f"invalid choice: {choices[0]!r:.200}")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""

    async def stream_chat_completion(
        self,
        provider: LLMProvider,
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AsyncIterator[str]:
        """Stream a chat completion, yielding content deltas as they arrive.

        Only `data: ` lines of the SSE stream are considered; `[DONE]` ends
        the stream and malformed chunks are skipped.

        Yields:
            Non-empty content deltas

        Raises:
            LLMStreamError: If the server sends an error object mid-stream
            LLMClientError: For URL, transport and status failures
        """
        url = self._endpoint(provider, "chat/completions")
        headers = self._headers(provider) | {"Accept": "text/event-stream"}
        body = self._completion_body(provider, messages, True, temperature, max_tokens)

        line_count = 0
        yield_count = 0
        async with self._client() as client:
            try:
                async with client.stream("POST", url, json=body, headers=headers) as response:
                    if not response.is_success:
                        detail = (await response.aread()).decode("utf-8", errors="replace")
                        raise LLMStatusError(response.status_code, detail)

                    async for line in response.aiter_lines():
                        line_count += 1
                        if not line.startswith(SSE_DATA_PREFIX):
                            continue
                        payload = line[len(SSE_DATA_PREFIX) :].strip()
                        if payload == SSE_DONE:
                            break
                        delta = self._parse_stream_chunk(payload, line_count)
                        if delta:
                            yield_count += 1
                            yield delta
            except httpx.TransportError as e:
                raise LLMTransportError(str(e), url=url) from e

        logger.debug("Stream ended after %d lines, %d deltas", line_count, yield_count)

    async def list_models(self, provider: LLMProvider) -> list[ModelInfo]:
        """List models offered by the provider, sorted by ID."""
        data = await self._send_json(provider, "GET", "models", None)
        try:
            models = [ModelInfo.from_dict(item) for item in data["data"]]
        except (KeyError, TypeError) as e:
            raise LLMDecodingError(f"invalid models payload: {e}") from e
        return sorted(models, key=lambda model: model.id)

    async def _send_json(
        self,
        provider: LLMProvider,
        method: str,
        path: str,
        body: dict[str, Any] | None,
    ) -> Any:
        url = self._endpoint(provider, path)
        async with self._client() as client:
            try:
                response = await client.request(method, url, json=body, headers=self._headers(provider))
            except httpx.TransportError as e:
                raise LLMTransportError(str(e), url=url) from e

        if not response.is_success:
            raise LLMStatusError(response.status_code, response.text)
        try:
            return response.json()
        except (ValueError, RecursionError) as e:
            raise LLMDecodingError(str(e)) from e

    @staticmethod
    def _parse_stream_chunk(payload: str, line_number: int) -> str | None:
        try:
            chunk = json.loads(payload)
        except (ValueError, RecursionError):
            logger.debug("Skipping malformed stream chunk on line %d: %.200s", line_number, payload)
            return None
        if not isinstance(chunk, dict):
            return None
        if "error" in chunk:
            error = chunk["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise LLMStreamError(str(message or "The stream was interrupted by a server error."))

        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        delta = choices[0].get("delta")
        if not isinstance(delta, dict):
            return None
        content = delta.get("content")
        if content is not None and not isinstance(content, str):
            logger.debug("Skipping non-text stream content on line %d: %.200r", line_number, content)
            return None
        return content

    @staticmethod
    def _completion_body(
        provider: LLMProvider,
        messages: Sequence[ChatMessage],
        stream: bool,
        temperature: float | None,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        if not provider.selected_model.strip():
            raise ProviderNotConfiguredError("No model selected. Pick a model for this provider.")
        body: dict[str, Any] = {
            "model": provider.selected_model,
            "messages": [message.to_dict() for message in messages],
            "stream": stream,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        return body

    @staticmethod
    def _endpoint(provider: LLMProvider, path: str) -> str:
        base_url = provider.base_url.strip()
        try:
            scheme = httpx.URL(base_url).scheme
        except httpx.InvalidURL:
            raise InvalidBaseURLError(base_url) from None
        if scheme not in ("http", "https"):
            raise InvalidBaseURLError(base_url)
        return f"{base_url.rstrip('/')}/{path}"

    @staticmethod
    def _headers(provider: LLMProvider) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        if provider.api_key.strip():
            headers["Authorization"] = f"Bearer {provider.api_key.strip()}"
        return headers
