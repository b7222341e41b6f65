"""Custom exception hierarchy for the OpenAI-compatible client.

Every error carries a message suitable for showing to the user as-is.
"""


class LLMClientError(Exception):
    """Base exception for all LLM client errors."""


class InvalidBaseURLError(LLMClientError):
    """Raised when the provider base URL is not an http(s) URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        super().__init__("Invalid server URL. Please check your provider settings.")


class ProviderNotConfiguredError(LLMClientError):
    """Raised when no usable provider or model is configured."""

    def __init__(self, message: str = "Provider is not configured. Please add an API key in Settings."):
        super().__init__(message)


class LLMTransportError(LLMClientError):
    """Raised when the request could not be sent or the connection dropped."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        self.detail = message
        super().__init__("Network error. Please check your connection and try again.")


class LLMStatusError(LLMClientError):
    """Raised when the server answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str | None = None):
        self.status_code = status_code
        self.body = body
        super().__init__(self.describe_status(status_code))

    @staticmethod
    def describe_status(status_code: int) -> str:
        if status_code == 401:
            return "Unauthorized (401). Please verify your API key."
        if status_code == 403:
            return "Forbidden (403). Your API key may not have access to this model."
        if status_code == 404:
            return "Endpoint not found (404). Please check the provider base URL."
        if status_code == 429:
            return "Rate limited (429). Please wait and try again."
        if 500 <= status_code <= 599:
            return f"Server error ({status_code}). Please try again later."
        return f"Unexpected server response ({status_code})."


class LLMDecodingError(LLMClientError):
    """Raised when a response body cannot be decoded."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__("Could not read the server response. Please try again.")


class EmptyResponseError(LLMClientError):
    """Raised when the model returns no choices."""

    def __init__(self):
        super().__init__("The model returned an empty response.")


class LLMStreamError(LLMClientError):
    """Raised when the server reports an error in the middle of a stream."""
