"""LLM provider records and the provider registry.

A provider is an OpenAI-compatible endpoint plus the model last selected for
it. Exactly one provider is the default used for new requests.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class LLMProvider:
    """OpenAI-compatible provider configuration.

    Attributes:
        name: Display name
        base_url: OpenAI-compatible base URL, e.g. http://localhost:11434/v1
        api_key: Optional bearer token (blank means no Authorization header)
        selected_model: Last selected model for this provider
        is_default: Whether this provider is used for new requests
    """

    name: str = "Local (Ollama)"
    base_url: str = "http://localhost:11434/v1"
    api_key: str = ""
    selected_model: str = "llama3.1"
    is_default: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def __repr__(self) -> str:
        """Obfuscate the API key in string representation."""
        api_key_repr = "<obfuscated>" if self.api_key else "''"
        return (
            f"LLMProvider(name={self.name!r}, base_url={self.base_url!r}, "
            f"api_key={api_key_repr}, selected_model={self.selected_model!r}, "
            f"is_default={self.is_default})"
        )


class ProviderNotFoundError(KeyError):
    """Raised when a provider ID is not registered."""


class ProviderRegistry:
    """In-memory provider store with default-provider bookkeeping."""

    def __init__(self, providers: list[LLMProvider] | None = None) -> None:
        self._providers: dict[str, LLMProvider] = {}
        for provider in providers or []:
            self._providers[provider.id] = provider

    def list_providers(self) -> list[LLMProvider]:
        """Providers ordered by most recently updated first."""
        return sorted(self._providers.values(), key=lambda p: p.updated_at, reverse=True)

    def get(self, provider_id: str) -> LLMProvider:
        try:
            return self._providers[provider_id]
        except KeyError:
            raise ProviderNotFoundError(provider_id) from None

    def add(self, provider: LLMProvider) -> LLMProvider:
        """Register a provider. A default provider demotes the current default."""
        if provider.is_default:
            self._clear_default()
        self._providers[provider.id] = provider
        logger.info("Added provider %s (%s)", provider.name, provider.base_url)
        return provider

    def update(self, provider_id: str, **changes) -> LLMProvider:
        """Apply field changes to a provider and bump its updated_at."""
        current = self.get(provider_id)
        if changes.get("is_default"):
            self._clear_default()
        updated = replace(current, **changes, updated_at=_utc_now())
        self._providers[provider_id] = updated
        return updated

    def remove(self, provider_id: str) -> LLMProvider:
        """Remove a provider, promoting the most recent remaining one if it was the default."""
        removed = self._providers.pop(provider_id, None)
        if removed is None:
            raise ProviderNotFoundError(provider_id)
        if removed.is_default:
            remaining = self.list_providers()
            if remaining:
                self.set_default(remaining[0].id)
        return removed

    def set_default(self, provider_id: str) -> LLMProvider:
        return self.update(provider_id, is_default=True)

    def ensure_default(self) -> LLMProvider:
        """Return the default provider, creating or promoting one if needed.

        Resolution order:
        1. Existing default provider
        2. Most recently updated provider, promoted to default
        3. A new provider with local defaults
        """
        providers = self.list_providers()
        for provider in providers:
            if provider.is_default:
                return provider
        if providers:
            return self.set_default(providers[0].id)
        return self.add(LLMProvider())

    def _clear_default(self) -> None:
        for provider_id, provider in list(self._providers.items()):
            if provider.is_default:
                self._providers[provider_id] = replace(provider, is_default=False)
