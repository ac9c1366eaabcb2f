"""
Provider Registry

Maps provider keys to adapters so dispatch never grows a conditional.
"""

from typing import Dict, Iterable, Optional

from app.domain.providers.interfaces import ProviderAdapter
from app.domain.providers.adapters import (
    ChatGPTAdapter,
    DeepSeekAdapter,
    GeminiAdapter,
)
from app.infrastructure.exceptions import UnsupportedProviderError


class ProviderRegistry:
    """Lookup table of adapters keyed by provider."""

    def __init__(self, adapters: Optional[Iterable[ProviderAdapter]] = None):
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters or self._default_adapters():
            self.register(adapter)

    def _default_adapters(self) -> list[ProviderAdapter]:
        return [
            ChatGPTAdapter(),
            GeminiAdapter(),
            DeepSeekAdapter(),
        ]

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.provider] = adapter

    def get(self, provider: str) -> ProviderAdapter:
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise UnsupportedProviderError(provider)
        return adapter

    def supports(self, provider: str) -> bool:
        return provider in self._adapters

    @property
    def providers(self) -> list[str]:
        return sorted(self._adapters)


default_registry = ProviderRegistry()


def get_adapter(provider: str) -> ProviderAdapter:
    """Resolve an adapter from the default registry."""
    return default_registry.get(provider)
