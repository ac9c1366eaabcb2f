"""
AI Provider Client

Dispatches one prompt to the provider behind an AI service and returns a
NormalizedResult. Every failure mode surfaces as a ProviderError subclass:

- UnsupportedProviderError / MissingCredentialError before any network call
- ProviderCallFailedError for timeouts, transport errors, non-2xx, bad JSON
- InvalidProviderResponseError when the expected content is missing
"""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from app.config.settings import Settings, get_settings
from app.domain.providers import (
    NormalizedResult,
    ProviderRegistry,
    ServiceLike,
    default_registry,
)
from app.infrastructure.exceptions import (
    MissingCredentialError,
    ProviderCallFailedError,
)


logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    """Resolves the API key for a provider key, or None when unset."""

    def get_api_key(self, provider: str) -> Optional[str]:
        ...


class SettingsCredentialProvider:
    """Reads provider API keys from application settings."""

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()

    def get_api_key(self, provider: str) -> Optional[str]:
        return self._settings.provider_api_key(provider)


class ProviderClient:
    """
    HTTP dispatcher for AI providers.

    Args:
        credentials: API key source
        registry: Adapter lookup
        timeout: Seconds before an outbound call is abandoned
        transport: Optional httpx transport (tests pass a MockTransport)
    """

    def __init__(
        self,
        credentials: Optional[CredentialProvider] = None,
        registry: Optional[ProviderRegistry] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._credentials = credentials or SettingsCredentialProvider()
        self._registry = registry or default_registry
        self._timeout = timeout if timeout is not None else get_settings().provider_timeout_seconds
        self._transport = transport

    async def call(
        self,
        service: ServiceLike,
        prompt: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> NormalizedResult:
        """
        Send ``prompt`` to ``service`` and normalize the response.

        Args:
            service: Catalog entry naming provider and model
            prompt: Final prompt text
            parameters: Generation overrides; service parameters when omitted

        Returns:
            NormalizedResult with text, tokens_used, cost and metadata
        """
        adapter = self._registry.get(service.provider)

        api_key = self._credentials.get_api_key(service.provider)
        if not api_key:
            raise MissingCredentialError(service.provider)

        request = adapter.build_request(service, prompt, api_key, parameters)
        raw = await self._post(service, request.url, request.json, request.headers, request.params)
        return adapter.parse_response(raw, service, prompt)

    async def _post(
        self,
        service: ServiceLike,
        url: str,
        body: Dict[str, Any],
        headers: Dict[str, str],
        params: Dict[str, str],
    ) -> Dict[str, Any]:
        provider = service.provider
        logger.info(f"[PROVIDER] Calling {provider} model {service.model}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers, params=params)
                response.raise_for_status()
                payload = response.json()

        except httpx.TimeoutException as e:
            logger.warning(f"[PROVIDER] {provider} timed out after {self._timeout}s")
            raise ProviderCallFailedError(
                f"The {provider} API did not respond in time",
                provider=provider,
                model=service.model,
                original_error=e,
            )
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"[PROVIDER] {provider} returned HTTP {e.response.status_code}: "
                f"{e.response.text[:500]}"
            )
            raise ProviderCallFailedError(
                f"The {provider} API returned HTTP {e.response.status_code}",
                provider=provider,
                model=service.model,
                original_error=e,
            )
        except httpx.HTTPError as e:
            logger.warning(f"[PROVIDER] {provider} transport error: {e}")
            raise ProviderCallFailedError(
                f"Could not reach the {provider} API",
                provider=provider,
                model=service.model,
                original_error=e,
            )
        except ValueError as e:
            logger.warning(f"[PROVIDER] {provider} returned malformed JSON: {e}")
            raise ProviderCallFailedError(
                f"The {provider} API returned a malformed response",
                provider=provider,
                model=service.model,
                original_error=e,
            )

        if not isinstance(payload, dict):
            raise ProviderCallFailedError(
                f"The {provider} API returned a malformed response",
                provider=provider,
                model=service.model,
            )
        return payload


# =============================================================================
# Singleton Instance
# =============================================================================

_provider_client_instance: Optional[ProviderClient] = None


def get_provider_client() -> ProviderClient:
    """Get or create the provider client singleton."""
    global _provider_client_instance

    if _provider_client_instance is None:
        _provider_client_instance = ProviderClient()

    return _provider_client_instance
