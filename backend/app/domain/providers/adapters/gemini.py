"""
Gemini Adapter

Google's generateContent REST API. The API key travels as a query
parameter and the response carries no token counts, so usage is estimated
from the prompt and output word count.
"""

from typing import Any, Dict, Optional

from app.domain.providers.interfaces import (
    NormalizedResult,
    ProviderAdapter,
    ProviderRequest,
    ServiceLike,
    compute_cost,
    dig,
    estimate_tokens,
)
from app.infrastructure.exceptions import InvalidProviderResponseError


class GeminiAdapter(ProviderAdapter):
    """Adapter for Gemini models."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1/models"

    @property
    def provider(self) -> str:
        return "gemini"

    def build_request(
        self,
        service: ServiceLike,
        prompt: str,
        api_key: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> ProviderRequest:
        temperature, max_tokens = self.generation_settings(service, parameters)
        return ProviderRequest(
            url=f"{self.BASE_URL}/{service.model}:generateContent",
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
            json={
                "contents": [
                    {"parts": [{"text": prompt}]},
                ],
                "generationConfig": {
                    "temperature": temperature,
                    "maxOutputTokens": max_tokens,
                },
            },
        )

    def parse_response(
        self,
        raw: Dict[str, Any],
        service: ServiceLike,
        prompt: str,
    ) -> NormalizedResult:
        text = dig(raw, "candidates", 0, "content", "parts", 0, "text")
        if not isinstance(text, str):
            raise InvalidProviderResponseError(
                "Invalid response from the Gemini API",
                provider=self.provider,
                model=service.model,
            )

        tokens_used = estimate_tokens(prompt, text)

        return NormalizedResult(
            text=text,
            tokens_used=tokens_used,
            cost=compute_cost(tokens_used, service.cost_per_request),
            metadata=raw,
        )
