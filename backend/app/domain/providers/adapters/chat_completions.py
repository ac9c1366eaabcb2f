"""
Chat Completions Adapters (ChatGPT, DeepSeek)

Both providers speak the OpenAI chat-completions dialect: bearer-token
auth, role/content messages, and a reported ``usage.total_tokens``.
"""

from typing import Any, Dict, Optional

from app.domain.providers.interfaces import (
    NormalizedResult,
    ProviderAdapter,
    ProviderRequest,
    ServiceLike,
    compute_cost,
    dig,
)
from app.infrastructure.exceptions import InvalidProviderResponseError


class ChatCompletionsAdapter(ProviderAdapter):
    """Shared request/response handling for chat-completions providers."""

    ENDPOINT: str = ""
    DISPLAY_NAME: str = ""

    def build_request(
        self,
        service: ServiceLike,
        prompt: str,
        api_key: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> ProviderRequest:
        temperature, max_tokens = self.generation_settings(service, parameters)
        return ProviderRequest(
            url=self.ENDPOINT,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": service.model,
                "messages": [
                    {"role": "user", "content": prompt},
                ],
                "temperature": temperature,
                "max_tokens": max_tokens,
            },
        )

    def parse_response(
        self,
        raw: Dict[str, Any],
        service: ServiceLike,
        prompt: str,
    ) -> NormalizedResult:
        text = dig(raw, "choices", 0, "message", "content")
        if not isinstance(text, str):
            raise InvalidProviderResponseError(
                f"Invalid response from the {self.DISPLAY_NAME} API",
                provider=self.provider,
                model=service.model,
            )

        tokens_used = int(dig(raw, "usage", "total_tokens") or 0)

        return NormalizedResult(
            text=text,
            tokens_used=tokens_used,
            cost=compute_cost(tokens_used, service.cost_per_request),
            metadata=raw,
        )


class ChatGPTAdapter(ChatCompletionsAdapter):
    ENDPOINT = "https://api.openai.com/v1/chat/completions"
    DISPLAY_NAME = "ChatGPT"

    @property
    def provider(self) -> str:
        return "chatgpt"


class DeepSeekAdapter(ChatCompletionsAdapter):
    ENDPOINT = "https://api.deepseek.com/v1/chat/completions"
    DISPLAY_NAME = "DeepSeek"

    @property
    def provider(self) -> str:
        return "deepseek"
