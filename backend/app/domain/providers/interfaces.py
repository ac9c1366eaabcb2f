"""
Provider Interfaces for GenAI Hub

Defines the adapter contract and data models shared by every AI provider.
Each adapter isolates one provider's quirks (auth placement, payload shape,
token-count availability) behind the same two methods.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol, Union


DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

# Tokens-per-word factor used when a provider does not report usage
TOKENS_PER_WORD = 1.3


class ServiceLike(Protocol):
    """Fields of an AI service catalog entry the adapters rely on."""
    provider: str
    model: str
    cost_per_request: Union[Decimal, float, None]
    parameters: Optional[Dict[str, Any]]


@dataclass
class ProviderRequest:
    """A fully built outbound HTTP request."""
    url: str
    json: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


@dataclass
class NormalizedResult:
    """
    Provider-agnostic outcome of one AI call.

    ``metadata`` holds the provider's full parsed response body.
    """
    text: str
    tokens_used: int
    cost: float
    metadata: Dict[str, Any] = field(default_factory=dict)


def compute_cost(tokens_used: int, cost_per_request: Union[Decimal, float, None]) -> float:
    """``cost_per_request`` is the price per 1000 tokens."""
    price_per_thousand = float(cost_per_request or 0)
    return tokens_used * (price_per_thousand / 1000)


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())


def estimate_tokens(prompt: str, response_text: str) -> int:
    """Estimate token usage from the concatenated prompt and output."""
    estimate = count_words(prompt + response_text) * TOKENS_PER_WORD
    return int(math.floor(estimate + 0.5))


def dig(data: Any, *path: Union[str, int]) -> Any:
    """Walk nested dicts/lists, returning None on any missing step."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


class ProviderAdapter(ABC):
    """Base class for provider adapters."""

    @property
    @abstractmethod
    def provider(self) -> str:
        """Provider key this adapter serves."""
        pass

    @abstractmethod
    def build_request(
        self,
        service: ServiceLike,
        prompt: str,
        api_key: str,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> ProviderRequest:
        pass

    @abstractmethod
    def parse_response(
        self,
        raw: Dict[str, Any],
        service: ServiceLike,
        prompt: str,
    ) -> NormalizedResult:
        pass

    def generation_settings(
        self,
        service: ServiceLike,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> tuple[float, int]:
        """Resolve (temperature, max_tokens), defaulting when absent."""
        params = parameters if parameters is not None else (service.parameters or {})
        temperature = params.get("temperature")
        max_tokens = params.get("max_tokens")
        return (
            DEFAULT_TEMPERATURE if temperature is None else float(temperature),
            DEFAULT_MAX_TOKENS if max_tokens is None else int(max_tokens),
        )
