# Provider normalization module for GenAI Hub
from app.domain.providers.interfaces import (
    NormalizedResult,
    ProviderAdapter,
    ProviderRequest,
    ServiceLike,
    compute_cost,
    estimate_tokens,
)
from app.domain.providers.registry import (
    ProviderRegistry,
    default_registry,
    get_adapter,
)

__all__ = [
    "NormalizedResult",
    "ProviderAdapter",
    "ProviderRequest",
    "ServiceLike",
    "compute_cost",
    "estimate_tokens",
    "ProviderRegistry",
    "default_registry",
    "get_adapter",
]
