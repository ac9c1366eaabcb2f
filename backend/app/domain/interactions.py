"""
Interaction DTOs

Request/response shapes for the AI service catalog and interaction history.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.subscription import ProviderKey


PROMPT_MIN_LENGTH = 5
PROMPT_MAX_LENGTH = 4000


class AIServiceResponse(BaseModel):
    """An AI service the user may call. Never exposes credentials."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    provider: str
    model: str
    description: Optional[str] = None
    cost_per_request: Decimal


class ServiceParameters(BaseModel):
    """Default generation parameters for a catalog entry."""
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1, le=32000)


class AIServiceCreateRequest(BaseModel):
    """Request DTO for adding a provider model to the catalog (admin)."""
    name: str = Field(..., min_length=1, max_length=255)
    provider: ProviderKey
    model: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True
    cost_per_request: Decimal = Field(..., ge=0, description="Price per 1000 tokens")
    parameters: ServiceParameters = Field(default_factory=ServiceParameters)


class AIServiceUpdateRequest(AIServiceCreateRequest):
    """Catalog entries are replaced wholesale on update."""
    pass


class AIServiceAdminResponse(AIServiceResponse):
    """Catalog entry as administrators see it, inactive ones included."""
    is_active: bool
    parameters: Optional[dict[str, Any]] = None
    interaction_count: int = 0


class InteractionRequest(BaseModel):
    """Request DTO for a direct prompt."""
    ai_service_id: UUID
    prompt: str = Field(..., min_length=PROMPT_MIN_LENGTH, max_length=PROMPT_MAX_LENGTH)


class InteractionResponse(BaseModel):
    """Response DTO for an interaction (successful or failed)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ai_service_id: UUID
    custom_agent_id: Optional[UUID] = None
    prompt: str
    response: Optional[str] = None
    tokens_used: int
    cost: Decimal
    is_successful: bool
    error_message: Optional[str] = None
    created_at: datetime
