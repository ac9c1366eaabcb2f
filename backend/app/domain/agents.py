"""
Custom Agent Domain Rules

Prompt composition and authorization predicates for user-authored agents.
"""

from typing import Any, Optional, Protocol
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


INSTRUCTIONS_HEADER = "System instructions:"
KNOWLEDGE_HEADER = "Base knowledge:"
USER_INPUT_HEADER = "User input:"

INSTRUCTIONS_MAX_LENGTH = 4000
KNOWLEDGE_BASE_MAX_LENGTH = 10000


class AgentLike(Protocol):
    user_id: UUID
    instructions: str
    knowledge_base: Optional[str]
    is_public: bool
    is_active: bool


def compose_prompt(
    instructions: str,
    knowledge_base: Optional[str],
    user_input: str,
) -> str:
    """
    Build the final prompt sent to the provider.

    Sections always appear in the order instructions, knowledge, input.
    The knowledge section is omitted entirely when there is no knowledge base.
    """
    sections = [f"{INSTRUCTIONS_HEADER}\n{instructions}"]
    if knowledge_base and knowledge_base.strip():
        sections.append(f"{KNOWLEDGE_HEADER}\n{knowledge_base}")
    sections.append(f"{USER_INPUT_HEADER}\n{user_input}")
    return "\n\n".join(sections)


def compose_agent_prompt(agent: AgentLike, user_input: str) -> str:
    return compose_prompt(agent.instructions, agent.knowledge_base, user_input)


def can_be_used_by(agent: AgentLike, user_id: UUID) -> bool:
    """Owners always; anyone else only for public, active agents."""
    return agent.user_id == user_id or (agent.is_public and agent.is_active)


def can_be_modified_by(agent: AgentLike, user_id: UUID) -> bool:
    """Only the owner may edit or delete; public visibility grants nothing."""
    return agent.user_id == user_id


def merge_parameters(
    base: Optional[dict[str, Any]],
    override: Optional[dict[str, Any]],
) -> dict[str, Any]:
    """Overlay agent parameters on the service defaults."""
    merged = dict(base or {})
    merged.update({k: v for k, v in (override or {}).items() if v is not None})
    return merged


# =============================================================================
# Request/Response DTOs
# =============================================================================

class AgentParameters(BaseModel):
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1, le=32000)


class AgentCreateRequest(BaseModel):
    """Request DTO for creating a custom agent."""
    ai_service_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=1000)
    instructions: str = Field(..., min_length=1, max_length=INSTRUCTIONS_MAX_LENGTH)
    knowledge_base: Optional[str] = Field(default=None, max_length=KNOWLEDGE_BASE_MAX_LENGTH)
    is_public: bool = False
    parameters: AgentParameters = Field(default_factory=AgentParameters)


class AgentUpdateRequest(AgentCreateRequest):
    """Agents are replaced wholesale on update."""
    is_active: bool = True


class AgentInteractRequest(BaseModel):
    prompt: str = Field(..., min_length=5, max_length=1000)


class AgentResponse(BaseModel):
    """Response DTO for a custom agent."""
    id: UUID
    user_id: UUID
    ai_service_id: UUID
    name: str
    description: str
    instructions: str
    knowledge_base: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None
    is_public: bool
    is_active: bool
    usage_count: int

    model_config = ConfigDict(from_attributes=True)


class AgentListResponse(BaseModel):
    own: list[AgentResponse]
    public: list[AgentResponse]
