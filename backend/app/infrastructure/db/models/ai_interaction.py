"""
AIInteraction SQLModel for GenAI Hub

Audit record of one attempted AI call. Rows are written as a failed
placeholder before dispatch and completed exactly once afterwards.
"""

from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Column, Numeric, Text
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class AIInteraction(BaseModel, table=True):
    """
    AIInteraction database table model.
    """

    __tablename__ = "ai_interactions"

    user_id: UUID = Field(..., foreign_key="users.id", index=True, nullable=False)
    ai_service_id: UUID = Field(..., foreign_key="ai_services.id", nullable=False)
    custom_agent_id: Optional[UUID] = Field(
        default=None,
        foreign_key="custom_agents.id",
        ondelete="SET NULL",
        index=True,
    )

    prompt: str = Field(..., sa_column=Column(Text, nullable=False))
    response: Optional[str] = Field(default=None, sa_column=Column(Text))
    tokens_used: int = Field(default=0, nullable=False)
    cost: Decimal = Field(default=Decimal("0"), sa_column=Column(Numeric(12, 6), nullable=False))

    is_successful: bool = Field(default=False, nullable=False)
    error_message: Optional[str] = Field(default=None, sa_column=Column(Text))

    # "metadata" is reserved on declarative classes
    response_metadata: Optional[dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON),
        description="Provider's full parsed response body"
    )
