"""
CustomAgent SQLModel for GenAI Hub

User-authored prompt template bound to one AI service.
"""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class CustomAgent(BaseModel, table=True):
    """
    CustomAgent database table model.
    """

    __tablename__ = "custom_agents"

    user_id: UUID = Field(..., foreign_key="users.id", index=True, nullable=False)
    ai_service_id: UUID = Field(..., foreign_key="ai_services.id", nullable=False)

    name: str = Field(..., max_length=255)
    description: str = Field(..., sa_column=Column(Text, nullable=False))
    instructions: str = Field(..., sa_column=Column(Text, nullable=False))
    knowledge_base: Optional[str] = Field(default=None, sa_column=Column(Text))
    parameters: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))

    is_public: bool = Field(default=False, index=True)
    is_active: bool = Field(default=True)
    usage_count: int = Field(default=0, nullable=False)
