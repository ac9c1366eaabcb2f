"""
AIService SQLModel for GenAI Hub

Catalog entry for one provider model. API keys are never stored here;
they are resolved by provider from configuration.
"""

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Column, Numeric, Text
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class AIService(BaseModel, table=True):
    """
    AIService database table model.
    """

    __tablename__ = "ai_services"

    name: str = Field(..., max_length=255)
    provider: str = Field(..., max_length=50, index=True, description="chatgpt | gemini | deepseek")
    model: str = Field(..., max_length=100)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))
    is_active: bool = Field(default=True, index=True)
    cost_per_request: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(10, 4), nullable=False),
        description="Price per 1000 tokens"
    )
    parameters: Optional[dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
