"""
SubscriptionPlan SQLModel for GenAI Hub

A purchasable tier granting provider access and usage limits.
Limits of zero or below mean unlimited.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Numeric, Text
from sqlmodel import Field

from app.infrastructure.db.models.base import BaseModel


class SubscriptionPlan(BaseModel, table=True):
    """
    SubscriptionPlan database table model.
    """

    __tablename__ = "subscription_plans"

    name: str = Field(..., max_length=255)
    description: str = Field(..., sa_column=Column(Text, nullable=False))
    price: Decimal = Field(..., sa_column=Column(Numeric(10, 2), nullable=False))
    billing_period: str = Field(default="monthly", max_length=20)

    # Quotas
    ai_requests_limit: int = Field(default=0, description="Monthly interactions; <= 0 is unlimited")
    custom_agents_limit: int = Field(default=1, description="Lifetime agents; <= 0 is unlimited")

    # Provider access
    can_use_chatgpt: bool = Field(default=False)
    can_use_gemini: bool = Field(default=False)
    can_use_deepseek: bool = Field(default=False)

    is_active: bool = Field(default=True, index=True)

    # Stripe
    stripe_price_id: Optional[str] = Field(default=None, max_length=255)
