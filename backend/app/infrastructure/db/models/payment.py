"""
Payment SQLModel for GenAI Hub

One purchase attempt for a plan. An approved payment doubles as the
subscription record for its coverage window.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Column, Numeric
from sqlmodel import Field

from app.infrastructure.db.models.base import AwareDateTime, BaseModel


class Payment(BaseModel, table=True):
    """
    Payment database table model.

    ``status`` moves pending -> approved or pending -> rejected only.
    """

    __tablename__ = "payments"

    user_id: UUID = Field(..., foreign_key="users.id", index=True, nullable=False)
    subscription_plan_id: UUID = Field(
        ...,
        foreign_key="subscription_plans.id",
        index=True,
        nullable=False,
    )

    amount: Decimal = Field(..., sa_column=Column(Numeric(10, 2), nullable=False))
    payment_method: str = Field(default="stripe", max_length=50)

    # Gateway references
    payment_id: Optional[str] = Field(default=None, max_length=255, index=True)
    payer_id: Optional[str] = Field(default=None, max_length=255)
    payer_email: Optional[str] = Field(default=None, max_length=255)

    status: str = Field(default="pending", max_length=20, index=True)
    paid_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
    subscription_starts_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime)
    subscription_ends_at: Optional[datetime] = Field(default=None, sa_type=AwareDateTime, index=True)
    is_recurring: bool = Field(default=False)

    payment_data: Optional[dict[str, Any]] = Field(
        default=None,
        sa_column=Column(JSON),
        description="Gateway audit data, merged on every transition"
    )
