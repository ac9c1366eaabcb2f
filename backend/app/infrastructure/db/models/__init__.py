"""
SQLModel ORM Models for GenAI Hub

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from app.infrastructure.db.models.base import (
    AwareDateTime,
    BaseModel,
    TimestampMixin,
    UUIDMixin,
    utcnow,
)
from app.infrastructure.db.models.user import User
from app.infrastructure.db.models.user_profile import (
    UserProfile,
    UserProfileBase,
    UserProfileUpdate,
    UserProfileRead,
)
from app.infrastructure.db.models.subscription_plan import SubscriptionPlan
from app.infrastructure.db.models.payment import Payment
from app.infrastructure.db.models.ai_service import AIService
from app.infrastructure.db.models.custom_agent import CustomAgent
from app.infrastructure.db.models.ai_interaction import AIInteraction


__all__ = [
    # Base
    "AwareDateTime",
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    # Identity
    "User",
    "UserProfile",
    "UserProfileBase",
    "UserProfileUpdate",
    "UserProfileRead",
    # Billing
    "SubscriptionPlan",
    "Payment",
    # AI
    "AIService",
    "CustomAgent",
    "AIInteraction",
]
