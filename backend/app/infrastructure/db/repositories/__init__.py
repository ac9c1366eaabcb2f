"""
Repository Layer for GenAI Hub

Exports all repository classes for dependency injection.
"""

from app.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
    IWriteRepository,
)
from app.infrastructure.db.repositories.user_repository import UserRepository
from app.infrastructure.db.repositories.user_profile_repository import (
    UserProfileRepository,
)
from app.infrastructure.db.repositories.subscription_plan_repository import (
    SubscriptionPlanRepository,
)
from app.infrastructure.db.repositories.payment_repository import (
    PaymentRepository,
    merge_payment_data,
)
from app.infrastructure.db.repositories.ai_service_repository import (
    AIServiceRepository,
)
from app.infrastructure.db.repositories.custom_agent_repository import (
    CustomAgentRepository,
)
from app.infrastructure.db.repositories.ai_interaction_repository import (
    AIInteractionRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    "IWriteRepository",
    # Repositories
    "UserRepository",
    "UserProfileRepository",
    "SubscriptionPlanRepository",
    "PaymentRepository",
    "merge_payment_data",
    "AIServiceRepository",
    "CustomAgentRepository",
    "AIInteractionRepository",
]
