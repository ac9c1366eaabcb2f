# API Routes Module
from app.api.routes import (
    plans,
    subscriptions,
    payments,
    webhooks,
    ai,
    agents,
    profiles,
)

__all__ = [
    "plans",
    "subscriptions",
    "payments",
    "webhooks",
    "ai",
    "agents",
    "profiles",
]
