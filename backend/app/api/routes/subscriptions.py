"""
Subscription API Routes

Current subscription status and usage against plan limits.
"""

from fastapi import APIRouter

from app.api.dependencies import CurrentUser, EntitlementServiceDep
from app.domain.subscription import SubscriptionStatusResponse, UsageSummary


router = APIRouter()


@router.get("/subscriptions/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    user: CurrentUser,
    entitlements: EntitlementServiceDep,
):
    """
    Get the current user's subscription status.
    
    Users without an approved, unexpired payment get ``is_active=false``.
    """
    return await entitlements.subscription_status(user.id)


@router.get("/subscriptions/usage", response_model=UsageSummary)
async def get_usage(
    user: CurrentUser,
    entitlements: EntitlementServiceDep,
):
    """This month's and lifetime consumption, with plan limits."""
    return await entitlements.usage_summary(user.id)
