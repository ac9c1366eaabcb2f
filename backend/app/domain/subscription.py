"""
Subscription Domain Models

Domain models for plans, payments and entitlements.
Enums, DTOs, and pure rules for the billing bounded context.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol
from uuid import UUID

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field


class BillingPeriod(str, Enum):
    """Billing period for subscription plans."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class PaymentStatus(str, Enum):
    """Payment lifecycle status. APPROVED and REJECTED are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ProviderKey(str, Enum):
    """Supported generative-AI providers."""
    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"


TERMINAL_STATUSES = frozenset({PaymentStatus.APPROVED.value, PaymentStatus.REJECTED.value})

BILLING_PERIOD_OFFSETS = {
    BillingPeriod.MONTHLY.value: relativedelta(months=1),
    BillingPeriod.QUARTERLY.value: relativedelta(months=3),
    BillingPeriod.YEARLY.value: relativedelta(years=1),
}


# =============================================================================
# Protocols (satisfied by the ORM rows)
# =============================================================================

class PlanLike(Protocol):
    ai_requests_limit: int
    custom_agents_limit: int
    can_use_chatgpt: bool
    can_use_gemini: bool
    can_use_deepseek: bool


class PaymentLike(Protocol):
    status: str
    subscription_ends_at: Optional[datetime]


# =============================================================================
# Rules
# =============================================================================

def calculate_end_date(start: datetime, billing_period: str) -> datetime:
    """Subscription end for a period; unrecognized periods bill one month."""
    offset = BILLING_PERIOD_OFFSETS.get(billing_period, relativedelta(months=1))
    return start + offset


def is_active(payment: PaymentLike, now: datetime) -> bool:
    """Approved and still inside its coverage window."""
    return (
        payment.status == PaymentStatus.APPROVED.value
        and payment.subscription_ends_at is not None
        and payment.subscription_ends_at > now
    )


def is_expiring_soon(payment: PaymentLike, now: datetime, days: int = 7) -> bool:
    """Active and ending within ``days`` days."""
    return is_active(payment, now) and payment.subscription_ends_at - now <= timedelta(days=days)


def is_unlimited(limit: Optional[int]) -> bool:
    """Limits of zero or below mean unlimited."""
    return limit is None or limit <= 0


def plan_providers(plan: PlanLike) -> frozenset[str]:
    """Provider keys a plan grants access to."""
    flags = {
        ProviderKey.CHATGPT.value: plan.can_use_chatgpt,
        ProviderKey.GEMINI.value: plan.can_use_gemini,
        ProviderKey.DEEPSEEK.value: plan.can_use_deepseek,
    }
    return frozenset(key for key, allowed in flags.items() if allowed)


def plan_allows_provider(plan: PlanLike, provider: str) -> bool:
    """Unknown provider keys are never allowed."""
    return provider in plan_providers(plan)


@dataclass(frozen=True)
class Entitlement:
    """What a user's active subscription grants right now."""
    providers: frozenset[str]
    ai_requests_limit: int
    custom_agents_limit: int
    plan_id: UUID
    plan_name: str
    payment_id: UUID
    subscription_ends_at: datetime

    def allows(self, provider: str) -> bool:
        return provider in self.providers

    @property
    def unlimited_requests(self) -> bool:
        return is_unlimited(self.ai_requests_limit)

    @property
    def unlimited_agents(self) -> bool:
        return is_unlimited(self.custom_agents_limit)


# =============================================================================
# Request/Response DTOs
# =============================================================================

class PlanCreateRequest(BaseModel):
    """Request DTO for creating a subscription plan (admin)."""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    billing_period: BillingPeriod = BillingPeriod.MONTHLY
    ai_requests_limit: int = Field(default=0, ge=-1, description="0 or -1 means unlimited")
    custom_agents_limit: int = Field(default=1, ge=-1, description="0 or -1 means unlimited")
    can_use_chatgpt: bool = False
    can_use_gemini: bool = False
    can_use_deepseek: bool = False
    is_active: bool = True
    stripe_price_id: Optional[str] = Field(default=None, max_length=255)


class PlanUpdateRequest(PlanCreateRequest):
    """Plans are replaced wholesale on update, like on creation."""
    pass


class PlanResponse(BaseModel):
    """Response DTO for a subscription plan."""
    id: UUID
    name: str
    description: str
    price: Decimal
    billing_period: str
    ai_requests_limit: int
    custom_agents_limit: int
    can_use_chatgpt: bool
    can_use_gemini: bool
    can_use_deepseek: bool
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class CreateCheckoutRequest(BaseModel):
    """Request DTO for opening a checkout for a plan."""
    subscription_plan_id: UUID = Field(..., description="Plan to purchase")


class CheckoutResponse(BaseModel):
    """Response DTO for checkout creation."""
    payment_id: UUID
    checkout_url: str
    session_id: str


class PaymentResponse(BaseModel):
    """Response DTO for a payment."""
    id: UUID
    subscription_plan_id: UUID
    amount: Decimal
    payment_method: str
    status: str
    paid_at: Optional[datetime] = None
    subscription_starts_at: Optional[datetime] = None
    subscription_ends_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SubscriptionStatusResponse(BaseModel):
    """Response DTO for subscription status."""
    is_active: bool = Field(description="Whether user has an active subscription")
    plan: Optional[PlanResponse] = None
    providers: list[str] = Field(default_factory=list)
    subscription_ends_at: Optional[datetime] = None
    is_expiring_soon: bool = False


class UsageSummary(BaseModel):
    """Current consumption against plan limits."""
    has_active_subscription: bool
    current_month_interactions: int
    current_month_tokens: int
    total_interactions: int
    total_tokens: int
    custom_agents: int
    ai_requests_limit: Optional[int] = Field(default=None, description="<= 0 means unlimited")
    custom_agents_limit: Optional[int] = Field(default=None, description="<= 0 means unlimited")
    can_make_requests: bool
    can_create_agents: bool
    is_expiring_soon: bool = False
