"""
Entitlement Service

Answers what a user's active subscription allows and how much of it has
been consumed. Read-only: nothing here writes to the database.

Quota checks and the interaction that consumes quota are separate
statements, so N concurrent requests may overshoot a monthly limit by at
most N - 1 interactions.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import get_settings
from app.domain.clock import Clock, month_window, system_clock
from app.domain.subscription import (
    Entitlement,
    PlanResponse,
    SubscriptionStatusResponse,
    UsageSummary,
    is_expiring_soon,
    is_unlimited,
    plan_providers,
)
from app.infrastructure.db.models import AIService, Payment, SubscriptionPlan
from app.infrastructure.db.repositories import (
    AIInteractionRepository,
    AIServiceRepository,
    CustomAgentRepository,
    PaymentRepository,
    SubscriptionPlanRepository,
)
from app.infrastructure.exceptions import (
    NoActiveSubscriptionError,
    ProviderNotAllowedError,
    QuotaExceededError,
)


logger = logging.getLogger(__name__)


class EntitlementService:
    """
    Resolves plan entitlements and usage counters for a user.
    
    Args:
        session: Async database session
        clock: Time source; every check reads it at call time
    """
    
    def __init__(self, session: AsyncSession, clock: Clock = system_clock):
        self._clock = clock
        self._payments = PaymentRepository(session)
        self._plans = SubscriptionPlanRepository(session)
        self._services = AIServiceRepository(session)
        self._agents = CustomAgentRepository(session)
        self._interactions = AIInteractionRepository(session)
        self._expiring_soon_days = get_settings().expiring_soon_days
    
    def now(self) -> datetime:
        return self._clock()
    
    # =========================================================================
    # Entitlement Resolver
    # =========================================================================
    
    async def get_active_subscription(self, user_id: UUID) -> Optional[Payment]:
        """Most recent approved payment still inside its coverage window."""
        return await self._payments.get_active_for_user(user_id, self.now())
    
    async def find_entitlement(self, user_id: UUID) -> Optional[Entitlement]:
        """Entitlement of the active subscription, or None without one."""
        payment = await self.get_active_subscription(user_id)
        if payment is None:
            return None
        
        plan = await self._plans.get_by_id(payment.subscription_plan_id)
        if plan is None:
            logger.warning(f"Payment {payment.id} references missing plan {payment.subscription_plan_id}")
            return None
        
        return Entitlement(
            providers=plan_providers(plan),
            ai_requests_limit=plan.ai_requests_limit,
            custom_agents_limit=plan.custom_agents_limit,
            plan_id=plan.id,
            plan_name=plan.name,
            payment_id=payment.id,
            subscription_ends_at=payment.subscription_ends_at,
        )
    
    async def resolve_entitlement(self, user_id: UUID) -> Entitlement:
        """
        Entitlement of the active subscription.
        
        Raises:
            NoActiveSubscriptionError: if the user has no active subscription
        """
        entitlement = await self.find_entitlement(user_id)
        if entitlement is None:
            raise NoActiveSubscriptionError(str(user_id))
        return entitlement
    
    async def can_use_provider(self, user_id: UUID, provider: str) -> bool:
        entitlement = await self.find_entitlement(user_id)
        return entitlement is not None and entitlement.allows(provider)
    
    async def available_services(self, user_id: UUID) -> List[AIService]:
        """Active AI services the user's plan grants; empty without a plan."""
        entitlement = await self.find_entitlement(user_id)
        if entitlement is None:
            return []
        return await self._services.list_active(entitlement.providers)
    
    # =========================================================================
    # Usage Counter
    # =========================================================================
    
    async def current_month_interactions(self, user_id: UUID) -> int:
        start, end = month_window(self.now())
        return await self._interactions.count_for_user(user_id, start, end)
    
    async def within_request_quota(self, user_id: UUID) -> bool:
        """True while this calendar month's interactions are under the plan limit."""
        entitlement = await self.find_entitlement(user_id)
        if entitlement is None:
            return False
        return await self._has_request_headroom(user_id, entitlement)
    
    async def agent_creation_allowed(self, user_id: UUID) -> bool:
        """True while the user owns fewer agents than the plan allows."""
        entitlement = await self.find_entitlement(user_id)
        if entitlement is None:
            return False
        return await self._has_agent_headroom(user_id, entitlement)
    
    async def _has_request_headroom(self, user_id: UUID, entitlement: Entitlement) -> bool:
        if entitlement.unlimited_requests:
            return True
        used = await self.current_month_interactions(user_id)
        return used < entitlement.ai_requests_limit
    
    async def _has_agent_headroom(self, user_id: UUID, entitlement: Entitlement) -> bool:
        if entitlement.unlimited_agents:
            return True
        owned = await self._agents.count_for_user(user_id)
        return owned < entitlement.custom_agents_limit
    
    # =========================================================================
    # Guards
    # =========================================================================
    
    async def ensure_can_dispatch(self, user_id: UUID, provider: str) -> Entitlement:
        """
        Gate an AI call on subscription, provider access and monthly quota.
        
        Raises:
            NoActiveSubscriptionError, ProviderNotAllowedError, QuotaExceededError
        """
        entitlement = await self.resolve_entitlement(user_id)
        
        if not entitlement.allows(provider):
            raise ProviderNotAllowedError(provider)
        
        if not entitlement.unlimited_requests:
            used = await self.current_month_interactions(user_id)
            if used >= entitlement.ai_requests_limit:
                raise QuotaExceededError(
                    "You have reached your plan's monthly AI request limit",
                    limit=entitlement.ai_requests_limit,
                    used=used,
                )
        
        return entitlement
    
    async def ensure_can_create_agent(self, user_id: UUID, provider: str) -> Entitlement:
        """
        Gate agent creation on subscription, agent limit and provider access.
        
        Raises:
            NoActiveSubscriptionError, QuotaExceededError, ProviderNotAllowedError
        """
        entitlement = await self.resolve_entitlement(user_id)
        
        if not entitlement.unlimited_agents:
            owned = await self._agents.count_for_user(user_id)
            if owned >= entitlement.custom_agents_limit:
                raise QuotaExceededError(
                    "You have reached your plan's custom agent limit",
                    limit=entitlement.custom_agents_limit,
                    used=owned,
                )
        
        if not entitlement.allows(provider):
            raise ProviderNotAllowedError(provider)
        
        return entitlement
    
    # =========================================================================
    # Summaries
    # =========================================================================
    
    async def subscription_status(self, user_id: UUID) -> SubscriptionStatusResponse:
        payment = await self.get_active_subscription(user_id)
        if payment is None:
            return SubscriptionStatusResponse(is_active=False)
        
        plan: Optional[SubscriptionPlan] = await self._plans.get_by_id(payment.subscription_plan_id)
        if plan is None:
            return SubscriptionStatusResponse(is_active=False)
        
        return SubscriptionStatusResponse(
            is_active=True,
            plan=PlanResponse.model_validate(plan),
            providers=sorted(plan_providers(plan)),
            subscription_ends_at=payment.subscription_ends_at,
            is_expiring_soon=is_expiring_soon(payment, self.now(), self._expiring_soon_days),
        )
    
    async def usage_summary(self, user_id: UUID) -> UsageSummary:
        """Consumption for the user dashboard."""
        now = self.now()
        start, end = month_window(now)
        
        month_count = await self._interactions.count_for_user(user_id, start, end)
        month_tokens = await self._interactions.sum_tokens_for_user(user_id, start, end)
        total_count = await self._interactions.count_for_user(user_id)
        total_tokens = await self._interactions.sum_tokens_for_user(user_id)
        agents = await self._agents.count_for_user(user_id)
        
        payment = await self.get_active_subscription(user_id)
        entitlement = await self.find_entitlement(user_id)
        
        if entitlement is None:
            return UsageSummary(
                has_active_subscription=False,
                current_month_interactions=month_count,
                current_month_tokens=month_tokens,
                total_interactions=total_count,
                total_tokens=total_tokens,
                custom_agents=agents,
                can_make_requests=False,
                can_create_agents=False,
            )
        
        return UsageSummary(
            has_active_subscription=True,
            current_month_interactions=month_count,
            current_month_tokens=month_tokens,
            total_interactions=total_count,
            total_tokens=total_tokens,
            custom_agents=agents,
            ai_requests_limit=entitlement.ai_requests_limit,
            custom_agents_limit=entitlement.custom_agents_limit,
            can_make_requests=(
                is_unlimited(entitlement.ai_requests_limit)
                or month_count < entitlement.ai_requests_limit
            ),
            can_create_agents=(
                is_unlimited(entitlement.custom_agents_limit)
                or agents < entitlement.custom_agents_limit
            ),
            is_expiring_soon=payment is not None and is_expiring_soon(
                payment, now, self._expiring_soon_days
            ),
        )
