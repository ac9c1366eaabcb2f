"""
SubscriptionPlan Repository for GenAI Hub
"""

from typing import List
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.payment import Payment
from app.infrastructure.db.models.subscription_plan import SubscriptionPlan
from app.infrastructure.db.repositories.base_repository import BaseRepository


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan]):
    """Repository for subscription plans."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(SubscriptionPlan, session)
    
    async def list_plans(self, include_inactive: bool = False) -> List[SubscriptionPlan]:
        """Plans ordered by price, cheapest first."""
        stmt = select(SubscriptionPlan)
        if not include_inactive:
            stmt = stmt.where(SubscriptionPlan.is_active.is_(True))
        stmt = stmt.order_by(SubscriptionPlan.price.asc(), SubscriptionPlan.name.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def count_payments(self, plan_id: UUID) -> int:
        """Number of payments (any status) referencing the plan."""
        stmt = (
            select(func.count())
            .select_from(Payment)
            .where(Payment.subscription_plan_id == plan_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
