"""
CustomAgent Repository for GenAI Hub
"""

from typing import List
from uuid import UUID

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.custom_agent import CustomAgent
from app.infrastructure.db.repositories.base_repository import BaseRepository


PUBLIC_AGENTS_LIMIT = 10


class CustomAgentRepository(BaseRepository[CustomAgent]):
    """Repository for user-authored agents."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(CustomAgent, session)
    
    async def list_for_user(self, user_id: UUID) -> List[CustomAgent]:
        """The user's own agents, newest first."""
        stmt = (
            select(CustomAgent)
            .where(CustomAgent.user_id == user_id)
            .order_by(CustomAgent.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def list_public(
        self,
        exclude_user_id: UUID,
        limit: int = PUBLIC_AGENTS_LIMIT,
    ) -> List[CustomAgent]:
        """Most used public, active agents authored by other users."""
        stmt = (
            select(CustomAgent)
            .where(
                CustomAgent.is_public.is_(True),
                CustomAgent.is_active.is_(True),
                CustomAgent.user_id != exclude_user_id,
            )
            .order_by(CustomAgent.usage_count.desc(), CustomAgent.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def count_for_user(self, user_id: UUID) -> int:
        """Lifetime number of agents the user currently owns."""
        stmt = (
            select(func.count())
            .select_from(CustomAgent)
            .where(CustomAgent.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
    
    async def increment_usage(self, agent_id: UUID) -> None:
        """Bump usage_count in a single UPDATE so concurrent uses never lose a count."""
        stmt = (
            update(CustomAgent)
            .where(CustomAgent.id == agent_id)
            .values(usage_count=CustomAgent.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
