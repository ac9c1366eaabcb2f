"""
AIService Repository for GenAI Hub
"""

from typing import Iterable, List, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.ai_interaction import AIInteraction
from app.infrastructure.db.models.ai_service import AIService
from app.infrastructure.db.repositories.base_repository import BaseRepository


class AIServiceRepository(BaseRepository[AIService]):
    """Repository for the AI service catalog."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(AIService, session)
    
    async def list_active(self, providers: Iterable[str]) -> List[AIService]:
        """Active services whose provider is in ``providers``."""
        provider_keys = list(providers)
        if not provider_keys:
            return []
        stmt = (
            select(AIService)
            .where(
                AIService.is_active.is_(True),
                AIService.provider.in_(provider_keys),
            )
            .order_by(AIService.provider, AIService.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def list_with_usage(self) -> List[Tuple[AIService, int]]:
        """Every service, inactive ones included, with its interaction count."""
        stmt = (
            select(AIService, func.count(AIInteraction.id))
            .outerjoin(AIInteraction, AIInteraction.ai_service_id == AIService.id)
            .group_by(AIService.id)
            .order_by(AIService.provider, AIService.name)
        )
        result = await self.session.execute(stmt)
        return [(service, count) for service, count in result.all()]
    
    async def count_interactions(self, service_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(AIInteraction)
            .where(AIInteraction.ai_service_id == service_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
