"""
AIInteraction Repository for GenAI Hub

Records AI call attempts and completes each one exactly once, with either a
success outcome or a failure message.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.providers import NormalizedResult
from app.infrastructure.db.models.ai_interaction import AIInteraction
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories.base_repository import BaseRepository
from app.infrastructure.exceptions import ConflictError


logger = logging.getLogger(__name__)


def is_completed(interaction: AIInteraction) -> bool:
    """A placeholder is neither successful nor carries an error message."""
    return interaction.is_successful or interaction.error_message is not None


class AIInteractionRepository(BaseRepository[AIInteraction]):
    """Repository for AI interaction audit records."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(AIInteraction, session)
    
    # =========================================================================
    # Command Methods
    # =========================================================================
    
    async def record_attempt(
        self,
        user_id: UUID,
        ai_service_id: UUID,
        prompt: str,
        custom_agent_id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
    ) -> AIInteraction:
        """
        Persist and commit a placeholder before the provider is called.
        
        The row exists (and counts toward quota) even if the process dies
        mid-dispatch. ``created_at`` places the attempt in a quota window.
        """
        interaction = AIInteraction(
            created_at=created_at or utcnow(),
            user_id=user_id,
            ai_service_id=ai_service_id,
            custom_agent_id=custom_agent_id,
            prompt=prompt,
            response=None,
            tokens_used=0,
            cost=Decimal("0"),
            is_successful=False,
        )
        await self.add(interaction)
        await self.session.commit()
        return interaction
    
    async def complete_success(
        self,
        interaction: AIInteraction,
        result: NormalizedResult,
    ) -> AIInteraction:
        """Fill in the normalized outcome and mark the attempt successful."""
        self._ensure_open(interaction)
        
        interaction.response = result.text
        interaction.tokens_used = result.tokens_used
        interaction.cost = Decimal(str(result.cost))
        interaction.response_metadata = result.metadata
        interaction.is_successful = True
        interaction.error_message = None
        interaction.updated_at = utcnow()
        
        return await self.save(interaction)
    
    async def complete_failure(
        self,
        interaction: AIInteraction,
        message: str,
    ) -> AIInteraction:
        """Mark the attempt failed; response, tokens and cost stay untouched."""
        self._ensure_open(interaction)
        
        interaction.is_successful = False
        interaction.error_message = message
        interaction.updated_at = utcnow()
        
        return await self.save(interaction)
    
    def _ensure_open(self, interaction: AIInteraction) -> None:
        if is_completed(interaction):
            raise ConflictError(
                f"Interaction {interaction.id} is already completed",
                operation="complete",
                table="ai_interactions",
            )
    
    # =========================================================================
    # Query Methods
    # =========================================================================
    
    async def list_for_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 20,
    ) -> List[AIInteraction]:
        """Interaction history, newest first."""
        stmt = (
            select(AIInteraction)
            .where(AIInteraction.user_id == user_id)
            .order_by(AIInteraction.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def count_for_user(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Interactions (successful or not) created in [start, end)."""
        stmt = select(func.count()).select_from(AIInteraction).where(
            AIInteraction.user_id == user_id
        )
        if start is not None:
            stmt = stmt.where(AIInteraction.created_at >= start)
        if end is not None:
            stmt = stmt.where(AIInteraction.created_at < end)
        result = await self.session.execute(stmt)
        return result.scalar_one()
    
    async def sum_tokens_for_user(
        self,
        user_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Tokens consumed in [start, end)."""
        stmt = select(func.coalesce(func.sum(AIInteraction.tokens_used), 0)).where(
            AIInteraction.user_id == user_id
        )
        if start is not None:
            stmt = stmt.where(AIInteraction.created_at >= start)
        if end is not None:
            stmt = stmt.where(AIInteraction.created_at < end)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
