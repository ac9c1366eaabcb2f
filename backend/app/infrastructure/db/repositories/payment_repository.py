"""
Payment Repository for GenAI Hub

Data access for payments, including the compare-and-set status transition
that makes webhook and browser-return processing safe to repeat.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.subscription import PaymentStatus
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.payment import Payment
from app.infrastructure.db.repositories.base_repository import BaseRepository


logger = logging.getLogger(__name__)


def merge_payment_data(
    existing: Optional[Dict[str, Any]],
    updates: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    """New keys are added and existing keys overwritten; nothing is dropped."""
    merged = dict(existing or {})
    merged.update(updates or {})
    return merged


class PaymentRepository(BaseRepository[Payment]):
    """Repository for payments and the subscriptions they grant."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(Payment, session)
    
    async def list_for_user(
        self,
        user_id: UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Payment]:
        """Payments of one user, newest first."""
        stmt = (
            select(Payment)
            .where(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
    
    async def get_active_for_user(
        self,
        user_id: UUID,
        now: datetime,
    ) -> Optional[Payment]:
        """
        Most recent approved payment whose coverage has not ended.
        
        Ordered by subscription end, then creation, both descending.
        """
        stmt = (
            select(Payment)
            .where(
                Payment.user_id == user_id,
                Payment.status == PaymentStatus.APPROVED.value,
                Payment.subscription_ends_at > now,
            )
            .order_by(
                Payment.subscription_ends_at.desc(),
                Payment.created_at.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
    
    async def transition_from_pending(
        self,
        payment: Payment,
        target: PaymentStatus,
        audit: Optional[Dict[str, Any]] = None,
        **fields: Any,
    ) -> bool:
        """
        Move a payment out of ``pending`` if, and only if, it is still pending.
        
        The status guard lives in the UPDATE's WHERE clause, so of two
        concurrent callers exactly one sees a row affected. The merged
        payment_data is written by the same statement.
        
        Args:
            payment: Payment row (its status may be stale)
            target: APPROVED or REJECTED
            audit: Gateway data to merge into payment_data
            **fields: Extra columns to set (paid_at, subscription window...)
            
        Returns:
            True if this call performed the transition
        """
        values = dict(fields)
        values["status"] = target.value
        values["payment_data"] = merge_payment_data(payment.payment_data, audit)
        values["updated_at"] = utcnow()
        
        stmt = (
            update(Payment)
            .where(
                Payment.id == payment.id,
                Payment.status == PaymentStatus.PENDING.value,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        applied = result.rowcount == 1
        
        await self.session.refresh(payment)
        
        if applied:
            logger.info(f"Payment {payment.id} transitioned to {target.value}")
        else:
            logger.info(
                f"Payment {payment.id} already {payment.status}, "
                f"ignoring transition to {target.value}"
            )
        return applied
