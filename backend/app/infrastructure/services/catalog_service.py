"""
AI Service Catalog

Administrator management of the provider models users can call. Services
are never deleted once created; deactivating one hides it from users and
makes further interactions with it fail as not found.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.interactions import (
    AIServiceAdminResponse,
    AIServiceCreateRequest,
    AIServiceUpdateRequest,
)
from app.infrastructure.db.models import AIService
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories import AIServiceRepository
from app.infrastructure.exceptions import NotFoundError


logger = logging.getLogger(__name__)


def to_admin_view(service: AIService, interaction_count: int) -> AIServiceAdminResponse:
    view = AIServiceAdminResponse.model_validate(service)
    view.interaction_count = interaction_count
    return view


class CatalogService:
    """AI service catalog CRUD (admin)."""

    def __init__(self, session: AsyncSession):
        self._services = AIServiceRepository(session)

    async def list_services(self) -> List[AIServiceAdminResponse]:
        rows = await self._services.list_with_usage()
        return [to_admin_view(service, count) for service, count in rows]

    async def create_service(self, data: AIServiceCreateRequest) -> AIServiceAdminResponse:
        service = AIService(**self._fields(data))
        service = await self._services.add(service)
        logger.info(f"Created AI service {service.id} ({service.provider}/{service.model})")
        return to_admin_view(service, 0)

    async def update_service(
        self,
        service_id: UUID,
        data: AIServiceUpdateRequest,
    ) -> AIServiceAdminResponse:
        service = await self._get(service_id)
        for field, value in self._fields(data).items():
            setattr(service, field, value)
        service.updated_at = utcnow()
        service = await self._services.save(service)
        if not service.is_active:
            logger.info(f"AI service {service.id} deactivated")
        return to_admin_view(service, await self._services.count_interactions(service.id))

    async def _get(self, service_id: UUID) -> AIService:
        service = await self._services.get_by_id(service_id)
        if service is None:
            raise NotFoundError(f"AI service {service_id} not found", table="ai_services")
        return service

    @staticmethod
    def _fields(data: AIServiceCreateRequest) -> dict:
        fields = data.model_dump(mode="python")
        fields["provider"] = data.provider.value
        return fields
