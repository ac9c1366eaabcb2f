"""
AI Routes

The AI service catalog and direct prompt interactions.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Query, status

from app.api.dependencies import (
    AdminUser,
    CatalogServiceDep,
    CurrentUser,
    EntitlementServiceDep,
    InteractionServiceDep,
)
from app.domain.interactions import (
    AIServiceAdminResponse,
    AIServiceCreateRequest,
    AIServiceResponse,
    AIServiceUpdateRequest,
    InteractionRequest,
    InteractionResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ai/services", response_model=List[AIServiceResponse])
async def list_services(
    user: CurrentUser,
    entitlements: EntitlementServiceDep,
):
    """Active services the user's plan grants access to."""
    return await entitlements.available_services(user.id)


@router.get("/ai/services/catalog", response_model=List[AIServiceAdminResponse])
async def list_catalog(admin: AdminUser, catalog: CatalogServiceDep):
    """Every service, inactive ones included, with interaction counts."""
    return await catalog.list_services()


@router.post(
    "/ai/services",
    response_model=AIServiceAdminResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_service(
    request: AIServiceCreateRequest,
    admin: AdminUser,
    catalog: CatalogServiceDep,
):
    service = await catalog.create_service(request)
    logger.info(f"Admin {admin.id} created AI service {service.id}")
    return service


@router.put("/ai/services/{service_id}", response_model=AIServiceAdminResponse)
async def update_service(
    service_id: UUID,
    request: AIServiceUpdateRequest,
    admin: AdminUser,
    catalog: CatalogServiceDep,
):
    return await catalog.update_service(service_id, request)


@router.post(
    "/ai/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_interaction(
    request: InteractionRequest,
    user: CurrentUser,
    interactions: InteractionServiceDep,
):
    """
    Send a prompt to an AI service.
    
    Provider failures still return 201 with ``is_successful=false`` and an
    error message; access denials return 403/429 and record nothing.
    """
    return await interactions.interact(user.id, request.ai_service_id, request.prompt)


@router.get("/ai/interactions", response_model=List[InteractionResponse])
async def list_interactions(
    user: CurrentUser,
    interactions: InteractionServiceDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    return await interactions.list_interactions(user.id, skip, limit)


@router.get("/ai/interactions/{interaction_id}", response_model=InteractionResponse)
async def get_interaction(
    interaction_id: UUID,
    user: CurrentUser,
    interactions: InteractionServiceDep,
):
    return await interactions.get_interaction(user.id, interaction_id)
