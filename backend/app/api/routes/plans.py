"""
Subscription Plan Routes

Public plan catalog plus admin-only plan management.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, status

from app.api.dependencies import AdminUser, BillingServiceDep
from app.domain.subscription import (
    PlanCreateRequest,
    PlanResponse,
    PlanUpdateRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/plans", response_model=List[PlanResponse])
async def list_plans(billing: BillingServiceDep):
    """Active plans, cheapest first."""
    return await billing.list_plans()


@router.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_plan(plan_id: UUID, billing: BillingServiceDep):
    return await billing.get_plan(plan_id)


@router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    request: PlanCreateRequest,
    admin: AdminUser,
    billing: BillingServiceDep,
):
    plan = await billing.create_plan(request)
    logger.info(f"Admin {admin.id} created plan {plan.id}")
    return plan


@router.put("/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: UUID,
    request: PlanUpdateRequest,
    admin: AdminUser,
    billing: BillingServiceDep,
):
    return await billing.update_plan(plan_id, request)


@router.delete("/plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(
    plan_id: UUID,
    admin: AdminUser,
    billing: BillingServiceDep,
):
    """Refused with 409 when any payment references the plan."""
    await billing.delete_plan(plan_id)
