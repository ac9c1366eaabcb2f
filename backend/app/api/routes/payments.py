"""
Payment Routes

Checkout creation, payment history, and the browser return endpoints the
gateway redirects to after checkout.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from app.api.dependencies import BillingServiceDep, CurrentUser
from app.domain.subscription import (
    CheckoutResponse,
    CreateCheckoutRequest,
    PaymentResponse,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/payments/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_checkout(
    request: CreateCheckoutRequest,
    user: CurrentUser,
    billing: BillingServiceDep,
):
    """
    Open a Stripe Checkout session for a plan.
    
    Returns:
        CheckoutResponse with the hosted checkout URL
    """
    result = await billing.open_checkout(user, request.subscription_plan_id)
    return CheckoutResponse(
        payment_id=result.payment.id,
        checkout_url=result.checkout_url,
        session_id=result.session_id,
    )


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    user: CurrentUser,
    billing: BillingServiceDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
):
    """The current user's payments, newest first."""
    return await billing.list_payments(user, skip, limit)


# =============================================================================
# Browser returns (declared before /payments/{payment_id})
# =============================================================================

@router.get("/payments/return/success", response_model=PaymentResponse)
async def payment_success_return(
    billing: BillingServiceDep,
    external_reference: Optional[str] = Query(None),
    session_id: Optional[str] = Query(None),
):
    """Approve the payment if the gateway confirms it is paid."""
    return await billing.handle_success_return(external_reference, session_id)


@router.get("/payments/return/failure", response_model=PaymentResponse)
async def payment_failure_return(
    request: Request,
    billing: BillingServiceDep,
    external_reference: Optional[str] = Query(None),
):
    """Reject the payment if it is still pending."""
    params = {
        key: value
        for key, value in request.query_params.items()
        if key != "external_reference"
    }
    return await billing.handle_failure_return(external_reference, params)


@router.get("/payments/return/pending", response_model=PaymentResponse)
async def payment_pending_return(
    billing: BillingServiceDep,
    external_reference: Optional[str] = Query(None),
):
    """Read-only: the outcome will arrive by webhook."""
    return await billing.handle_pending_return(external_reference)


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    user: CurrentUser,
    billing: BillingServiceDep,
):
    """Owners may view their payments; admins may view any."""
    return await billing.get_payment_for(user, payment_id)
