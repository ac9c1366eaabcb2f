"""
Stripe Webhook Handler

Applies checkout session outcomes to payments. Delivery is at-least-once;
replays are harmless because payment transitions are compare-and-set.

Handled events:
- checkout.session.completed / async_payment_succeeded: approve when paid
- checkout.session.async_payment_failed / expired: reject
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.api.dependencies import BillingServiceDep
from app.infrastructure.exceptions import GenAIHubError
from app.infrastructure.payments.stripe_service import WebhookSignatureError


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhooks/stripe")
async def stripe_webhook(request: Request, billing: BillingServiceDep):
    """
    Handle Stripe webhook events.
    
    Invalid signatures get a 400. Processing failures (unknown payment,
    gateway errors) get a 500 so Stripe retries the delivery.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    
    if not signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe signature"
        )
    
    try:
        outcome = await billing.handle_webhook(payload, signature)
    except WebhookSignatureError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature"
        )
    except GenAIHubError as e:
        logger.error(f"Error processing webhook: {e.message} {e.details}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "error"},
        )
    
    response = {"status": outcome.status}
    if outcome.payment_id is not None:
        response["payment_id"] = str(outcome.payment_id)
        response["transitioned"] = outcome.transitioned
    return response
