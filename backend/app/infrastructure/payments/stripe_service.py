"""
Stripe Payment Service

Infrastructure service for Stripe payment processing.
Handles checkout sessions for plan purchases and webhook verification.

- Hosted Checkout for minimal PCI burden
- The local payment id travels as client_reference_id so every gateway
  callback can be tied back to its payment row
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

import stripe
from stripe import StripeError

from app.config.settings import get_settings
from app.infrastructure.exceptions import PaymentGatewayError, ValidationError


logger = logging.getLogger(__name__)


class StripeServiceError(PaymentGatewayError):
    """Raised when a Stripe API call fails."""
    pass


class WebhookSignatureError(ValidationError):
    """Raised when a webhook payload or signature does not verify."""
    pass


def to_minor_units(amount: Decimal) -> int:
    """Convert a currency amount to Stripe's integer minor units."""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripeService:
    """
    Stripe payment processing service.
    
    All methods are stateless; Stripe objects are returned unchanged.
    """
    
    def __init__(self):
        """Initialize Stripe with API key from settings."""
        settings = get_settings()
        self._api_key = settings.stripe_secret_key
        self._webhook_secret = settings.stripe_webhook_secret
        self._currency = settings.stripe_currency
        self._statement_descriptor = settings.statement_descriptor
        
        if self._api_key:
            stripe.api_key = self._api_key
    
    # =========================================================================
    # Checkout Session
    # =========================================================================
    
    async def create_checkout_session(
        self,
        payment_id: UUID,
        user_id: UUID,
        user_email: Optional[str],
        plan_id: UUID,
        plan_name: str,
        plan_description: str,
        amount: Decimal,
        success_url: str,
        cancel_url: str,
        price_id: Optional[str] = None,
    ) -> stripe.checkout.Session:
        """
        Create a Stripe Checkout Session for a one-off plan purchase.
        
        Args:
            payment_id: Local payment id, used as the external reference
            user_id: Buyer (stored in metadata)
            user_email: Prefills the checkout form when known
            plan_id: Plan being purchased
            plan_name: Line item title
            plan_description: Line item description
            amount: Price in the configured currency
            success_url: Redirect after payment completes
            cancel_url: Redirect after the buyer abandons checkout
            price_id: Pre-created Stripe Price; inline price data otherwise
            
        Returns:
            stripe.checkout.Session with checkout URL
        """
        reference = str(payment_id)
        
        if price_id:
            line_item = {"price": price_id, "quantity": 1}
        else:
            line_item = {
                "price_data": {
                    "currency": self._currency,
                    "unit_amount": to_minor_units(amount),
                    "product_data": {
                        "name": plan_name,
                        "description": plan_description,
                    },
                },
                "quantity": 1,
            }
        
        params = {
            "mode": "payment",
            "line_items": [line_item],
            "client_reference_id": reference,
            "success_url": (
                f"{success_url}?external_reference={reference}"
                f"&session_id={{CHECKOUT_SESSION_ID}}"
            ),
            "cancel_url": f"{cancel_url}?external_reference={reference}",
            "metadata": {
                "payment_id": reference,
                "user_id": str(user_id),
                "plan_id": str(plan_id),
            },
        }
        if user_email:
            params["customer_email"] = user_email
        if self._statement_descriptor:
            params["payment_intent_data"] = {
                "statement_descriptor_suffix": self._statement_descriptor[:22],
            }
        
        try:
            session = stripe.checkout.Session.create(**params)
            
            logger.info(
                f"Created checkout session {session.id} for payment {reference}, "
                f"plan={plan_id}"
            )
            return session
            
        except StripeError as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise StripeServiceError(
                f"Failed to create checkout: {e.user_message or e}",
                {"payment_id": reference},
                e,
            )
    
    async def retrieve_checkout_session(
        self,
        session_id: str,
    ) -> stripe.checkout.Session:
        """
        Fetch the authoritative state of a checkout session.
        
        Args:
            session_id: Stripe checkout session ID
            
        Returns:
            stripe.checkout.Session
        """
        try:
            return stripe.checkout.Session.retrieve(session_id)
        except StripeError as e:
            logger.error(f"Failed to retrieve checkout session {session_id}: {e}")
            raise StripeServiceError(
                f"Failed to retrieve checkout session: {e.user_message or e}",
                {"session_id": session_id},
                e,
            )
    
    # =========================================================================
    # Webhook Verification
    # =========================================================================
    
    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
    ) -> stripe.Event:
        """
        Verify webhook signature and construct event.
        
        Args:
            payload: Raw request body
            signature: Stripe-Signature header
            
        Returns:
            stripe.Event if valid
            
        Raises:
            WebhookSignatureError if payload or signature is invalid
        """
        try:
            return stripe.Webhook.construct_event(
                payload,
                signature,
                self._webhook_secret,
            )
        except ValueError as e:
            raise WebhookSignatureError(f"Invalid payload: {e}")
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureError(f"Invalid signature: {e}")


# =============================================================================
# Singleton Instance (Dependency Injection Ready)
# =============================================================================

_stripe_service_instance: Optional[StripeService] = None


def get_stripe_service() -> StripeService:
    """Get or create Stripe service singleton."""
    global _stripe_service_instance
    
    if _stripe_service_instance is None:
        _stripe_service_instance = StripeService()
    
    return _stripe_service_instance
