"""
Payments Infrastructure Module

Stripe payment processing services.
"""

from app.infrastructure.payments.stripe_service import (
    StripeService,
    StripeServiceError,
    WebhookSignatureError,
    get_stripe_service,
)

__all__ = [
    "StripeService",
    "StripeServiceError",
    "WebhookSignatureError",
    "get_stripe_service",
]
