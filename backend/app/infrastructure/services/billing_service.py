"""
Billing Service

Plan catalog management and the payment state machine.

Payments start ``pending`` and move exactly once, to ``approved`` or
``rejected``. Three sources can drive that move (the browser returning
from checkout, a failed/cancelled checkout, and the gateway webhook); all
of them converge on PaymentRepository.transition_from_pending, whose
conditional UPDATE lets only the first writer win.

The gateway is never trusted on the strength of a redirect or an event
body alone: the checkout session is re-fetched by id before any approval.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import get_settings
from app.domain.clock import Clock, system_clock
from app.domain.subscription import (
    PaymentStatus,
    PlanCreateRequest,
    PlanUpdateRequest,
    TERMINAL_STATUSES,
    calculate_end_date,
)
from app.infrastructure.db.models import Payment, SubscriptionPlan, User
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.repositories import (
    PaymentRepository,
    SubscriptionPlanRepository,
)
from app.infrastructure.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.infrastructure.payments.stripe_service import StripeService, get_stripe_service


logger = logging.getLogger(__name__)


# Checkout session states
SESSION_PAID = "paid"
SESSION_EXPIRED = "expired"

# Webhook events this service acts on
EVENT_COMPLETED = "checkout.session.completed"
EVENT_ASYNC_SUCCEEDED = "checkout.session.async_payment_succeeded"
EVENT_ASYNC_FAILED = "checkout.session.async_payment_failed"
EVENT_EXPIRED = "checkout.session.expired"

HANDLED_EVENTS = frozenset({
    EVENT_COMPLETED,
    EVENT_ASYNC_SUCCEEDED,
    EVENT_ASYNC_FAILED,
    EVENT_EXPIRED,
})


@dataclass
class CheckoutResult:
    payment: Payment
    checkout_url: str
    session_id: str


@dataclass
class WebhookOutcome:
    """What a webhook delivery did. ``transitioned`` is False for replays."""
    status: str
    payment_id: Optional[UUID] = None
    transitioned: bool = False


def session_reference(session: Any) -> Optional[str]:
    """Local payment id carried by a checkout session."""
    reference = getattr(session, "client_reference_id", None)
    if reference:
        return reference
    metadata = getattr(session, "metadata", None)
    return getattr(metadata, "payment_id", None) if metadata is not None else None


def session_audit(session: Any) -> Dict[str, Any]:
    """Gateway fields worth keeping on the payment record."""
    return {
        "checkout_session_id": getattr(session, "id", None),
        "checkout_status": getattr(session, "status", None),
        "payment_status": getattr(session, "payment_status", None),
        "payment_intent": getattr(session, "payment_intent", None),
        "amount_total": getattr(session, "amount_total", None),
        "currency": getattr(session, "currency", None),
    }


def parse_reference(reference: Optional[str]) -> UUID:
    try:
        return UUID(str(reference))
    except (TypeError, ValueError):
        raise ValidationError(
            "Invalid payment reference",
            {"external_reference": reference},
        )


class BillingService:
    """
    Subscription plans, checkout, and payment transitions.
    
    Args:
        session: Async database session
        stripe_service: Payment gateway adapter
        clock: Time source for paid_at and coverage windows
    """
    
    def __init__(
        self,
        session: AsyncSession,
        stripe_service: Optional[StripeService] = None,
        clock: Clock = system_clock,
    ):
        self._session = session
        self._stripe = stripe_service or get_stripe_service()
        self._clock = clock
        self._plans = SubscriptionPlanRepository(session)
        self._payments = PaymentRepository(session)
    
    # =========================================================================
    # Plans
    # =========================================================================
    
    async def list_plans(self, include_inactive: bool = False) -> List[SubscriptionPlan]:
        return await self._plans.list_plans(include_inactive)
    
    async def get_plan(self, plan_id: UUID) -> SubscriptionPlan:
        plan = await self._plans.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError(f"Subscription plan {plan_id} not found", table="subscription_plans")
        return plan
    
    async def create_plan(self, data: PlanCreateRequest) -> SubscriptionPlan:
        plan = SubscriptionPlan(**data.model_dump(mode="python"))
        plan.billing_period = data.billing_period.value
        plan = await self._plans.add(plan)
        logger.info(f"Created subscription plan {plan.id} ({plan.name})")
        return plan
    
    async def update_plan(self, plan_id: UUID, data: PlanUpdateRequest) -> SubscriptionPlan:
        plan = await self.get_plan(plan_id)
        for field, value in data.model_dump(mode="python").items():
            setattr(plan, field, value)
        plan.billing_period = data.billing_period.value
        plan.updated_at = utcnow()
        return await self._plans.save(plan)
    
    async def delete_plan(self, plan_id: UUID) -> None:
        """Plans with any payment history cannot be deleted; deactivate them instead."""
        plan = await self.get_plan(plan_id)
        references = await self._plans.count_payments(plan.id)
        if references:
            raise ConflictError(
                "This plan has payments and cannot be deleted",
                operation="delete",
                table="subscription_plans",
            )
        await self._plans.delete(plan.id)
        logger.info(f"Deleted subscription plan {plan_id}")
    
    # =========================================================================
    # Payment views
    # =========================================================================
    
    async def list_payments(self, user: User, skip: int = 0, limit: int = 50) -> List[Payment]:
        return await self._payments.list_for_user(user.id, skip, limit)
    
    async def get_payment_for(self, user: User, payment_id: UUID) -> Payment:
        """Owners see their payments; admins see all."""
        payment = await self._get_payment(payment_id)
        if payment.user_id != user.id and not user.is_admin:
            raise UnauthorizedError("You are not allowed to view this payment")
        return payment
    
    async def _get_payment(self, payment_id: UUID) -> Payment:
        payment = await self._payments.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found", table="payments")
        return payment
    
    # =========================================================================
    # Checkout
    # =========================================================================
    
    async def open_checkout(self, user: User, plan_id: UUID) -> CheckoutResult:
        """
        Start a purchase of ``plan_id``.
        
        The gateway session is created first; the pending payment row is
        written only once that succeeds, so a gateway failure leaves nothing
        behind.
        """
        plan = await self._plans.get_by_id(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError(f"Subscription plan {plan_id} not found", table="subscription_plans")
        
        settings = get_settings()
        payment_id = uuid4()
        now = self._clock()

        checkout = await self._stripe.create_checkout_session(
            payment_id=payment_id,
            user_id=user.id,
            user_email=user.email,
            plan_id=plan.id,
            plan_name=plan.name,
            plan_description=plan.description,
            amount=plan.price,
            success_url=settings.payment_success_url,
            cancel_url=settings.payment_failure_url,
            price_id=plan.stripe_price_id,
        )
        
        payment = Payment(
            id=payment_id,
            user_id=user.id,
            subscription_plan_id=plan.id,
            amount=plan.price,
            payment_method="stripe",
            status=PaymentStatus.PENDING.value,
            subscription_starts_at=now,
            subscription_ends_at=calculate_end_date(now, plan.billing_period),
            is_recurring=False,
            payment_data={
                "checkout_session_id": checkout.id,
                "checkout_url": checkout.url,
            },
            created_at=now,
        )
        payment = await self._payments.add(payment)
        await self._session.commit()
        
        logger.info(f"Opened checkout {checkout.id} for payment {payment.id} (plan {plan.id})")
        return CheckoutResult(payment=payment, checkout_url=checkout.url, session_id=checkout.id)
    
    # =========================================================================
    # Transitions
    # =========================================================================
    
    async def approve(self, payment: Payment, audit: Dict[str, Any], **payer: Any) -> bool:
        """
        Approve and restart the coverage window at the moment of payment.

        The window proposed at checkout is replaced.
        """
        plan = await self._plans.get_by_id(payment.subscription_plan_id)
        billing_period = plan.billing_period if plan is not None else None
        now = self._clock()
        
        applied = await self._payments.transition_from_pending(
            payment,
            PaymentStatus.APPROVED,
            audit,
            paid_at=now,
            subscription_starts_at=now,
            subscription_ends_at=calculate_end_date(now, billing_period),
            **{k: v for k, v in payer.items() if v is not None},
        )
        await self._session.commit()
        return applied
    
    async def reject(self, payment: Payment, audit: Dict[str, Any]) -> bool:
        applied = await self._payments.transition_from_pending(
            payment,
            PaymentStatus.REJECTED,
            audit,
        )
        await self._session.commit()
        return applied
    
    async def apply_session_state(
        self,
        payment: Payment,
        checkout: Any,
        audit: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Map an authoritative checkout session onto the payment.
        
        paid -> approved, expired -> rejected, anything else stays pending.
        """
        data = session_audit(checkout)
        data.update(audit or {})
        
        if getattr(checkout, "payment_status", None) == SESSION_PAID:
            details = getattr(checkout, "customer_details", None)
            return await self.approve(
                payment,
                data,
                payment_id=getattr(checkout, "payment_intent", None),
                payer_id=getattr(checkout, "customer", None),
                payer_email=getattr(details, "email", None) if details is not None else None,
            )
        
        if getattr(checkout, "status", None) == SESSION_EXPIRED:
            return await self.reject(payment, data)
        
        logger.info(
            f"Payment {payment.id} stays pending "
            f"(session status={data['checkout_status']}, payment_status={data['payment_status']})"
        )
        return False
    
    # =========================================================================
    # Browser returns
    # =========================================================================
    
    async def handle_success_return(
        self,
        external_reference: Optional[str],
        session_id: Optional[str] = None,
    ) -> Payment:
        """Approve if the gateway confirms the session is paid."""
        payment = await self._get_payment(parse_reference(external_reference))
        if payment.status in TERMINAL_STATUSES:
            return payment
        
        session_id = session_id or (payment.payment_data or {}).get("checkout_session_id")
        if not session_id:
            raise ValidationError("Missing checkout session id", {"payment_id": str(payment.id)})
        
        checkout = await self._stripe.retrieve_checkout_session(session_id)
        if session_reference(checkout) != str(payment.id):
            raise ValidationError(
                "Checkout session does not belong to this payment",
                {"payment_id": str(payment.id), "session_id": session_id},
            )
        
        await self.apply_session_state(payment, checkout, {"source": "success_return"})
        return payment
    
    async def handle_failure_return(
        self,
        external_reference: Optional[str],
        params: Optional[Dict[str, Any]] = None,
    ) -> Payment:
        """The buyer abandoned or failed checkout: reject if still pending."""
        payment = await self._get_payment(parse_reference(external_reference))
        audit = {"source": "failure_return"}
        audit.update(params or {})
        await self.reject(payment, audit)
        return payment
    
    async def handle_pending_return(self, external_reference: Optional[str]) -> Payment:
        return await self._get_payment(parse_reference(external_reference))
    
    # =========================================================================
    # Webhook
    # =========================================================================
    
    async def handle_webhook(self, payload: bytes, signature: str) -> WebhookOutcome:
        """
        Apply one gateway notification. Safe under at-least-once delivery.
        
        Raises:
            WebhookSignatureError: payload or signature does not verify
            NotFoundError: the referenced payment does not exist
            PaymentGatewayError: the session could not be fetched
        """
        event = self._stripe.verify_webhook_signature(payload, signature)
        event_type = getattr(event, "type", None)
        event_id = getattr(event, "id", None)
        
        if event_type not in HANDLED_EVENTS:
            logger.debug(f"Ignoring webhook event {event_type} ({event_id})")
            return WebhookOutcome(status="ignored")
        
        logger.info(f"Processing webhook event: {event_type} ({event_id})")
        
        event_session = event.data.object
        checkout = await self._stripe.retrieve_checkout_session(event_session.id)

        reference = session_reference(checkout)
        if reference is None:
            logger.info(f"Ignoring session {event_session.id} without a payment reference ({event_id})")
            return WebhookOutcome(status="ignored")

        payment = await self._get_payment(parse_reference(reference))
        audit = {"source": "webhook", "event_id": event_id, "event_type": event_type}
        
        if event_type == EVENT_ASYNC_FAILED:
            data = session_audit(checkout)
            data.update(audit)
            transitioned = await self.reject(payment, data)
        else:
            transitioned = await self.apply_session_state(payment, checkout, audit)
        
        return WebhookOutcome(
            status="success",
            payment_id=payment.id,
            transitioned=transitioned,
        )
