"""
Integration Tests for Webhooks (Stripe)

Verifies:
- Signature verification failure (400)
- Successful event processing
- Idempotency (redelivery does not transition twice)
- Processing failures answer 500 so Stripe retries
"""

from datetime import timedelta
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.domain.subscription import PaymentStatus
from app.infrastructure.db.models import Payment
from app.infrastructure.payments.stripe_service import StripeServiceError, WebhookSignatureError


def completed_event(session_id: str, event_id: str = "evt_checkout_ok"):
    return SimpleNamespace(
        id=event_id,
        type="checkout.session.completed",
        data=SimpleNamespace(object=SimpleNamespace(id=session_id)),
    )


def paid_session(reference: str, session_id: str = "cs_123"):
    return SimpleNamespace(
        id=session_id,
        client_reference_id=reference,
        metadata=SimpleNamespace(payment_id=reference),
        status="complete",
        payment_status="paid",
        payment_intent="pi_123",
        customer="cus_test",
        customer_details=SimpleNamespace(email="buyer@example.com"),
        amount_total=4990,
        currency="brl",
    )


class TestStripeWebhooks:

    @pytest.mark.asyncio
    async def test_webhook_missing_signature(self, client):
        """Webhook without signature header should fail 400."""
        response = await client.post("/api/webhooks/stripe", json={"id": "evt_123"})
        assert response.status_code == 400
        assert "Missing Stripe signature" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_webhook_invalid_signature(self, client, mock_stripe_service):
        """Webhook with invalid signature should fail 400."""
        mock_stripe_service.verify_webhook_signature.side_effect = WebhookSignatureError("Bad sig")

        response = await client.post(
            "/api/webhooks/stripe",
            json={"id": "evt_123"},
            headers={"stripe-signature": "invalid_sig"}
        )
        assert response.status_code == 400
        assert "Invalid signature" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_webhook_success_checkout(
        self, client, session_factory, clock, mock_stripe_service, make_user, make_plan, make_payment
    ):
        """Valid checkout.session.completed event approves the payment."""
        payment = await make_payment(await make_user(), await make_plan())
        mock_stripe_service.verify_webhook_signature.return_value = completed_event("cs_123")
        mock_stripe_service.retrieve_checkout_session.return_value = paid_session(str(payment.id))

        response = await client.post(
            "/api/webhooks/stripe",
            content=b'{"id": "evt_checkout_ok"}',
            headers={"stripe-signature": "valid_sig"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "status": "success",
            "payment_id": str(payment.id),
            "transitioned": True,
        }
        mock_stripe_service.retrieve_checkout_session.assert_awaited_once_with("cs_123")

        async with session_factory() as session:
            stored = await session.get(Payment, payment.id)
        assert stored.status == PaymentStatus.APPROVED.value
        assert stored.paid_at == clock.now

    @pytest.mark.asyncio
    async def test_webhook_idempotency(
        self, client, session_factory, clock, mock_stripe_service, make_user, make_plan, make_payment
    ):
        """A redelivered event is acknowledged without a second transition."""
        payment = await make_payment(await make_user(), await make_plan())
        mock_stripe_service.verify_webhook_signature.return_value = completed_event("cs_123")
        mock_stripe_service.retrieve_checkout_session.return_value = paid_session(str(payment.id))
        headers = {"stripe-signature": "valid_sig"}

        first = await client.post("/api/webhooks/stripe", content=b"{}", headers=headers)
        clock.advance(minutes=10)
        second = await client.post("/api/webhooks/stripe", content=b"{}", headers=headers)

        assert first.json()["transitioned"] is True
        assert second.status_code == 200
        assert second.json()["transitioned"] is False

        async with session_factory() as session:
            stored = await session.get(Payment, payment.id)
        assert stored.paid_at == clock.now - timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_webhook_ignores_other_events(self, client, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.return_value = SimpleNamespace(
            id="evt_other", type="customer.created", data=SimpleNamespace(object=None)
        )

        response = await client.post(
            "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "valid_sig"}
        )

        assert response.status_code == 200
        assert response.json() == {"status": "ignored"}

    @pytest.mark.asyncio
    async def test_webhook_ignores_foreign_sessions(
        self, client, session_factory, mock_stripe_service, make_user, make_plan, make_payment
    ):
        """Sessions created outside this app carry no payment reference."""
        payment = await make_payment(await make_user(), await make_plan())
        foreign = paid_session(str(payment.id), "cs_foreign")
        foreign.client_reference_id = None
        foreign.metadata = SimpleNamespace()
        mock_stripe_service.verify_webhook_signature.return_value = completed_event("cs_foreign")
        mock_stripe_service.retrieve_checkout_session.return_value = foreign

        response = await client.post(
            "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "valid_sig"}
        )

        assert response.status_code == 200
        assert response.json() == {"status": "ignored"}
        async with session_factory() as session:
            stored = await session.get(Payment, payment.id)
        assert stored.status == PaymentStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_webhook_unknown_payment_asks_for_retry(self, client, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.return_value = completed_event("cs_ghost")
        mock_stripe_service.retrieve_checkout_session.return_value = paid_session(str(uuid4()), "cs_ghost")

        response = await client.post(
            "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "valid_sig"}
        )

        assert response.status_code == 500
        assert response.json() == {"status": "error"}

    @pytest.mark.asyncio
    async def test_webhook_gateway_error_asks_for_retry(self, client, mock_stripe_service):
        mock_stripe_service.verify_webhook_signature.return_value = completed_event("cs_123")
        mock_stripe_service.retrieve_checkout_session.side_effect = StripeServiceError("Stripe is down")

        response = await client.post(
            "/api/webhooks/stripe", content=b"{}", headers={"stripe-signature": "valid_sig"}
        )

        assert response.status_code == 500
