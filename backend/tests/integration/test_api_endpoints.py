"""
Integration tests for the GenAI Hub API endpoints.

Tests the full request/response cycle against a SQLite database, a frozen
clock, stubbed provider HTTP and a mocked Stripe gateway.
"""

from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID, uuid4

import httpx
import pytest
from sqlalchemy import func, select

from app.domain.subscription import PaymentStatus
from app.infrastructure.db.models import AIInteraction, CustomAgent, Payment


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client):
        """Root endpoint should return welcome message."""
        response = await client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client):
        """Health endpoint should return healthy status."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAIEndpoints:

    @pytest.mark.asyncio
    async def test_interaction_without_subscription(
        self, client, session_factory, auth_headers, make_user, make_service
    ):
        user = await make_user()
        service = await make_service("chatgpt")

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": str(service.id), "prompt": "What is a monad?"},
            headers=auth_headers(user),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "NoActiveSubscriptionError"
        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(AIInteraction))
        assert count == 0

    @pytest.mark.asyncio
    async def test_interaction_success(
        self, client, auth_headers, make_user, make_plan, subscribe, make_service
    ):
        user = await make_user()
        await subscribe(user, await make_plan())
        service = await make_service("chatgpt")
        headers = auth_headers(user)

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": str(service.id), "prompt": "What is a monad?"},
            headers=headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_successful"] is True
        assert data["response"] == "Hello there!"
        assert data["tokens_used"] == 50

        response = await client.get(f"/api/ai/interactions/{data['id']}", headers=headers)
        assert response.status_code == 200

        response = await client.get("/api/ai/interactions", headers=headers)
        assert [i["id"] for i in response.json()] == [data["id"]]

    @pytest.mark.asyncio
    async def test_provider_failure_is_201_with_error(
        self, client, provider_stub, auth_headers, make_user, make_plan, subscribe, make_service
    ):
        user = await make_user()
        await subscribe(user, await make_plan())
        service = await make_service("chatgpt")
        provider_stub.handler = lambda request: httpx.Response(500)

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": str(service.id), "prompt": "What is a monad?"},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_successful"] is False
        assert data["error_message"]

    @pytest.mark.asyncio
    async def test_quota_exhausted_is_429(
        self, client, auth_headers, make_user, make_plan, subscribe, make_service, make_interaction
    ):
        user = await make_user()
        await subscribe(user, await make_plan(ai_requests_limit=1))
        service = await make_service("chatgpt")
        await make_interaction(user, service)

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": str(service.id), "prompt": "One more please"},
            headers=auth_headers(user),
        )

        assert response.status_code == 429
        assert response.json()["details"] == {"limit": 1, "used": 1}

    @pytest.mark.asyncio
    async def test_short_prompt_is_422(self, client, auth_headers, make_user, make_service):
        user = await make_user()
        service = await make_service("chatgpt")

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": str(service.id), "prompt": "Hi"},
            headers=auth_headers(user),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_users_interaction_is_403(
        self, client, auth_headers, make_user, make_service, make_interaction
    ):
        owner = await make_user()
        record = await make_interaction(owner, await make_service())

        response = await client.get(
            f"/api/ai/interactions/{record.id}", headers=auth_headers(await make_user())
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_services_follow_plan(
        self, client, auth_headers, make_user, make_plan, subscribe, make_service
    ):
        user = await make_user()
        await subscribe(user, await make_plan(can_use_gemini=False))
        chatgpt = await make_service("chatgpt")
        await make_service("gemini")

        response = await client.get("/api/ai/services", headers=auth_headers(user))

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [str(chatgpt.id)]


class TestCatalogEndpoints:

    SERVICE = {
        "name": "GPT-4o mini",
        "provider": "chatgpt",
        "model": "gpt-4o-mini",
        "description": "Fast general model",
        "cost_per_request": "0.015",
        "parameters": {"temperature": 0.3, "max_tokens": 800},
    }

    @pytest.mark.asyncio
    async def test_admin_manages_catalog(
        self, client, provider_stub, auth_headers, make_user, make_plan, subscribe
    ):
        admin = await make_user(is_admin=True)
        user = await make_user()
        await subscribe(user, await make_plan())

        response = await client.post("/api/ai/services", json=self.SERVICE, headers=auth_headers(admin))
        assert response.status_code == 201
        service = response.json()
        assert service["is_active"] is True
        assert service["parameters"] == {"temperature": 0.3, "max_tokens": 800}
        assert Decimal(service["cost_per_request"]) == Decimal("0.015")

        listed = (await client.get("/api/ai/services", headers=auth_headers(user))).json()
        assert [s["id"] for s in listed] == [service["id"]]

        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": service["id"], "prompt": "Summarise this"},
            headers=auth_headers(user),
        )
        assert response.status_code == 201
        assert response.json()["is_successful"] is True
        assert provider_stub.last_json()["model"] == "gpt-4o-mini"
        assert provider_stub.last_json()["max_tokens"] == 800

        response = await client.put(
            f"/api/ai/services/{service['id']}",
            json={**self.SERVICE, "is_active": False},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["interaction_count"] == 1

        assert (await client.get("/api/ai/services", headers=auth_headers(user))).json() == []
        response = await client.post(
            "/api/ai/interactions",
            json={"ai_service_id": service["id"], "prompt": "Summarise this"},
            headers=auth_headers(user),
        )
        assert response.status_code == 404

        catalog = (await client.get("/api/ai/services/catalog", headers=auth_headers(admin))).json()
        assert [(s["id"], s["is_active"], s["interaction_count"]) for s in catalog] == [
            (service["id"], False, 1)
        ]

    @pytest.mark.asyncio
    async def test_catalog_is_admin_only(self, client, auth_headers, make_user):
        user = await make_user()

        response = await client.post("/api/ai/services", json=self.SERVICE, headers=auth_headers(user))
        assert response.status_code == 403
        response = await client.get("/api/ai/services/catalog", headers=auth_headers(user))
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_catalog_validation(self, client, auth_headers, make_user):
        headers = auth_headers(await make_user(is_admin=True))

        response = await client.post(
            "/api/ai/services",
            json={**self.SERVICE, "provider": "claude"},
            headers=headers,
        )
        assert response.status_code == 422

        response = await client.put(f"/api/ai/services/{uuid4()}", json=self.SERVICE, headers=headers)
        assert response.status_code == 404


class TestAgentEndpoints:

    @pytest.mark.asyncio
    async def test_agent_lifecycle(
        self, client, session_factory, provider_stub, auth_headers, make_user, make_plan, subscribe, make_service
    ):
        user = await make_user()
        await subscribe(user, await make_plan(custom_agents_limit=1))
        service = await make_service("chatgpt")
        headers = auth_headers(user)
        payload = {
            "ai_service_id": str(service.id),
            "name": "Chef",
            "description": "Suggests recipes",
            "instructions": "Suggest one recipe.",
            "knowledge_base": "Pantry: rice, beans.",
            "parameters": {"temperature": 0.9, "max_tokens": 256},
        }

        response = await client.post("/api/agents", json=payload, headers=headers)
        assert response.status_code == 201
        agent = response.json()

        response = await client.post("/api/agents", json={**payload, "name": "Chef 2"}, headers=headers)
        assert response.status_code == 429

        response = await client.post(
            f"/api/agents/{agent['id']}/interact",
            json={"prompt": "What's for dinner?"},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["custom_agent_id"] == agent["id"]
        assert provider_stub.last_json()["temperature"] == 0.9

        response = await client.get("/api/agents", headers=headers)
        listing = response.json()
        assert [a["id"] for a in listing["own"]] == [agent["id"]]
        assert listing["own"][0]["usage_count"] == 1

        response = await client.put(
            f"/api/agents/{agent['id']}",
            json={**payload, "name": "Head Chef", "is_public": True},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Head Chef"

        response = await client.delete(f"/api/agents/{agent['id']}", headers=headers)
        assert response.status_code == 204

        async with session_factory() as session:
            assert await session.get(CustomAgent, UUID(agent["id"])) is None
            assert await session.scalar(select(func.count()).select_from(AIInteraction)) == 1

    @pytest.mark.asyncio
    async def test_private_agent_is_hidden_from_others(
        self, client, auth_headers, make_user, make_plan, subscribe, make_service, make_agent
    ):
        owner = await make_user()
        caller = await make_user()
        await subscribe(caller, await make_plan())
        agent = await make_agent(owner, await make_service("chatgpt"))
        headers = auth_headers(caller)

        assert (await client.get(f"/api/agents/{agent.id}", headers=headers)).status_code == 403
        response = await client.post(
            f"/api/agents/{agent.id}/interact", json={"prompt": "Let me in"}, headers=headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_agent_is_404(self, client, auth_headers, make_user):
        response = await client.get(f"/api/agents/{uuid4()}", headers=auth_headers(await make_user()))
        assert response.status_code == 404


class TestPaymentEndpoints:

    @pytest.mark.asyncio
    async def test_checkout(self, client, mock_stripe_service, auth_headers, make_user, make_plan):
        user = await make_user()
        plan = await make_plan()
        mock_stripe_service.create_checkout_session.return_value = SimpleNamespace(
            id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1"
        )

        response = await client.post(
            "/api/payments/checkout",
            json={"subscription_plan_id": str(plan.id)},
            headers=auth_headers(user),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["checkout_url"] == "https://checkout.stripe.com/c/pay/cs_test_1"

        response = await client.get(f"/api/payments/{data['payment_id']}", headers=auth_headers(user))
        assert response.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_checkout_gateway_failure_is_502(
        self, client, session_factory, mock_stripe_service, auth_headers, make_user, make_plan
    ):
        from app.infrastructure.payments.stripe_service import StripeServiceError

        user = await make_user()
        plan = await make_plan()
        mock_stripe_service.create_checkout_session.side_effect = StripeServiceError("Stripe is down")

        response = await client.post(
            "/api/payments/checkout",
            json={"subscription_plan_id": str(plan.id)},
            headers=auth_headers(user),
        )

        assert response.status_code == 502
        async with session_factory() as session:
            assert await session.scalar(select(func.count()).select_from(Payment)) == 0

    @pytest.mark.asyncio
    async def test_payment_visibility(self, client, auth_headers, make_user, make_plan, make_payment):
        owner = await make_user()
        payment = await make_payment(owner, await make_plan())

        stranger = await client.get(f"/api/payments/{payment.id}", headers=auth_headers(await make_user()))
        admin = await client.get(
            f"/api/payments/{payment.id}", headers=auth_headers(await make_user(is_admin=True))
        )

        assert stranger.status_code == 403
        assert admin.status_code == 200

    @pytest.mark.asyncio
    async def test_failure_return_rejects(self, client, make_user, make_plan, make_payment):
        payment = await make_payment(await make_user(), await make_plan())

        response = await client.get(
            "/api/payments/return/failure",
            params={"external_reference": str(payment.id), "reason": "cancelled"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == PaymentStatus.REJECTED.value

    @pytest.mark.asyncio
    async def test_success_return_approves_and_activates(
        self, client, mock_stripe_service, auth_headers, make_user, make_plan, make_payment
    ):
        user = await make_user()
        payment = await make_payment(user, await make_plan())
        reference = str(payment.id)
        mock_stripe_service.retrieve_checkout_session.return_value = SimpleNamespace(
            id="cs_ok",
            client_reference_id=reference,
            metadata=SimpleNamespace(payment_id=reference),
            status="complete",
            payment_status="paid",
            payment_intent="pi_ok",
            customer=None,
            customer_details=None,
            amount_total=4990,
            currency="brl",
        )

        response = await client.get(
            "/api/payments/return/success",
            params={"external_reference": reference, "session_id": "cs_ok"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == PaymentStatus.APPROVED.value

        response = await client.get("/api/subscriptions/status", headers=auth_headers(user))
        assert response.json()["is_active"] is True

    @pytest.mark.asyncio
    async def test_invalid_reference_is_400(self, client):
        response = await client.get(
            "/api/payments/return/pending", params={"external_reference": "nope"}
        )
        assert response.status_code == 400


class TestSubscriptionEndpoints:

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get("/api/subscriptions/status")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_status_and_usage(
        self, client, auth_headers, make_user, make_plan, subscribe, make_service, make_interaction
    ):
        user = await make_user()
        await subscribe(user, await make_plan(ai_requests_limit=5))
        await make_interaction(user, await make_service(), tokens_used=25)
        headers = auth_headers(user)

        status = (await client.get("/api/subscriptions/status", headers=headers)).json()
        usage = (await client.get("/api/subscriptions/usage", headers=headers)).json()

        assert status["is_active"] is True
        assert status["plan"]["name"] == "Pro"
        assert usage["current_month_interactions"] == 1
        assert usage["current_month_tokens"] == 25
        assert usage["can_make_requests"] is True
