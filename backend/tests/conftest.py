"""
Test configuration and fixtures for GenAI Hub.

Provides shared fixtures for unit and integration tests. Database tests run
against a throwaway SQLite file through aiosqlite, so no PostgreSQL is needed.
"""

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Callable, Dict, List
from unittest.mock import MagicMock, AsyncMock
from uuid import uuid4

import httpx
import jwt
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.config.settings import get_settings
from app.domain.subscription import PaymentStatus
from app.infrastructure.ai.provider_client import ProviderClient
from app.infrastructure.db.models import (
    AIInteraction,
    AIService,
    CustomAgent,
    Payment,
    SubscriptionPlan,
    User,
)


# =============================================================================
# Clock
# =============================================================================

FIXED_NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Direct DB session for test setup and service calls."""
    async with session_factory() as session:
        yield session


# =============================================================================
# Record Factories
# =============================================================================

@pytest.fixture
def make_user(db) -> Callable:
    async def _make(is_admin: bool = False, **overrides) -> User:
        fields = {
            "name": "Ana Souza",
            "email": f"{uuid4().hex[:10]}@example.com",
            "is_admin": is_admin,
        }
        fields.update(overrides)
        user = User(**fields)
        db.add(user)
        await db.commit()
        return user
    return _make


@pytest.fixture
def make_plan(db) -> Callable:
    async def _make(**overrides) -> SubscriptionPlan:
        fields = {
            "name": "Pro",
            "description": "All providers",
            "price": Decimal("49.90"),
            "billing_period": "monthly",
            "ai_requests_limit": 100,
            "custom_agents_limit": 3,
            "can_use_chatgpt": True,
            "can_use_gemini": True,
            "can_use_deepseek": False,
            "is_active": True,
        }
        fields.update(overrides)
        plan = SubscriptionPlan(**fields)
        db.add(plan)
        await db.commit()
        return plan
    return _make


@pytest.fixture
def make_service(db) -> Callable:
    async def _make(provider: str = "chatgpt", **overrides) -> AIService:
        models = {"chatgpt": "gpt-4o-mini", "gemini": "gemini-1.5-flash", "deepseek": "deepseek-chat"}
        fields = {
            "name": f"{provider} service",
            "provider": provider,
            "model": models.get(provider, "some-model"),
            "description": "Test service",
            "is_active": True,
            "cost_per_request": Decimal("0.0200"),
            "parameters": {"temperature": 0.5, "max_tokens": 500},
        }
        fields.update(overrides)
        service = AIService(**fields)
        db.add(service)
        await db.commit()
        return service
    return _make


@pytest.fixture
def make_payment(db, clock) -> Callable:
    async def _make(
        user: User,
        plan: SubscriptionPlan,
        status: PaymentStatus = PaymentStatus.PENDING,
        **overrides,
    ) -> Payment:
        fields = {
            "user_id": user.id,
            "subscription_plan_id": plan.id,
            "amount": plan.price,
            "payment_method": "stripe",
            "status": status.value,
            "payment_data": {"checkout_session_id": f"cs_test_{uuid4().hex[:8]}"},
            "created_at": clock.now,
        }
        if status == PaymentStatus.APPROVED:
            fields.update(
                paid_at=clock.now,
                subscription_starts_at=clock.now,
                subscription_ends_at=clock.now + timedelta(days=30),
            )
        fields.update(overrides)
        payment = Payment(**fields)
        db.add(payment)
        await db.commit()
        return payment
    return _make


@pytest.fixture
def subscribe(make_payment) -> Callable:
    """Give ``user`` an active subscription to ``plan``."""
    async def _subscribe(user: User, plan: SubscriptionPlan, **overrides) -> Payment:
        return await make_payment(user, plan, PaymentStatus.APPROVED, **overrides)
    return _subscribe


@pytest.fixture
def make_agent(db) -> Callable:
    async def _make(user: User, service: AIService, **overrides) -> CustomAgent:
        fields = {
            "user_id": user.id,
            "ai_service_id": service.id,
            "name": "Support bot",
            "description": "Answers product questions",
            "instructions": "You are a helpful support agent.",
            "knowledge_base": None,
            "parameters": {"temperature": 0.2, "max_tokens": 300},
            "is_public": False,
            "is_active": True,
            "usage_count": 0,
        }
        fields.update(overrides)
        agent = CustomAgent(**fields)
        db.add(agent)
        await db.commit()
        return agent
    return _make


@pytest.fixture
def make_interaction(db, clock) -> Callable:
    """Insert a completed interaction, by default at the frozen clock time."""
    async def _make(user: User, service: AIService, **overrides) -> AIInteraction:
        fields = {
            "user_id": user.id,
            "ai_service_id": service.id,
            "prompt": "Earlier question",
            "response": "Earlier answer",
            "tokens_used": 10,
            "cost": Decimal("0.000200"),
            "is_successful": True,
            "created_at": clock.now,
        }
        fields.update(overrides)
        interaction = AIInteraction(**fields)
        db.add(interaction)
        await db.commit()
        return interaction
    return _make


# =============================================================================
# Provider HTTP Fixtures
# =============================================================================

class StaticCredentials:
    """Credential provider backed by a plain dict."""

    def __init__(self, keys: Dict[str, str]):
        self._keys = keys

    def get_api_key(self, provider: str):
        return self._keys.get(provider)


class ProviderStub:
    """
    Records outbound provider requests and answers with a canned response.

    ``handler`` may be replaced per test to simulate provider behaviour.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = self.chat_completion_ok

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @staticmethod
    def chat_completion_ok(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={
            "id": "chatcmpl-1",
            "choices": [{"message": {"role": "assistant", "content": "Hello there!"}}],
            "usage": {"prompt_tokens": 20, "completion_tokens": 30, "total_tokens": 50},
        })

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def provider_stub() -> ProviderStub:
    return ProviderStub()


@pytest.fixture
def provider_client(provider_stub) -> ProviderClient:
    return ProviderClient(
        credentials=StaticCredentials({
            "chatgpt": "sk-test-openai",
            "gemini": "gm-test-key",
            "deepseek": "sk-test-deepseek",
        }),
        timeout=5.0,
        transport=httpx.MockTransport(provider_stub),
    )


# =============================================================================
# Stripe Fixtures
# =============================================================================

@pytest.fixture
def mock_stripe_service():
    """Mock for StripeService."""
    mock = MagicMock()
    mock.create_checkout_session = AsyncMock()
    mock.retrieve_checkout_session = AsyncMock()
    mock.verify_webhook_signature = MagicMock()
    return mock


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def app(session_factory, clock, provider_client, mock_stripe_service):
    """The FastAPI application wired to the test database and fakes."""
    from app.main import app
    from app.api.dependencies import get_clock
    from app.infrastructure.ai.provider_client import get_provider_client
    from app.infrastructure.db.database import get_session
    from app.infrastructure.payments.stripe_service import get_stripe_service

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_provider_client] = lambda: provider_client
    app.dependency_overrides[get_stripe_service] = lambda: mock_stripe_service
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_token(user_id, **claims) -> str:
    settings = get_settings()
    payload = {"sub": str(user_id)}
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def bearer_headers() -> Callable:
    """Bearer headers for an arbitrary subject and claims."""
    def _headers(subject, **claims) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(subject, **claims)}"}
    return _headers


@pytest.fixture
def auth_headers(bearer_headers) -> Callable:
    """Bearer headers for a user."""
    def _headers(user: User) -> Dict[str, str]:
        return bearer_headers(user.id)
    return _headers
