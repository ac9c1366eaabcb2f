"""
API Dependencies

FastAPI dependency injection for authentication and common services.

Security: bearer tokens are issued by the external identity service and
verified here with the shared HS256 secret. Never decode without verification.
"""

import logging
from typing import Annotated, Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config.settings import get_settings
from app.domain.clock import Clock, system_clock
from app.infrastructure.ai.provider_client import ProviderClient, get_provider_client
from app.infrastructure.db.models import User
from app.infrastructure.payments.stripe_service import StripeService, get_stripe_service
from app.infrastructure.services.agent_service import AgentService
from app.infrastructure.services.billing_service import BillingService
from app.infrastructure.services.catalog_service import CatalogService
from app.infrastructure.services.entitlement_service import EntitlementService
from app.infrastructure.services.interaction_service import InteractionService


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Verify a bearer token's signature and required claims."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub"]},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> UUID:
    """
    Extract and verify the user ID from a bearer token.

    Returns:
        Authenticated user ID (``sub`` claim).

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        logger.warning("JWT verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed user ID",
        )


# =============================================================================
# Re-export DB dependencies for a single import source
# Routers should import from api.dependencies, not db.dependencies directly.
# =============================================================================
from app.infrastructure.db.dependencies import (  # noqa: E402, F401
    SessionDep,
    UserRepoDep,
    UserProfileRepoDep,
)


async def get_current_user(
    users: UserRepoDep,
    user_id: UUID = Depends(get_current_user_id),
) -> User:
    """Load the authenticated user's record."""
    user = await users.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user",
        )
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only administrators through."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]


# =============================================================================
# Service providers
# =============================================================================

def get_clock() -> Clock:
    """Time source for entitlement and billing decisions."""
    return system_clock


ClockDep = Annotated[Clock, Depends(get_clock)]


async def get_entitlement_service(
    session: SessionDep,
    clock: ClockDep,
) -> EntitlementService:
    return EntitlementService(session, clock)


async def get_interaction_service(
    session: SessionDep,
    clock: ClockDep,
    provider_client: ProviderClient = Depends(get_provider_client),
) -> InteractionService:
    return InteractionService(session, provider_client, clock)


async def get_agent_service(
    session: SessionDep,
    clock: ClockDep,
) -> AgentService:
    return AgentService(session, clock)


async def get_billing_service(
    session: SessionDep,
    clock: ClockDep,
    stripe_service: StripeService = Depends(get_stripe_service),
) -> BillingService:
    return BillingService(session, stripe_service, clock)


async def get_catalog_service(session: SessionDep) -> CatalogService:
    return CatalogService(session)


EntitlementServiceDep = Annotated[EntitlementService, Depends(get_entitlement_service)]
InteractionServiceDep = Annotated[InteractionService, Depends(get_interaction_service)]
AgentServiceDep = Annotated[AgentService, Depends(get_agent_service)]
BillingServiceDep = Annotated[BillingService, Depends(get_billing_service)]
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
