"""
Dependency Injection Providers for GenAI Hub

Provides FastAPI dependencies for database sessions and repositories.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.database import get_session
from app.infrastructure.db.repositories import (
    UserRepository,
    UserProfileRepository,
)


# Type alias for session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_user_repository(
    session: SessionDep,
) -> AsyncGenerator[UserRepository, None]:
    """
    Dependency provider for UserRepository.
    """
    yield UserRepository(session)


async def get_user_profile_repository(
    session: SessionDep,
) -> AsyncGenerator[UserProfileRepository, None]:
    """
    Dependency provider for UserProfileRepository.
    
    Usage:
        @router.get("/profile")
        async def get_profile(
            repo: UserProfileRepository = Depends(get_user_profile_repository)
        ):
            ...
    """
    yield UserProfileRepository(session)


# Type aliases for repository dependencies
UserRepoDep = Annotated[
    UserRepository,
    Depends(get_user_repository)
]
UserProfileRepoDep = Annotated[
    UserProfileRepository, 
    Depends(get_user_profile_repository)
]
