"""
UserProfile Repository for GenAI Hub

Specialized repository for user profile operations.
Profiles are created lazily the first time a user saves one.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.user_profile import (
    UserProfile,
    UserProfileUpdate,
)
from app.infrastructure.db.repositories.base_repository import BaseRepository


class UserProfileRepository(BaseRepository[UserProfile]):
    """
    Repository for UserProfile CRUD and specialized queries.
    
    - get_by_user_id: Find profile by authenticated user
    - upsert_for_user: Create-or-update pattern for profile management
    """
    
    def __init__(self, session: AsyncSession):
        super().__init__(UserProfile, session)
    
    async def get_by_user_id(self, user_id: UUID) -> Optional[UserProfile]:
        """
        Get a profile by the authenticated user's ID.
        
        Args:
            user_id: The user's UUID (not profile ID)
            
        Returns:
            UserProfile or None if not found
        """
        stmt = select(UserProfile).where(UserProfile.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
    
    async def upsert_for_user(
        self,
        user_id: UUID,
        data: UserProfileUpdate
    ) -> UserProfile:
        """
        Update the user's profile, creating it first if missing.
        
        Args:
            user_id: The user's UUID
            data: Fields to set (unset fields are left alone)
            
        Returns:
            The saved UserProfile
        """
        profile = await self.get_by_user_id(user_id)
        if profile is None:
            profile = UserProfile(user_id=user_id)
        
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)
        profile.updated_at = utcnow()
        
        return await self.save(profile)
