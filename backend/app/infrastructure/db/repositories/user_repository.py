"""
User Repository for GenAI Hub
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.user import User
from app.infrastructure.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for user lookups by id."""
    
    def __init__(self, session: AsyncSession):
        super().__init__(User, session)
