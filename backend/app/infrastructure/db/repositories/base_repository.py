"""
Base Repository for GenAI Hub

Generic async repository implementing the CRUD operations every table shares.
Concrete repositories extend it with their own queries.
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, Type
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel


# Type variable for generic repository
ModelType = TypeVar("ModelType", bound=SQLModel)


class IReadRepository(ABC, Generic[ModelType]):
    """
    Interface for read operations.
    """
    
    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """Get a single record by ID."""
        pass


class IWriteRepository(ABC, Generic[ModelType]):
    """
    Interface for write operations.
    """
    
    @abstractmethod
    async def add(self, obj: ModelType) -> ModelType:
        """Persist a new record."""
        pass
    
    @abstractmethod
    async def delete(self, id: UUID) -> bool:
        """Delete a record by ID."""
        pass


class BaseRepository(
    IReadRepository[ModelType],
    IWriteRepository[ModelType],
    Generic[ModelType]
):
    """
    Generic async repository with CRUD operations.
    
    Args:
        model: The SQLModel class to operate on
        session: Async database session
    """
    
    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self._model = model
        self._session = session
    
    @property
    def session(self) -> AsyncSession:
        """Get the current session."""
        return self._session
    
    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        """
        Get a single record by its primary key.
        
        Args:
            id: UUID primary key
            
        Returns:
            Model instance or None if not found
        """
        return await self._session.get(self._model, id)
    
    async def add(self, obj: ModelType) -> ModelType:
        """
        Persist a new record.
        
        Args:
            obj: Model instance with field values
            
        Returns:
            The same instance, refreshed with database defaults
        """
        self._session.add(obj)
        await self._session.flush()
        await self._session.refresh(obj)
        return obj
    
    async def save(self, obj: ModelType) -> ModelType:
        """Flush pending attribute changes on an already-loaded record."""
        self._session.add(obj)
        await self._session.flush()
        await self._session.refresh(obj)
        return obj
    
    async def delete(self, id: UUID) -> bool:
        """
        Delete a record by ID.
        
        Returns:
            True if deleted, False if not found
        """
        db_obj = await self.get_by_id(id)
        if not db_obj:
            return False
        
        await self._session.delete(db_obj)
        await self._session.flush()
        return True
