"""
User SQLModel for GenAI Hub

Identity record. Credentials and sessions live outside this service; the
bearer token only has to name an existing user id.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from app.infrastructure.db.models.base import AwareDateTime, utcnow


class User(SQLModel, table=True):
    """
    User database table model.
    """

    __tablename__ = "users"

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )
    name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255, unique=True, index=True)
    is_admin: bool = Field(default=False, nullable=False)

    created_at: datetime = Field(default_factory=utcnow, sa_type=AwareDateTime, nullable=False)
