"""
UserProfile SQLModel for GenAI Hub

Optional contact and business details attached to a user.
Rows are created lazily on the first update.
"""

from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel

from app.infrastructure.db.models.base import BaseModel


class UserProfileBase(SQLModel):
    """
    Editable profile fields (shared between update and read).
    """

    full_name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    company: Optional[str] = Field(default=None, max_length=255)
    job_title: Optional[str] = Field(default=None, max_length=255)
    avatar: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Reference to an uploaded avatar (storage handled elsewhere)"
    )
    bio: Optional[str] = Field(default=None, max_length=1000)


class UserProfile(UserProfileBase, BaseModel, table=True):
    """
    UserProfile database table model.
    """

    __tablename__ = "user_profiles"

    user_id: UUID = Field(
        ...,
        foreign_key="users.id",
        unique=True,
        index=True,
        nullable=False,
        description="Owning user"
    )


class UserProfileUpdate(UserProfileBase):
    """Schema for updating a profile (all fields optional)."""
    pass


class UserProfileRead(UserProfileBase):
    """Schema for reading a profile."""

    user_id: UUID
    name: str
    email: str
