"""
Profile Routes

Read and update the current user's profile. The profile row is created the
first time it is saved.
"""

from fastapi import APIRouter

from app.api.dependencies import CurrentUser, UserProfileRepoDep
from app.infrastructure.db.models import UserProfileRead, UserProfileUpdate


router = APIRouter()


def to_read(user, profile) -> UserProfileRead:
    fields = profile.model_dump(include=set(UserProfileUpdate.model_fields)) if profile else {}
    return UserProfileRead(user_id=user.id, name=user.name, email=user.email, **fields)


@router.get("/profile", response_model=UserProfileRead)
async def get_profile(user: CurrentUser, profiles: UserProfileRepoDep):
    """The current user's profile; empty fields when never saved."""
    profile = await profiles.get_by_user_id(user.id)
    return to_read(user, profile)


@router.put("/profile", response_model=UserProfileRead)
async def update_profile(
    request: UserProfileUpdate,
    user: CurrentUser,
    profiles: UserProfileRepoDep,
):
    profile = await profiles.upsert_for_user(user.id, request)
    return to_read(user, profile)
