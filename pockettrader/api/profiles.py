"""
Profile API endpoints.

The signed-in user's own profile, and the directory of other users.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator

from pockettrader.api.deps import CurrentUserId, SessionDep
from pockettrader.db import (
    commit_session,
    count_missing_by_user,
    ensure_profile,
    list_other_profiles,
    upsert_profile,
)
from pockettrader.models.profile import UserProfile
from pockettrader.services.friend_code import format_friend_code

router = APIRouter(prefix="/profiles", tags=["profiles"])


class ProfileResponse(BaseModel):
    """A user's public profile."""

    id: str
    username: str | None = None
    friend_code: str
    display_name: str
    created_at: datetime | None = None


class ProfileUpdateRequest(BaseModel):
    """
    Request model for correcting a profile.

    Omitted fields are left unchanged; an empty username clears it.
    """

    username: str | None = None
    friend_code: str | None = Field(default=None, examples=["1234-5678-9012-3456"])

    @field_validator("friend_code")
    @classmethod
    def mask_friend_code(cls, value: str | None) -> str | None:
        return None if value is None else format_friend_code(value)


class DirectoryEntry(ProfileResponse):
    """Another user, with how many cards they are still missing."""

    missing_count: int = 0


def profile_to_response(profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        friend_code=profile.friend_code,
        display_name=profile.display_name,
        created_at=profile.created_at,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(user_id: CurrentUserId, session: SessionDep) -> ProfileResponse:
    """
    Get the signed-in user's profile.

    Creates a placeholder profile on first visit if sign-up did not.
    """
    profile, created = await ensure_profile(session, user_id)
    if created:
        await commit_session(session)
    return profile_to_response(profile)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    request: ProfileUpdateRequest,
    user_id: CurrentUserId,
    session: SessionDep,
) -> ProfileResponse:
    """
    Set or correct the username and friend code.

    Fails with 409 if another user already holds either value.
    """
    current, _ = await ensure_profile(session, user_id)
    username = current.username
    if "username" in request.model_fields_set:
        username = (request.username or "").strip() or None

    updated = UserProfile(
        id=user_id,
        friend_code=current.friend_code if request.friend_code is None else request.friend_code,
        username=username,
    )
    profile = await upsert_profile(session, updated)
    await commit_session(session)
    return profile_to_response(profile)


@router.get("", response_model=list[DirectoryEntry])
async def list_users(user_id: CurrentUserId, session: SessionDep) -> list[DirectoryEntry]:
    """Every other registered user, newest first, with their missing-card count."""
    profiles = await list_other_profiles(session, user_id)
    counts = await count_missing_by_user(session, [p.id for p in profiles])

    return [
        DirectoryEntry(
            **profile_to_response(profile).model_dump(),
            missing_count=counts.get(profile.id, 0),
        )
        for profile in profiles
    ]
