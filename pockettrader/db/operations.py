"""
Database CRUD operations.

Provides async functions over user profiles and missing-card records.
Ownership is never stored: a card is owned unless a missing-card row
exists for the (user, card) pair.
"""

import logging
import re
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from pockettrader.config import FRIEND_CODE_ATTEMPTS, MAX_USERNAME_LENGTH, MIN_USERNAME_LENGTH
from pockettrader.models.db import MissingCardDB, UserProfileDB
from pockettrader.models.errors import DuplicateFriendCode, DuplicateUsername, ValidationError
from pockettrader.models.profile import UserProfile
from pockettrader.services.friend_code import (
    generate_random_friend_code,
    is_valid_friend_code,
    placeholder_username,
)

logger = logging.getLogger(__name__)

_USERNAME_PATTERN = re.compile(
    rf"[A-Za-z0-9_.\-]{{{MIN_USERNAME_LENGTH},{MAX_USERNAME_LENGTH}}}", re.ASCII
)

# --- Profile Operations ---


def profile_to_model(db_profile: UserProfileDB) -> UserProfile:
    """Convert a database profile to a domain model."""
    return UserProfile(
        id=db_profile.id,
        friend_code=db_profile.friend_code,
        username=db_profile.username,
        created_at=db_profile.created_at,
    )


async def get_profile(session: AsyncSession, user_id: str) -> UserProfile | None:
    """
    Get a user's profile.

    Returns None if the user has no profile yet.
    """
    db_profile = await session.get(UserProfileDB, user_id)
    if db_profile is None:
        return None
    return profile_to_model(db_profile)


async def list_other_profiles(session: AsyncSession, exclude_user_id: str) -> list[UserProfile]:
    """Get every profile except the given user's, newest first."""
    result = await session.execute(
        select(UserProfileDB)
        .where(UserProfileDB.id != exclude_user_id)
        .order_by(UserProfileDB.created_at.desc(), UserProfileDB.id)
    )
    return [profile_to_model(p) for p in result.scalars().all()]


async def _holder_id(
    session: AsyncSession, column: InstrumentedAttribute[Any], value: str
) -> str | None:
    result = await session.execute(select(UserProfileDB.id).where(column == value))
    return result.scalars().first()


async def friend_code_taken(
    session: AsyncSession, friend_code: str, exclude_user_id: str | None = None
) -> bool:
    """Check whether a profile other than exclude_user_id holds the friend code."""
    holder = await _holder_id(session, UserProfileDB.friend_code, friend_code)
    return holder is not None and holder != exclude_user_id


async def username_taken(
    session: AsyncSession, username: str, exclude_user_id: str | None = None
) -> bool:
    """Check whether a profile other than exclude_user_id holds the username."""
    holder = await _holder_id(session, UserProfileDB.username, username)
    return holder is not None and holder != exclude_user_id


def validate_username(username: str) -> None:
    """
    Check a username's length and characters.

    Raises:
        ValidationError: If the username is malformed
    """
    if not _USERNAME_PATTERN.fullmatch(username):
        raise ValidationError(
            f"Username must be {MIN_USERNAME_LENGTH}-{MAX_USERNAME_LENGTH} characters "
            "of letters, digits, '_', '-' or '.'"
        )


async def upsert_profile(session: AsyncSession, profile: UserProfile) -> UserProfile:
    """
    Insert or update a profile.

    The friend code and username must not belong to a different profile.
    This is checked with a read before the write; the unique constraints on
    the table catch anything that slips between the two.

    Raises:
        ValidationError: If the friend code or username is malformed
        DuplicateFriendCode: If another profile holds the friend code
        DuplicateUsername: If another profile holds the username
    """
    username = profile.username or None
    if not is_valid_friend_code(profile.friend_code):
        raise ValidationError("Please enter a valid 16-digit friend code")
    if username is not None:
        validate_username(username)

    if await friend_code_taken(session, profile.friend_code, exclude_user_id=profile.id):
        logger.info("Friend code conflict for user %s", profile.id)
        raise DuplicateFriendCode()
    if username is not None and await username_taken(session, username, profile.id):
        logger.info("Username conflict for user %s", profile.id)
        raise DuplicateUsername()

    existing = await session.get(UserProfileDB, profile.id)
    if existing:
        existing.friend_code = profile.friend_code
        existing.username = username
        await session.flush()
        await session.refresh(existing)
        return profile_to_model(existing)

    db_profile = UserProfileDB(id=profile.id, friend_code=profile.friend_code, username=username)
    session.add(db_profile)
    await session.flush()
    await session.refresh(db_profile)
    return profile_to_model(db_profile)


async def ensure_profile(session: AsyncSession, user_id: str) -> tuple[UserProfile, bool]:
    """
    Get the user's profile, creating a placeholder one if missing.

    New profiles get username user_<first 8 hex chars of the id> and a
    random friend code nobody else holds. Safe to call repeatedly.

    Returns:
        Tuple of (profile, created) where created is True if new.
    """
    existing = await get_profile(session, user_id)
    if existing:
        return existing, False

    friend_code = generate_random_friend_code()
    for _ in range(FRIEND_CODE_ATTEMPTS - 1):
        if not await friend_code_taken(session, friend_code):
            break
        friend_code = generate_random_friend_code()

    username: str | None = placeholder_username(user_id)
    if await username_taken(session, username):
        username = None

    profile = await upsert_profile(
        session, UserProfile(id=user_id, friend_code=friend_code, username=username)
    )
    logger.info("Created placeholder profile for user %s", user_id)
    return profile, True


# --- Missing Card Operations ---


async def list_missing(session: AsyncSession, user_id: str) -> set[str]:
    """Get the ids of every card the user has marked missing."""
    result = await session.execute(
        select(MissingCardDB.card_id).where(MissingCardDB.user_id == user_id)
    )
    return set(result.scalars().all())


async def mark_missing(session: AsyncSession, user_id: str, card_id: str) -> None:
    """
    Record that the user does not own a card.

    Idempotent: marking an already-missing card is a no-op.
    """
    values = {"user_id": user_id, "card_id": card_id}
    dialect = session.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        await session.execute(insert(MissingCardDB).values(**values).on_conflict_do_nothing())
    else:
        result = await session.execute(
            select(MissingCardDB.id).where(
                MissingCardDB.user_id == user_id, MissingCardDB.card_id == card_id
            )
        )
        if result.first() is None:
            session.add(MissingCardDB(**values))
    await session.flush()


async def mark_owned(session: AsyncSession, user_id: str, card_id: str) -> None:
    """
    Record that the user owns a card by deleting its missing record.

    Idempotent: marking an already-owned card is a no-op.
    """
    await session.execute(
        delete(MissingCardDB).where(
            MissingCardDB.user_id == user_id, MissingCardDB.card_id == card_id
        )
    )
    await session.flush()


async def list_others_missing(session: AsyncSession, exclude_user_id: str) -> dict[str, set[str]]:
    """
    Get missing cards for every other user with at least one record.

    Users with no missing cards do not appear as keys.
    """
    result = await session.execute(
        select(MissingCardDB.user_id, MissingCardDB.card_id)
        .where(MissingCardDB.user_id != exclude_user_id)
        .order_by(MissingCardDB.user_id)
    )
    missing: dict[str, set[str]] = {}
    for user_id, card_id in result.all():
        missing.setdefault(user_id, set()).add(card_id)
    return missing


async def count_missing_by_user(session: AsyncSession, user_ids: Iterable[str]) -> dict[str, int]:
    """Count missing cards per user. Users without records are omitted."""
    ids = list(user_ids)
    if not ids:
        return {}

    result = await session.execute(
        select(MissingCardDB.user_id, func.count(MissingCardDB.id))
        .where(MissingCardDB.user_id.in_(ids))
        .group_by(MissingCardDB.user_id)
    )
    return {user_id: int(count) for user_id, count in result.all()}
