"""
Email/password authentication.

Issues bearer sessions with an expiry and a refresh token. An expired
access token can be renewed once with its refresh token; after that the
user has to sign in again.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from passlib.hash import pbkdf2_sha256
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pockettrader.config import MIN_PASSWORD_LENGTH, settings
from pockettrader.db.operations import (
    friend_code_taken,
    upsert_profile,
    username_taken,
    validate_username,
)
from pockettrader.models.db import AuthSessionDB, UserAccountDB
from pockettrader.models.errors import (
    AuthRequired,
    DuplicateFriendCode,
    DuplicateUsername,
    ValidationError,
)
from pockettrader.models.profile import UserProfile
from pockettrader.services.friend_code import is_valid_friend_code, placeholder_username

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """Tokens handed to a client after sign-in, sign-up or refresh."""

    user_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


async def _issue_session(session: AsyncSession, user_id: str) -> IssuedSession:
    now = _utcnow()
    db_session = AuthSessionDB(
        user_id=user_id,
        access_token=secrets.token_urlsafe(32),
        refresh_token=secrets.token_urlsafe(32),
        expires_at=now + timedelta(seconds=settings.session_ttl_seconds),
        refresh_expires_at=now + timedelta(seconds=settings.refresh_ttl_seconds),
    )
    session.add(db_session)
    await session.flush()
    return IssuedSession(
        user_id=user_id,
        access_token=db_session.access_token,
        refresh_token=db_session.refresh_token,
        expires_at=db_session.expires_at,
    )


async def _get_account_by_email(session: AsyncSession, email: str) -> UserAccountDB | None:
    result = await session.execute(select(UserAccountDB).where(UserAccountDB.email == email))
    return result.scalar_one_or_none()


async def sign_up(
    session: AsyncSession,
    email: str,
    password: str,
    friend_code: str,
    username: str | None = None,
) -> tuple[IssuedSession, UserProfile]:
    """
    Create an account and its profile, and sign the new user in.

    Everything is validated before the account is written, so a rejected
    sign-up leaves nothing behind.

    Raises:
        ValidationError: Malformed email, password, friend code or username,
            or the email is already registered
        DuplicateFriendCode: Another profile holds the friend code
        DuplicateUsername: Another profile holds the username
    """
    email = _normalize_email(email)
    username = (username or "").strip() or None

    if "@" not in email:
        raise ValidationError("Please enter a valid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not is_valid_friend_code(friend_code):
        raise ValidationError("Please enter a valid 16-digit friend code")
    if username is not None:
        validate_username(username)

    if await friend_code_taken(session, friend_code):
        raise DuplicateFriendCode()
    if username is not None and await username_taken(session, username):
        raise DuplicateUsername()
    if await _get_account_by_email(session, email) is not None:
        raise ValidationError("An account with this email already exists")

    account = UserAccountDB(
        id=uuid.uuid4().hex,
        email=email,
        password_hash=pbkdf2_sha256.hash(password),
    )
    session.add(account)
    await session.flush()

    if username is None:
        username = placeholder_username(account.id)
        if await username_taken(session, username):
            username = None

    profile = await upsert_profile(
        session, UserProfile(id=account.id, friend_code=friend_code, username=username)
    )
    logger.info("Registered user %s", account.id)
    return await _issue_session(session, account.id), profile


async def sign_in(session: AsyncSession, email: str, password: str) -> IssuedSession:
    """
    Check credentials and open a new session.

    Raises:
        AuthRequired: Unknown email or wrong password
    """
    account = await _get_account_by_email(session, _normalize_email(email))
    if account is None or not pbkdf2_sha256.verify(password, account.password_hash):
        logger.info("Failed sign-in attempt")
        raise AuthRequired("Invalid email or password")
    return await _issue_session(session, account.id)


async def refresh(session: AsyncSession, refresh_token: str) -> IssuedSession:
    """
    Exchange a refresh token for a new session.

    The old session is revoked; each refresh token works once.

    Raises:
        AuthRequired: Unknown or expired refresh token
    """
    result = await session.execute(
        select(AuthSessionDB).where(AuthSessionDB.refresh_token == refresh_token)
    )
    db_session = result.scalar_one_or_none()
    if db_session is None or _as_utc(db_session.refresh_expires_at) <= _utcnow():
        raise AuthRequired()

    user_id = db_session.user_id
    await session.delete(db_session)
    await session.flush()
    return await _issue_session(session, user_id)


async def resolve_user(
    session: AsyncSession,
    access_token: str | None,
    refresh_token: str | None = None,
) -> tuple[str, IssuedSession | None]:
    """
    Find the user behind an access token.

    An expired token is renewed once when a refresh token is supplied.

    Returns:
        Tuple of (user_id, renewed) where renewed holds the new tokens
        if a refresh happened, else None.

    Raises:
        AuthRequired: No token, unknown token, or expired without a usable
            refresh token
    """
    if not access_token:
        raise AuthRequired("Please sign in.")

    result = await session.execute(
        select(AuthSessionDB).where(AuthSessionDB.access_token == access_token)
    )
    db_session = result.scalar_one_or_none()
    if db_session is not None and _as_utc(db_session.expires_at) > _utcnow():
        return db_session.user_id, None

    if refresh_token:
        renewed = await refresh(session, refresh_token)
        logger.info("Refreshed expired session for user %s", renewed.user_id)
        return renewed.user_id, renewed

    raise AuthRequired()


async def sign_out(session: AsyncSession, access_token: str) -> bool:
    """
    Revoke a session.

    Returns True if a session was revoked, False if the token was unknown.
    """
    result = await session.execute(
        delete(AuthSessionDB).where(AuthSessionDB.access_token == access_token)
    )
    # rowcount is available on DELETE results; type stubs incomplete for async
    return bool(result.rowcount)  # type: ignore[attr-defined]
