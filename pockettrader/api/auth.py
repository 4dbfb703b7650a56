"""
Authentication API endpoints.

Sign up with a friend code, sign in, refresh an expiring session, sign out.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Header, status
from pydantic import BaseModel, Field, field_validator

from pockettrader.api.deps import SessionDep, bearer_token
from pockettrader.api.profiles import ProfileResponse, profile_to_response
from pockettrader.db import commit_session, ensure_profile
from pockettrader.services.auth import IssuedSession, refresh, sign_in, sign_out, sign_up
from pockettrader.services.friend_code import format_friend_code

router = APIRouter(prefix="/auth", tags=["auth"])


class SignUpRequest(BaseModel):
    """Request model for creating an account."""

    email: str = Field(..., examples=["ash@example.com"])
    password: str = Field(..., description="At least 6 characters")
    friend_code: str = Field(
        ...,
        description="16-digit friend code; digits are grouped automatically",
        examples=["1234-5678-9012-3456"],
    )
    username: str | None = Field(default=None, examples=["ash_ketchum"])

    @field_validator("friend_code")
    @classmethod
    def mask_friend_code(cls, value: str) -> str:
        return format_friend_code(value)


class SignInRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class SessionResponse(BaseModel):
    """Tokens for an authenticated session."""

    user_id: str
    access_token: str
    refresh_token: str
    expires_at: datetime
    profile: ProfileResponse | None = None


class SignOutResponse(BaseModel):
    signed_out: bool


def _session_response(issued: IssuedSession, profile: ProfileResponse | None) -> SessionResponse:
    return SessionResponse(
        user_id=issued.user_id,
        access_token=issued.access_token,
        refresh_token=issued.refresh_token,
        expires_at=issued.expires_at,
        profile=profile,
    )


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignUpRequest, session: SessionDep) -> SessionResponse:
    """
    Create an account.

    Fails with 422 for a malformed friend code, email, password or
    username, and 409 if the friend code or username is taken.
    """
    issued, profile = await sign_up(
        session,
        email=request.email,
        password=request.password,
        friend_code=request.friend_code,
        username=request.username,
    )
    await commit_session(session)
    return _session_response(issued, profile_to_response(profile))


@router.post("/signin", response_model=SessionResponse)
async def signin(request: SignInRequest, session: SessionDep) -> SessionResponse:
    """Sign in with email and password."""
    issued = await sign_in(session, request.email, request.password)
    profile, _ = await ensure_profile(session, issued.user_id)
    await commit_session(session)
    return _session_response(issued, profile_to_response(profile))


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session(request: RefreshRequest, session: SessionDep) -> SessionResponse:
    """Exchange a refresh token for a new session. Each refresh token works once."""
    issued = await refresh(session, request.refresh_token)
    await commit_session(session)
    return _session_response(issued, None)


@router.post("/signout", response_model=SignOutResponse)
async def signout(
    session: SessionDep,
    authorization: Annotated[str | None, Header()] = None,
) -> SignOutResponse:
    """Revoke the current session. Signing out twice is harmless."""
    token = bearer_token(authorization)
    if not token:
        return SignOutResponse(signed_out=False)
    signed_out = await sign_out(session, token)
    await commit_session(session)
    return SignOutResponse(signed_out=signed_out)
