"""
SQLAlchemy ORM models for persistent storage.

Profiles and missing-card records mirror the dataclass models; accounts and
sessions back the email/password sign-in.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserAccountDB(Base):
    """
    Email/password credentials for a user.

    The account id is the identity every other table refers to.
    """

    __tablename__ = "user_accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<UserAccountDB(id={self.id}, email={self.email})>"


class AuthSessionDB(Base):
    """Bearer session issued at sign-in, renewable with its refresh token."""

    __tablename__ = "auth_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("user_accounts.id", ondelete="CASCADE"), index=True
    )
    access_token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    refresh_token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    refresh_expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<AuthSessionDB(user_id={self.user_id}, expires_at={self.expires_at})>"


class UserProfileDB(Base):
    """
    A user's public profile.

    Friend code and username are unique at the storage layer as well as
    checked before writes.
    """

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    friend_code: Mapped[str] = mapped_column(String(19), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<UserProfileDB(id={self.id}, friend_code={self.friend_code})>"


class MissingCardDB(Base):
    """
    A card a user does not own yet.

    Absence of a row for (user, card) means the user owns the card.
    """

    __tablename__ = "missing_cards"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_user_missing_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<MissingCardDB(user_id={self.user_id}, card_id={self.card_id})>"
