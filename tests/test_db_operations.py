"""Tests for database CRUD operations."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pockettrader.db.operations import (
    count_missing_by_user,
    ensure_profile,
    friend_code_taken,
    get_profile,
    list_missing,
    list_other_profiles,
    list_others_missing,
    mark_missing,
    mark_owned,
    upsert_profile,
    username_taken,
)
from pockettrader.models.errors import DuplicateFriendCode, DuplicateUsername, ValidationError
from pockettrader.models.profile import UserProfile
from pockettrader.services.friend_code import is_valid_friend_code


class TestMissingCardOperations:
    async def test_mark_missing(self, session: AsyncSession) -> None:
        await mark_missing(session, "user-1", "a1-001")
        await session.commit()

        assert await list_missing(session, "user-1") == {"a1-001"}

    async def test_mark_missing_is_idempotent(self, session: AsyncSession) -> None:
        """Marking the same card twice leaves one record."""
        await mark_missing(session, "user-1", "a1-001")
        await mark_missing(session, "user-1", "a1-001")
        await session.commit()

        assert await list_missing(session, "user-1") == {"a1-001"}
        assert await count_missing_by_user(session, ["user-1"]) == {"user-1": 1}

    async def test_mark_owned_removes_record(self, session: AsyncSession) -> None:
        await mark_missing(session, "user-1", "a1-001")
        await mark_missing(session, "user-1", "a1-002")
        await session.commit()

        await mark_owned(session, "user-1", "a1-001")
        await session.commit()

        assert await list_missing(session, "user-1") == {"a1-002"}

    async def test_mark_owned_on_owned_card_is_noop(self, session: AsyncSession) -> None:
        await mark_missing(session, "user-1", "a1-002")
        await session.commit()

        await mark_owned(session, "user-1", "a1-001")
        await mark_owned(session, "user-1", "a1-001")
        await session.commit()

        assert await list_missing(session, "user-1") == {"a1-002"}

    async def test_records_are_per_user(self, session: AsyncSession) -> None:
        await mark_missing(session, "user-1", "a1-001")
        await mark_missing(session, "user-2", "a1-001")
        await mark_owned(session, "user-2", "a1-001")
        await session.commit()

        assert await list_missing(session, "user-1") == {"a1-001"}
        assert await list_missing(session, "user-2") == set()

    async def test_list_others_missing(self, session: AsyncSession) -> None:
        await mark_missing(session, "me", "a1-001")
        await mark_missing(session, "user-1", "a1-001")
        await mark_missing(session, "user-1", "a1-002")
        await mark_missing(session, "user-2", "a1-033")
        await session.commit()

        others = await list_others_missing(session, "me")

        assert others == {"user-1": {"a1-001", "a1-002"}, "user-2": {"a1-033"}}

    async def test_count_missing_by_user(self, session: AsyncSession) -> None:
        await mark_missing(session, "user-1", "a1-001")
        await mark_missing(session, "user-1", "a1-002")
        await session.commit()

        counts = await count_missing_by_user(session, ["user-1", "user-2"])

        assert counts == {"user-1": 2}

    async def test_count_missing_with_no_users(self, session: AsyncSession) -> None:
        assert await count_missing_by_user(session, []) == {}


class TestProfileOperations:
    async def test_upsert_creates_profile(self, session: AsyncSession) -> None:
        profile = await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1234-5678-9012-3456", username="ash")
        )
        await session.commit()

        assert profile.friend_code == "1234-5678-9012-3456"
        assert profile.created_at is not None
        fetched = await get_profile(session, "user-1")
        assert fetched is not None
        assert fetched.username == "ash"

    async def test_get_profile_not_found(self, session: AsyncSession) -> None:
        assert await get_profile(session, "nobody") is None

    async def test_upsert_updates_existing(self, session: AsyncSession) -> None:
        await upsert_profile(session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111"))
        await session.commit()

        updated = await upsert_profile(
            session, UserProfile(id="user-1", friend_code="2222-2222-2222-2222", username="brock")
        )
        await session.commit()

        assert updated.friend_code == "2222-2222-2222-2222"
        assert updated.username == "brock"

    async def test_keeping_own_friend_code_is_not_a_duplicate(
        self, session: AsyncSession
    ) -> None:
        await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username="ash")
        )
        await session.commit()

        profile = await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username="ash")
        )

        assert profile.username == "ash"

    async def test_duplicate_friend_code_rejected(self, session: AsyncSession) -> None:
        await upsert_profile(session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111"))
        await session.commit()

        with pytest.raises(DuplicateFriendCode):
            await upsert_profile(
                session, UserProfile(id="user-2", friend_code="1111-1111-1111-1111")
            )

    async def test_duplicate_username_rejected(self, session: AsyncSession) -> None:
        await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username="ash")
        )
        await session.commit()

        with pytest.raises(DuplicateUsername):
            await upsert_profile(
                session,
                UserProfile(id="user-2", friend_code="2222-2222-2222-2222", username="ash"),
            )

    async def test_malformed_friend_code_rejected(self, session: AsyncSession) -> None:
        with pytest.raises(ValidationError, match="16-digit"):
            await upsert_profile(session, UserProfile(id="user-1", friend_code="1234123412341234"))

    @pytest.mark.parametrize("username", ["ab", "has space", "x" * 33, "emoji🙂"])
    async def test_malformed_username_rejected(self, session: AsyncSession, username: str) -> None:
        with pytest.raises(ValidationError):
            await upsert_profile(
                session,
                UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username=username),
            )

    async def test_taken_checks_exclude_self(self, session: AsyncSession) -> None:
        await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username="ash")
        )
        await session.commit()

        assert await friend_code_taken(session, "1111-1111-1111-1111")
        assert not await friend_code_taken(session, "1111-1111-1111-1111", "user-1")
        assert await username_taken(session, "ash", "user-2")
        assert not await username_taken(session, "misty")

    async def test_list_other_profiles_excludes_self(self, session: AsyncSession) -> None:
        for i in range(1, 4):
            await upsert_profile(
                session, UserProfile(id=f"user-{i}", friend_code=f"{i}{i}{i}{i}-0000-0000-0000")
            )
        await session.commit()

        others = await list_other_profiles(session, "user-2")

        assert sorted(p.id for p in others) == ["user-1", "user-3"]


class TestEnsureProfile:
    async def test_creates_placeholder_profile(self, session: AsyncSession) -> None:
        profile, created = await ensure_profile(session, "3f2a9c1b7d6e4f00aa11223344556677")
        await session.commit()

        assert created is True
        assert profile.username == "user_3f2a9c1b"
        assert is_valid_friend_code(profile.friend_code)

    async def test_redundant_calls_are_noops(self, session: AsyncSession) -> None:
        first, _ = await ensure_profile(session, "3f2a9c1b7d6e4f00aa11223344556677")
        await session.commit()

        second, created = await ensure_profile(session, "3f2a9c1b7d6e4f00aa11223344556677")

        assert created is False
        assert second.friend_code == first.friend_code

    async def test_keeps_existing_profile(self, session: AsyncSession) -> None:
        await upsert_profile(
            session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111", username="ash")
        )
        await session.commit()

        profile, created = await ensure_profile(session, "user-1")

        assert created is False
        assert profile.username == "ash"

    async def test_retries_taken_friend_code(
        self, session: AsyncSession, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        await upsert_profile(session, UserProfile(id="user-1", friend_code="1111-1111-1111-1111"))
        await session.commit()
        codes = iter(["1111-1111-1111-1111", "2222-2222-2222-2222"])
        monkeypatch.setattr(
            "pockettrader.db.operations.generate_random_friend_code", lambda: next(codes)
        )

        profile, created = await ensure_profile(session, "abcdef0123456789")

        assert created is True
        assert profile.friend_code == "2222-2222-2222-2222"
