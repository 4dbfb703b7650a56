"""Tests for friend code formatting."""

import re

from pockettrader.services.friend_code import (
    format_friend_code,
    generate_random_friend_code,
    is_valid_friend_code,
    placeholder_username,
)


class TestFormatFriendCode:
    def test_twelve_digits(self) -> None:
        assert format_friend_code("123412341234") == "1234-1234-1234"

    def test_truncates_at_sixteen_digits(self) -> None:
        assert format_friend_code("12341234123412341234") == "1234-1234-1234-1234"

    def test_no_trailing_dash(self) -> None:
        assert format_friend_code("1234") == "1234"
        assert format_friend_code("12345") == "1234-5"

    def test_strips_non_digits(self) -> None:
        assert format_friend_code("12 34-ab56/78") == "1234-5678"

    def test_reformats_already_dashed_input(self) -> None:
        assert format_friend_code("1234-5678-9012-3456") == "1234-5678-9012-3456"

    def test_empty(self) -> None:
        assert format_friend_code("") == ""
        assert format_friend_code("no digits") == ""


class TestIsValidFriendCode:
    def test_valid(self) -> None:
        assert is_valid_friend_code("1234-1234-1234-1234")

    def test_dashes_required(self) -> None:
        assert not is_valid_friend_code("1234123412341234")

    def test_rejects_partial_and_padded(self) -> None:
        assert not is_valid_friend_code("1234-1234-1234")
        assert not is_valid_friend_code("1234-1234-1234-1234\n")
        assert not is_valid_friend_code(" 1234-1234-1234-1234")
        assert not is_valid_friend_code("1234-1234-1234-12345")


class TestGenerateRandomFriendCode:
    def test_shape(self) -> None:
        for _ in range(50):
            code = generate_random_friend_code()
            assert is_valid_friend_code(code)

    def test_groups_are_zero_padded(self, monkeypatch) -> None:
        monkeypatch.setattr("pockettrader.services.friend_code.random.randint", lambda a, b: 7)

        assert generate_random_friend_code() == "0007-0007-0007-0007"


class TestPlaceholderUsername:
    def test_first_eight_hex_chars(self) -> None:
        assert placeholder_username("3f2a9c1b7d6e4f00aa") == "user_3f2a9c1b"

    def test_ignores_uuid_dashes(self) -> None:
        name = placeholder_username("3f2a9c1b-7d6e-4f00-aa11-223344556677")

        assert name == "user_3f2a9c1b"
        assert re.fullmatch(r"user_[0-9a-f]{8}", name)
