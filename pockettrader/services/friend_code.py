"""
Friend code formatting and validation.

A friend code is 16 digits shown as four dash-separated groups,
e.g. 1234-5678-9012-3456.
"""

import random
import re

FRIEND_CODE_DIGITS = 16

_NON_DIGITS = re.compile(r"\D", re.ASCII)
_GROUP_FOLLOWED_BY_DIGIT = re.compile(r"(\d{4})(?=\d)", re.ASCII)
_FRIEND_CODE_PATTERN = re.compile(r"\d{4}-\d{4}-\d{4}-\d{4}", re.ASCII)


def format_friend_code(raw: str) -> str:
    """
    Normalize keyboard input into the dashed friend code form.

    Non-digits are dropped, input is cut to 16 digits, and a dash follows
    every fourth digit that has another digit after it. Partial input
    formats progressively ("12345" -> "1234-5").
    """
    digits = _NON_DIGITS.sub("", raw)[:FRIEND_CODE_DIGITS]
    return _GROUP_FOLLOWED_BY_DIGIT.sub(r"\1-", digits)


def is_valid_friend_code(code: str) -> bool:
    """Check that a code is exactly four dash-separated groups of four digits."""
    return _FRIEND_CODE_PATTERN.fullmatch(code) is not None


def generate_random_friend_code() -> str:
    """Generate a random friend code (each group 0000-9999)."""
    return "-".join(f"{random.randint(0, 9999):04d}" for _ in range(4))


def placeholder_username(user_id: str) -> str:
    """Username assigned to profiles created without one: user_<first 8 hex chars>."""
    return f"user_{user_id.replace('-', '')[:8]}"
