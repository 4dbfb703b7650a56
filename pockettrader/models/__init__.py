from pockettrader.models.card import Card
from pockettrader.models.errors import (
    AuthRequired,
    BackendUnavailable,
    CatalogUnavailable,
    DuplicateFriendCode,
    DuplicateUsername,
    NotFound,
    TrackerError,
    ValidationError,
)
from pockettrader.models.profile import UserProfile

__all__ = [
    "AuthRequired",
    "BackendUnavailable",
    "Card",
    "CatalogUnavailable",
    "DuplicateFriendCode",
    "DuplicateUsername",
    "NotFound",
    "TrackerError",
    "UserProfile",
    "ValidationError",
]
