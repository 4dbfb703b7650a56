from pockettrader.db.database import commit_session, get_session, init_db
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
    profile_to_model,
    upsert_profile,
    username_taken,
    validate_username,
)

__all__ = [
    "commit_session",
    "count_missing_by_user",
    "ensure_profile",
    "friend_code_taken",
    "get_profile",
    "get_session",
    "init_db",
    "list_missing",
    "list_other_profiles",
    "list_others_missing",
    "mark_missing",
    "mark_owned",
    "profile_to_model",
    "upsert_profile",
    "username_taken",
    "validate_username",
]
