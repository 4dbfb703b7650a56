"""
Error taxonomy for user-visible failures.

Every failure that can reach a user is one of these classes. Each carries
the HTTP status it maps to and a message that is safe to show as-is;
`pockettrader.main` converts them into JSON responses in one place.
"""


class TrackerError(Exception):
    """Base class for known, explainable failures."""

    status_code: int = 400
    code: str = "error"
    default_message: str = "Something went wrong."

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class AuthRequired(TrackerError):
    """No authenticated session, or the session expired and could not be refreshed."""

    status_code = 401
    code = "auth_required"
    default_message = "Your session has expired. Please sign in again."


class BackendUnavailable(TrackerError):
    """The database could not be reached or refused the operation."""

    status_code = 503
    code = "backend_unavailable"
    default_message = "The collection store is unavailable. Please try again."


class CatalogUnavailable(TrackerError):
    """The card catalog feed could not be fetched or parsed."""

    status_code = 503
    code = "catalog_unavailable"
    default_message = "The card catalog could not be loaded. Please try again."


class DuplicateFriendCode(TrackerError):
    status_code = 409
    code = "duplicate_friend_code"
    default_message = "This friend code is already taken. Please choose a different one."


class DuplicateUsername(TrackerError):
    status_code = 409
    code = "duplicate_username"
    default_message = "This username is already taken. Please choose a different one."


class ValidationError(TrackerError):
    """Malformed friend code, username, email or password."""

    status_code = 422
    code = "validation_error"
    default_message = "The submitted data is invalid."


class NotFound(TrackerError):
    status_code = 404
    code = "not_found"
    default_message = "Not found."
