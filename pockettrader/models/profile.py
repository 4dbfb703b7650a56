from dataclasses import dataclass
from datetime import datetime


@dataclass
class UserProfile:
    """
    A registered user's public identity.

    Attributes:
        id: Auth identity of the user
        friend_code: In-game friend code, NNNN-NNNN-NNNN-NNNN
        username: Optional unique handle
        created_at: When the profile was created (None until persisted)
    """

    id: str
    friend_code: str
    username: str | None = None
    created_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Username if set, otherwise a name derived from the friend code."""
        return self.username or f"User {self.friend_code}"
