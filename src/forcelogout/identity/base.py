"""Abstract interface for identity provider adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


@dataclass(frozen=True)
class UserIdentity:
    """Read-only view of a user account held by the identity provider."""

    id: str
    email: Optional[str] = None
    disabled: bool = False
    last_sign_in: Optional[datetime] = None
    display_name: Optional[str] = None
    tokens_valid_after: Optional[datetime] = None


@dataclass(frozen=True)
class UserPage:
    """One page of a user listing."""

    users: List[UserIdentity] = field(default_factory=list)
    next_page_token: Optional[str] = None

    def __post_init__(self):
        # Providers signal the last page with an empty token as well as None.
        if not self.next_page_token:
            object.__setattr__(self, "next_page_token", None)


def timestamp_ms_to_datetime(value: Optional[int]) -> Optional[datetime]:
    """Convert a millisecond epoch timestamp to an aware datetime."""
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


class IdentityService(ABC):
    """Remote identity provider operations used by the logout engine.

    Every method is a coroutine. Implementations raise
    :class:`~forcelogout.exceptions.RemoteError` (or a subclass) on failure.
    """

    @abstractmethod
    async def list_users_page(
        self, max_results: int, page_token: Optional[str] = None
    ) -> UserPage:
        """Fetch one page of users starting at ``page_token``."""

    @abstractmethod
    async def revoke_sessions(self, user_id: str) -> None:
        """Revoke all refresh tokens / sessions for a user."""

    @abstractmethod
    async def set_disabled(self, user_id: str, disabled: bool) -> None:
        """Disable or re-enable a user account."""

    @abstractmethod
    async def get_user(self, user_id: str) -> UserIdentity:
        """Fetch a single user. Raises UserNotFoundError if it does not exist."""
