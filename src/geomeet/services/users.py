"""User lookup port."""

from typing import Protocol

from geomeet.domain.models import UserRecord


class UserRepository(Protocol):
    """Read access to user records owned by the identity system."""

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id, if present."""
