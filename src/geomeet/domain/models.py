"""Domain models for geomeet users."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: int
    username: str
    email: str | None = None
