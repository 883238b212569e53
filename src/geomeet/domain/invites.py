"""Invite codes used to authorize joining a session."""

import hmac
import secrets
from dataclasses import dataclass

from geomeet.domain.errors import validation_error

# 0, O, I and 1 are excluded because they are easy to misread.
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_CODE_LENGTH = 8


@dataclass(frozen=True)
class InviteCode:
    """Short random token, independent of the session's public id."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise validation_error("Invite code cannot be blank")
        normalized = self.value.strip().upper()
        if len(normalized) != INVITE_CODE_LENGTH:
            raise validation_error(
                f"Invite code must be exactly {INVITE_CODE_LENGTH} characters"
            )
        if any(char not in INVITE_ALPHABET for char in normalized):
            raise validation_error("Invite code contains invalid characters")
        object.__setattr__(self, "value", normalized)

    @classmethod
    def generate(cls) -> "InviteCode":
        """Generate a new code from a cryptographically secure source."""
        return cls(
            "".join(secrets.choice(INVITE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))
        )

    def matches(self, provided: str | None) -> bool:
        """Compare against user input without leaking timing information."""
        if not provided:
            return False
        candidate = provided.strip().upper().encode()
        return hmac.compare_digest(self.value.encode(), candidate)

    def __str__(self) -> str:
        return self.value
