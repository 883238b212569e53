"""Typed domain errors."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Categories of domain rule violations."""

    VALIDATION = "validation"
    ACCESS_DENIED = "access_denied"
    AUTHORIZATION = "authorization"
    STATE_CONFLICT = "state_conflict"
    INVALID_INVITE_CODE = "invalid_invite_code"


class DomainError(Exception):
    """Raised when a domain rule is violated.

    Callers branch on ``kind`` rather than on exception subclasses.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"DomainError(kind={self.kind.value!r}, message={self.message!r})"


def validation_error(message: str) -> DomainError:
    return DomainError(ErrorKind.VALIDATION, message)


def access_denied() -> DomainError:
    # Same message whether the session is missing or the caller is not a member.
    return DomainError(
        ErrorKind.ACCESS_DENIED,
        "Access denied: user is not a participant or initiator",
    )


def not_initiator(message: str) -> DomainError:
    return DomainError(ErrorKind.AUTHORIZATION, message)


def state_conflict(message: str) -> DomainError:
    return DomainError(ErrorKind.STATE_CONFLICT, message)


def invalid_invite_code() -> DomainError:
    return DomainError(ErrorKind.INVALID_INVITE_CODE, "Invalid invite code")
