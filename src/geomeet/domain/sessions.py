"""Session aggregate and its lifecycle."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from geomeet.domain.errors import not_initiator, state_conflict, validation_error
from geomeet.domain.geo import Location
from geomeet.domain.invites import InviteCode


class SessionStatus(StrEnum):
    """Lifecycle states. The only transition is ACTIVE -> ENDED."""

    ACTIVE = "Active"
    ENDED = "Ended"


@dataclass
class Session:
    """Meetup session aggregate root.

    Build new sessions with ``create`` and loaded ones with ``reconstruct``.
    State changes go through ``end`` and ``update_meeting_location`` so the
    ownership and lifecycle rules are always applied.
    """

    id: int | None
    session_id: str
    initiator_id: int
    status: SessionStatus
    invite_code: InviteCode
    created_at: datetime
    updated_at: datetime
    meeting_location: Location | None = None

    @classmethod
    def create(cls, initiator_id: int) -> "Session":
        """Start a fresh Active session owned by ``initiator_id``."""
        if initiator_id is None:
            raise validation_error("Initiator id is required")
        now = datetime.now(tz=UTC)
        return cls(
            id=None,
            session_id=str(uuid4()),
            initiator_id=initiator_id,
            status=SessionStatus.ACTIVE,
            invite_code=InviteCode.generate(),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstruct(  # noqa: PLR0913
        cls,
        id: int,  # noqa: A002
        session_id: str,
        initiator_id: int,
        status: str,
        invite_code: str,
        created_at: datetime,
        updated_at: datetime,
        meeting_location: Location | None = None,
    ) -> "Session":
        """Rebuild a session loaded from storage."""
        if not session_id or not session_id.strip():
            raise validation_error("Session id cannot be blank")
        try:
            parsed_status = SessionStatus(status)
        except ValueError as exc:
            raise validation_error(f"Unknown session status: {status}") from exc
        return cls(
            id=id,
            session_id=session_id,
            initiator_id=initiator_id,
            status=parsed_status,
            invite_code=InviteCode(invite_code),
            created_at=created_at,
            updated_at=updated_at,
            meeting_location=meeting_location,
        )

    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    def is_initiator(self, user_id: int) -> bool:
        return self.initiator_id == user_id

    def end(self, caller_id: int) -> None:
        """End the session. Terminal; only the initiator may do this."""
        if not self.is_initiator(caller_id):
            raise not_initiator("Only the session initiator can end the session")
        if not self.is_active():
            raise state_conflict("Session is already ended")
        self.status = SessionStatus.ENDED
        self.updated_at = datetime.now(tz=UTC)

    def update_meeting_location(self, caller_id: int, location: Location) -> None:
        """Replace the meeting point chosen by the initiator."""
        if not self.is_initiator(caller_id):
            raise not_initiator(
                "Only the session initiator can update the meeting location"
            )
        if not self.is_active():
            raise state_conflict(
                "Cannot update meeting location for an ended session"
            )
        self.meeting_location = location
        self.updated_at = datetime.now(tz=UTC)
