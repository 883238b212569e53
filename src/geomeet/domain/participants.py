"""Session membership and last-known participant locations."""

from dataclasses import dataclass
from datetime import UTC, datetime

from geomeet.domain.errors import validation_error
from geomeet.domain.geo import Location


@dataclass(frozen=True)
class SessionParticipant:
    """A user who has joined a session. Never mutated once stored."""

    id: int | None
    session_id: int
    user_id: int
    joined_at: datetime

    @classmethod
    def create(cls, session_id: int, user_id: int) -> "SessionParticipant":
        if user_id is None:
            raise validation_error("User id is required")
        return cls(
            id=None,
            session_id=session_id,
            user_id=user_id,
            joined_at=datetime.now(tz=UTC),
        )


@dataclass
class ParticipantLocation:
    """Latest reported location of one participant.

    Only the most recent report is kept; history is not retained.
    """

    id: int | None
    participant_id: int
    session_id: int
    user_id: int
    location: Location
    updated_at: datetime
    created_at: datetime

    @classmethod
    def create(
        cls,
        participant_id: int,
        session_id: int,
        user_id: int,
        location: Location,
    ) -> "ParticipantLocation":
        now = datetime.now(tz=UTC)
        return cls(
            id=None,
            participant_id=participant_id,
            session_id=session_id,
            user_id=user_id,
            location=location,
            updated_at=now,
            created_at=now,
        )

    def update_location(self, location: Location) -> None:
        if location is None:
            raise validation_error("Location is required")
        self.location = location
        self.updated_at = datetime.now(tz=UTC)
