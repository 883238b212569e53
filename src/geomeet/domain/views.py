"""Read models describing a session as participants see it."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ParticipantView:
    """A participant with their last known location, if any."""

    user_id: int
    username: str
    participant_id: int | None
    joined_at: datetime | None
    email: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None
    location_updated_at: datetime | None = None


@dataclass(frozen=True)
class SessionView:
    """Consolidated state of a session."""

    session_id: str
    initiator_id: int
    initiator_username: str | None
    status: str
    created_at: datetime
    meeting_latitude: float | None
    meeting_longitude: float | None
    participants: list[ParticipantView] = field(default_factory=list)

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    def to_payload(self) -> dict[str, object]:
        """Render as a JSON-compatible dict."""
        return {
            "session_id": self.session_id,
            "initiator_id": self.initiator_id,
            "initiator_username": self.initiator_username,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "meeting_location": (
                {"latitude": self.meeting_latitude, "longitude": self.meeting_longitude}
                if self.meeting_latitude is not None
                and self.meeting_longitude is not None
                else None
            ),
            "participant_count": self.participant_count,
            "participants": [
                {
                    "participant_id": participant.participant_id,
                    "user_id": participant.user_id,
                    "username": participant.username,
                    "email": participant.email,
                    "joined_at": (
                        participant.joined_at.isoformat()
                        if participant.joined_at
                        else None
                    ),
                    "latitude": participant.latitude,
                    "longitude": participant.longitude,
                    "accuracy": participant.accuracy,
                    "location_updated_at": (
                        participant.location_updated_at.isoformat()
                        if participant.location_updated_at
                        else None
                    ),
                }
                for participant in self.participants
            ],
        }
