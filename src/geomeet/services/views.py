"""Builds the consolidated session view shared by details and broadcast."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from geomeet.domain.views import ParticipantView, SessionView

if TYPE_CHECKING:
    from datetime import datetime

    from geomeet.domain.models import UserRecord
    from geomeet.domain.participants import ParticipantLocation
    from geomeet.domain.sessions import Session
    from geomeet.services.locations import ParticipantLocationRepository
    from geomeet.services.sessions import SessionParticipantRepository
    from geomeet.services.users import UserRepository

_logger = logging.getLogger(__name__)


@dataclass
class SessionViewBuilder:
    """Assemble initiator, participants and their last known locations."""

    participant_repository: SessionParticipantRepository
    location_repository: ParticipantLocationRepository
    user_repository: UserRepository

    def build(self, session: Session) -> SessionView:
        """Return the current view of a persisted session."""
        locations: dict[int, ParticipantLocation] = {}
        for row in self.location_repository.find_by_session_id(session.id):
            locations.setdefault(row.user_id, row)

        participants: list[ParticipantView] = []
        seen: set[int] = set()
        for participant in self.participant_repository.find_by_session_id(session.id):
            user = self.user_repository.get_user(participant.user_id)
            if user is None:
                _logger.warning(
                    "Skipping participant with missing user: session=%s user_id=%s",
                    session.session_id,
                    participant.user_id,
                )
                continue
            seen.add(participant.user_id)
            participants.append(
                _participant_view(
                    user=user,
                    participant_id=participant.id,
                    joined_at=participant.joined_at,
                    location=locations.get(participant.user_id),
                )
            )

        initiator = self.user_repository.get_user(session.initiator_id)
        if initiator is not None and session.initiator_id not in seen:
            # Sessions created before the initiator got a participant row.
            seen.add(session.initiator_id)
            participants.insert(
                0,
                _participant_view(
                    user=initiator,
                    participant_id=None,
                    joined_at=session.created_at,
                    location=locations.get(session.initiator_id),
                ),
            )

        # Last known locations stay visible even without a membership row.
        for user_id, location in locations.items():
            if user_id in seen:
                continue
            user = self.user_repository.get_user(user_id)
            if user is None:
                continue
            seen.add(user_id)
            participants.append(
                _participant_view(
                    user=user,
                    participant_id=location.participant_id,
                    joined_at=None,
                    location=location,
                )
            )

        meeting = session.meeting_location
        return SessionView(
            session_id=session.session_id,
            initiator_id=session.initiator_id,
            initiator_username=initiator.username if initiator else None,
            status=session.status.value,
            created_at=session.created_at,
            meeting_latitude=meeting.latitude if meeting else None,
            meeting_longitude=meeting.longitude if meeting else None,
            participants=participants,
        )


def _participant_view(
    user: UserRecord,
    participant_id: int | None,
    joined_at: datetime | None,
    location: ParticipantLocation | None,
) -> ParticipantView:
    if location is None:
        return ParticipantView(
            user_id=user.id,
            username=user.username,
            email=user.email,
            participant_id=participant_id,
            joined_at=joined_at,
        )
    return ParticipantView(
        user_id=user.id,
        username=user.username,
        email=user.email,
        participant_id=participant_id,
        joined_at=joined_at,
        latitude=location.location.latitude,
        longitude=location.location.longitude,
        accuracy=location.location.accuracy,
        location_updated_at=location.updated_at,
    )
