"""Participant location use cases and meeting point calculation."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from geomeet.domain.aggregation import geometric_center, total_travel_distance_km
from geomeet.domain.errors import (
    DomainError,
    ErrorKind,
    access_denied,
    state_conflict,
    validation_error,
)
from geomeet.domain.geo import Location
from geomeet.domain.participants import ParticipantLocation, SessionParticipant
from geomeet.domain.sessions import Session
from geomeet.services.broadcast import (
    LOCATION_UPDATED,
    MEETING_LOCATION_UPDATED,
    BroadcastCoordinator,
)
from geomeet.services.sessions import SessionParticipantRepository, SessionRepository


class ParticipantLocationRepository(Protocol):
    """Persistence interface for last-known participant locations."""

    def save(self, location: ParticipantLocation) -> ParticipantLocation:
        """Upsert the single location row for a participant."""

    def find_by_participant_id(
        self, participant_id: int
    ) -> ParticipantLocation | None:
        """Return a participant's location, if reported."""

    def find_by_session_id_and_user_id(
        self, session_id: int, user_id: int
    ) -> ParticipantLocation | None:
        """Return a user's location within a session, if reported."""

    def find_by_session_id(self, session_id: int) -> list[ParticipantLocation]:
        """Return every reported location in a session."""


@dataclass(frozen=True)
class UpdateLocationResult:
    """Stored location after a participant report."""

    participant_id: int
    session_id: str
    user_id: int
    latitude: float
    longitude: float
    accuracy: float | None
    updated_at: datetime


@dataclass(frozen=True)
class UpdateMeetingLocationResult:
    """Meeting point chosen by the initiator."""

    session_id: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class OptimalLocationResult:
    """Suggested meeting point over all reported locations."""

    session_id: str
    optimal_latitude: float
    optimal_longitude: float
    total_travel_distance_km: float
    participant_count: int

    def to_payload(self) -> dict[str, object]:
        return {
            "session_id": self.session_id,
            "optimal_latitude": self.optimal_latitude,
            "optimal_longitude": self.optimal_longitude,
            "total_travel_distance_km": self.total_travel_distance_km,
            "participant_count": self.participant_count,
        }


@dataclass
class LocationService:
    """Application service for location reporting and aggregation."""

    session_repository: SessionRepository
    participant_repository: SessionParticipantRepository
    location_repository: ParticipantLocationRepository
    broadcaster: BroadcastCoordinator

    async def update_location(  # noqa: PLR0913
        self,
        session_id: str,
        user_id: int,
        latitude: float,
        longitude: float,
        accuracy: float | None = None,
    ) -> UpdateLocationResult:
        """Record the caller's current position, replacing the previous one."""
        location = Location.of(latitude, longitude, accuracy)
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        if not session.is_active():
            raise state_conflict("Cannot update location for an ended session")
        participant = self.participant_repository.find_by_session_id_and_user_id(
            session.id, user_id
        )
        if participant is None and session.is_initiator(user_id):
            # Restores the membership row if session creation stopped halfway.
            participant = self.participant_repository.save(
                SessionParticipant.create(session.id, user_id)
            )
        if participant is None:
            raise DomainError(
                ErrorKind.ACCESS_DENIED, "User is not a participant in this session"
            )

        # The store upserts on participant_id, so racing reports keep one row.
        current = self.location_repository.find_by_participant_id(participant.id)
        if current is None:
            current = ParticipantLocation.create(
                participant_id=participant.id,
                session_id=session.id,
                user_id=user_id,
                location=location,
            )
        else:
            current.update_location(location)
        saved = self.location_repository.save(current)

        self.broadcaster.session_changed(session.session_id, LOCATION_UPDATED)
        return UpdateLocationResult(
            participant_id=saved.participant_id,
            session_id=session.session_id,
            user_id=saved.user_id,
            latitude=saved.location.latitude,
            longitude=saved.location.longitude,
            accuracy=saved.location.accuracy,
            updated_at=saved.updated_at,
        )

    async def update_meeting_location(
        self, session_id: str, user_id: int, latitude: float, longitude: float
    ) -> UpdateMeetingLocationResult:
        """Set the meeting point. Initiator only, Active sessions only."""
        location = Location.of(latitude, longitude)
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        session.update_meeting_location(user_id, location)
        saved = self.session_repository.save(session)
        self.broadcaster.session_changed(saved.session_id, MEETING_LOCATION_UPDATED)
        return UpdateMeetingLocationResult(
            session_id=saved.session_id,
            latitude=location.latitude,
            longitude=location.longitude,
        )

    async def calculate_optimal_location(
        self, session_id: str, user_id: int
    ) -> OptimalLocationResult:
        """Compute the centroid of reported locations and share it."""
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        if not session.is_active():
            raise state_conflict(
                "Cannot calculate optimal location for an ended session"
            )
        if not session.is_initiator(
            user_id
        ) and not self.participant_repository.exists_by_session_id_and_user_id(
            session.id, user_id
        ):
            raise access_denied()

        rows = self.location_repository.find_by_session_id(session.id)
        if not rows:
            raise validation_error(
                "No participant locations available. "
                "At least one participant must share their location."
            )
        locations = [row.location for row in rows]
        center = geometric_center(locations)
        result = OptimalLocationResult(
            session_id=session.session_id,
            optimal_latitude=center.latitude,
            optimal_longitude=center.longitude,
            total_travel_distance_km=total_travel_distance_km(locations, center),
            participant_count=len(rows),
        )
        self.broadcaster.optimal_location_calculated(
            session.session_id, result.to_payload()
        )
        return result

    def _find(self, session_id: str) -> Session | None:
        if session_id is None or not session_id.strip():
            raise validation_error("Session id cannot be blank")
        return self.session_repository.find_by_session_id(session_id.strip())
