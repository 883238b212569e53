"""Supabase-backed participant location repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from geomeet.domain.geo import Location
from geomeet.domain.participants import ParticipantLocation
from geomeet.services.locations import ParticipantLocationRepository

_COLUMNS = (
    "id, participant_id, session_id, user_id, latitude, longitude, accuracy, "
    "created_at, updated_at"
)


@dataclass
class SupabaseParticipantLocationRepository(ParticipantLocationRepository):
    """Supabase implementation keyed by a unique participant_id."""

    client: Client

    def save(self, location: ParticipantLocation) -> ParticipantLocation:
        """Upsert the location row for the participant."""
        response = (
            self.client.table("participant_locations")
            .upsert(
                {
                    "participant_id": location.participant_id,
                    "session_id": location.session_id,
                    "user_id": location.user_id,
                    "latitude": location.location.latitude,
                    "longitude": location.location.longitude,
                    "accuracy": location.location.accuracy,
                    "created_at": location.created_at.isoformat(),
                    "updated_at": location.updated_at.isoformat(),
                },
                on_conflict="participant_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save participant location")
        return _parse_row(response.data[0])

    def find_by_participant_id(
        self, participant_id: int
    ) -> ParticipantLocation | None:
        """Return a participant's location, if reported."""
        response = (
            self.client.table("participant_locations")
            .select(_COLUMNS)
            .eq("participant_id", participant_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def find_by_session_id_and_user_id(
        self, session_id: int, user_id: int
    ) -> ParticipantLocation | None:
        """Return a user's location within a session, if reported."""
        response = (
            self.client.table("participant_locations")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def find_by_session_id(self, session_id: int) -> list[ParticipantLocation]:
        """Return every reported location in a session."""
        response = (
            self.client.table("participant_locations")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> ParticipantLocation:
    return ParticipantLocation(
        id=int(row["id"]),
        participant_id=int(row["participant_id"]),
        session_id=int(row["session_id"]),
        user_id=int(row["user_id"]),
        location=Location.of(row["latitude"], row["longitude"], row.get("accuracy")),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
