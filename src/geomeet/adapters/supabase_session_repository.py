"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from geomeet.domain.errors import state_conflict
from geomeet.domain.geo import Location
from geomeet.domain.sessions import Session, SessionStatus
from geomeet.services.sessions import SessionRepository

_COLUMNS = (
    "id, session_id, initiator_id, status, invite_code, "
    "meeting_latitude, meeting_longitude, created_at, updated_at"
)


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for meetup sessions."""

    client: Client

    def save(self, session: Session) -> Session:
        """Insert a new session, or update it while it is still Active."""
        if session.id is None:
            response = (
                self.client.table("sessions").insert(_to_row(session)).execute()
            )
            if not response.data:
                raise RuntimeError("Failed to create session")
            return _parse_row(response.data[0])

        row = _to_row(session)
        response = (
            self.client.table("sessions")
            .update(
                {
                    "status": row["status"],
                    "meeting_latitude": row["meeting_latitude"],
                    "meeting_longitude": row["meeting_longitude"],
                    "updated_at": row["updated_at"],
                }
            )
            .eq("id", session.id)
            .eq("status", SessionStatus.ACTIVE.value)
            .execute()
        )
        if not response.data:
            raise state_conflict("Session is no longer active")
        return _parse_row(response.data[0])

    def find_by_session_id(self, session_id: str) -> Session | None:
        """Return a session by its public id, if present."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def find_by_id(self, id: int) -> Session | None:  # noqa: A002
        """Return a session by its database id, if present."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("id", id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])


def _to_row(session: Session) -> dict[str, object]:
    meeting = session.meeting_location
    return {
        "session_id": session.session_id,
        "initiator_id": session.initiator_id,
        "status": session.status.value,
        "invite_code": session.invite_code.value,
        "meeting_latitude": meeting.latitude if meeting else None,
        "meeting_longitude": meeting.longitude if meeting else None,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }


def _parse_row(row: dict[str, object]) -> Session:
    meeting = None
    latitude = row.get("meeting_latitude")
    longitude = row.get("meeting_longitude")
    if latitude is not None and longitude is not None:
        meeting = Location.of(latitude, longitude)
    return Session.reconstruct(
        id=int(row["id"]),
        session_id=str(row["session_id"]),
        initiator_id=int(row["initiator_id"]),
        status=str(row["status"]),
        invite_code=str(row["invite_code"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        updated_at=datetime.fromisoformat(str(row["updated_at"])),
        meeting_location=meeting,
    )
