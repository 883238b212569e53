"""Supabase-backed session participant repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from geomeet.domain.participants import SessionParticipant
from geomeet.services.sessions import SessionParticipantRepository

_COLUMNS = "id, session_id, user_id, joined_at"


@dataclass
class SupabaseSessionParticipantRepository(SessionParticipantRepository):
    """Supabase implementation for session membership.

    The table carries a unique constraint on (session_id, user_id).
    """

    client: Client

    def save(self, participant: SessionParticipant) -> SessionParticipant:
        """Insert a participant, returning the stored row on a duplicate."""
        response = (
            self.client.table("session_participants")
            .upsert(
                {
                    "session_id": participant.session_id,
                    "user_id": participant.user_id,
                    "joined_at": participant.joined_at.isoformat(),
                },
                on_conflict="session_id,user_id",
                ignore_duplicates=True,
            )
            .execute()
        )
        if response.data:
            return _parse_row(response.data[0])
        existing = self.find_by_session_id_and_user_id(
            participant.session_id, participant.user_id
        )
        if existing is None:
            raise RuntimeError("Failed to create session participant")
        return existing

    def find_by_session_id(self, session_id: int) -> list[SessionParticipant]:
        """Return all participants of a session in join order."""
        response = (
            self.client.table("session_participants")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .order("joined_at", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def find_by_session_id_and_user_id(
        self, session_id: int, user_id: int
    ) -> SessionParticipant | None:
        """Return a user's membership row, if present."""
        response = (
            self.client.table("session_participants")
            .select(_COLUMNS)
            .eq("session_id", session_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def exists_by_session_id_and_user_id(self, session_id: int, user_id: int) -> bool:
        """Return whether the user is a participant."""
        return self.find_by_session_id_and_user_id(session_id, user_id) is not None

    def count_by_session_id(self, session_id: int) -> int:
        """Return the number of participants in a session."""
        response = (
            self.client.table("session_participants")
            .select("id", count="exact")
            .eq("session_id", session_id)
            .execute()
        )
        if response.count is not None:
            return int(response.count)
        return len(response.data or [])


def _parse_row(row: dict[str, object]) -> SessionParticipant:
    return SessionParticipant(
        id=int(row["id"]),
        session_id=int(row["session_id"]),
        user_id=int(row["user_id"]),
        joined_at=datetime.fromisoformat(str(row["joined_at"])),
    )
