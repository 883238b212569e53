"""Supabase-backed user repository."""

from dataclasses import dataclass

from supabase import Client

from geomeet.domain.models import UserRecord
from geomeet.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user lookups."""

    client: Client

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return the user for an id, if present."""
        response = (
            self.client.table("users")
            .select("id, username, email")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            row = response.data[0]
            return UserRecord(
                id=int(row["id"]),
                username=row["username"],
                email=row.get("email"),
            )
        return None
