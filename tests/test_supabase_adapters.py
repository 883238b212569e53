"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from geomeet.adapters.supabase_location_repository import (
    SupabaseParticipantLocationRepository,
)
from geomeet.adapters.supabase_participant_repository import (
    SupabaseSessionParticipantRepository,
)
from geomeet.adapters.supabase_session_repository import SupabaseSessionRepository
from geomeet.adapters.supabase_user_repository import SupabaseUserRepository
from geomeet.domain.errors import DomainError, ErrorKind
from geomeet.domain.geo import Location
from geomeet.domain.participants import ParticipantLocation, SessionParticipant
from geomeet.domain.sessions import Session, SessionStatus

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC).isoformat()


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None
    count: int | None = None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "upsert": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_options: dict[str, object] = field(default_factory=dict)
    count: int | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args, **kwargs) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "select"
        self.last_options = dict(kwargs)
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def upsert(self, payload, **kwargs) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.last_options = dict(kwargs)
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data, count=self.count)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _session_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "id": 7,
        "session_id": "8f14e45f-ceea-4e7a-9b1d-3f4c2a1b0c9d",
        "initiator_id": 1,
        "status": "Active",
        "invite_code": "ABCD2345",
        "meeting_latitude": None,
        "meeting_longitude": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


def test_supabase_session_repository_insert_and_find() -> None:
    client = FakeSupabaseClient()
    table = client.table("sessions")
    table.queue("insert", [_session_row()])
    table.queue("select", [_session_row(meeting_latitude=1.3, meeting_longitude=103.8)])

    repository = SupabaseSessionRepository(client)
    created = repository.save(Session.create(initiator_id=1))
    fetched = repository.find_by_session_id(created.session_id)

    assert created.id == 7
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["status"] == "Active"
    assert fetched is not None
    assert fetched.meeting_location == Location(1.3, 103.8)


def test_supabase_session_repository_update_is_conditional_on_active() -> None:
    client = FakeSupabaseClient()
    table = client.table("sessions")
    table.queue("select", [_session_row()])
    table.queue("update", [_session_row(status="Ended")])

    repository = SupabaseSessionRepository(client)
    session = repository.find_by_session_id("8f14e45f-ceea-4e7a-9b1d-3f4c2a1b0c9d")
    assert session is not None
    session.end(caller_id=1)
    saved = repository.save(session)

    assert saved.status is SessionStatus.ENDED
    assert ("id", 7) in table.last_filters
    assert ("status", "Active") in table.last_filters


def test_supabase_session_repository_lost_update_is_a_state_conflict() -> None:
    client = FakeSupabaseClient()
    table = client.table("sessions")
    table.queue("select", [_session_row()])

    repository = SupabaseSessionRepository(client)
    session = repository.find_by_session_id("8f14e45f-ceea-4e7a-9b1d-3f4c2a1b0c9d")
    assert session is not None
    session.end(caller_id=1)

    with pytest.raises(DomainError) as excinfo:
        repository.save(session)

    assert excinfo.value.kind is ErrorKind.STATE_CONFLICT


def test_supabase_session_repository_missing_row() -> None:
    repository = SupabaseSessionRepository(FakeSupabaseClient())

    assert repository.find_by_id(99) is None
    assert repository.find_by_session_id("missing") is None


def test_supabase_participant_repository_ignores_duplicates() -> None:
    client = FakeSupabaseClient()
    table = client.table("session_participants")
    table.queue("upsert", [])
    table.queue("select", [{"id": 3, "session_id": 7, "user_id": 2, "joined_at": NOW}])

    repository = SupabaseSessionParticipantRepository(client)
    saved = repository.save(SessionParticipant.create(7, 2))

    assert saved.id == 3
    assert table.last_filters[-2:] == [("session_id", 7), ("user_id", 2)]


def test_supabase_participant_repository_upsert_options() -> None:
    client = FakeSupabaseClient()
    table = client.table("session_participants")
    table.queue("upsert", [{"id": 4, "session_id": 7, "user_id": 3, "joined_at": NOW}])

    repository = SupabaseSessionParticipantRepository(client)
    saved = repository.save(SessionParticipant.create(7, 3))

    assert saved.id == 4
    assert table.last_options == {
        "on_conflict": "session_id,user_id",
        "ignore_duplicates": True,
    }


def test_supabase_participant_repository_count_and_list() -> None:
    client = FakeSupabaseClient()
    table = client.table("session_participants")
    table.count = 2
    table.queue(
        "select",
        [
            {"id": 1, "session_id": 7, "user_id": 1, "joined_at": NOW},
            {"id": 2, "session_id": 7, "user_id": 2, "joined_at": NOW},
        ],
    )

    repository = SupabaseSessionParticipantRepository(client)
    participants = repository.find_by_session_id(7)

    assert [p.user_id for p in participants] == [1, 2]
    assert repository.count_by_session_id(7) == 2
    assert table.last_options == {"count": "exact"}


def test_supabase_location_repository_upserts_by_participant() -> None:
    client = FakeSupabaseClient()
    table = client.table("participant_locations")
    table.queue(
        "upsert",
        [
            {
                "id": 11,
                "participant_id": 3,
                "session_id": 7,
                "user_id": 2,
                "latitude": 1.29,
                "longitude": 103.85,
                "accuracy": 12.5,
                "created_at": NOW,
                "updated_at": NOW,
            }
        ],
    )

    repository = SupabaseParticipantLocationRepository(client)
    saved = repository.save(
        ParticipantLocation.create(
            participant_id=3,
            session_id=7,
            user_id=2,
            location=Location(1.29, 103.85, 12.5),
        )
    )

    assert saved.id == 11
    assert saved.location.accuracy == 12.5
    assert table.last_options == {"on_conflict": "participant_id"}


def test_supabase_location_repository_failed_write() -> None:
    repository = SupabaseParticipantLocationRepository(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        repository.save(
            ParticipantLocation.create(
                participant_id=3, session_id=7, user_id=2, location=Location(1.0, 2.0)
            )
        )


def test_supabase_user_repository() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue("select", [{"id": 2, "username": "bob"}])

    repository = SupabaseUserRepository(client)
    user = repository.get_user(2)

    assert user is not None
    assert user.username == "bob"
    assert user.email is None
    assert repository.get_user(3) is None
