"""Session lifecycle use cases: create, join, end, invite and details."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from urllib.parse import urlencode

from geomeet.domain.errors import (
    access_denied,
    invalid_invite_code,
    not_initiator,
    state_conflict,
    validation_error,
)
from geomeet.domain.participants import SessionParticipant
from geomeet.domain.sessions import Session
from geomeet.domain.views import SessionView
from geomeet.services.broadcast import (
    PARTICIPANT_JOINED,
    SESSION_ENDED,
    BroadcastCoordinator,
)
from geomeet.services.views import SessionViewBuilder

_logger = logging.getLogger(__name__)

JOINED_MESSAGE = "Successfully joined the session"
ALREADY_JOINED_MESSAGE = "Already joined the session"


class SessionRepository(Protocol):
    """Persistence interface for sessions."""

    def save(self, session: Session) -> Session:
        """Insert a new session or update an Active one and return it.

        Updating a row that is no longer Active raises a state conflict.
        """

    def find_by_session_id(self, session_id: str) -> Session | None:
        """Return a session by its public id, if present."""

    def find_by_id(self, id: int) -> Session | None:  # noqa: A002
        """Return a session by its database id, if present."""


class SessionParticipantRepository(Protocol):
    """Persistence interface for session membership."""

    def save(self, participant: SessionParticipant) -> SessionParticipant:
        """Insert a participant; on a duplicate return the stored row."""

    def find_by_session_id(self, session_id: int) -> list[SessionParticipant]:
        """Return all participants of a session."""

    def find_by_session_id_and_user_id(
        self, session_id: int, user_id: int
    ) -> SessionParticipant | None:
        """Return a user's membership row, if present."""

    def exists_by_session_id_and_user_id(self, session_id: int, user_id: int) -> bool:
        """Return whether the user is a participant."""

    def count_by_session_id(self, session_id: int) -> int:
        """Return the number of participants in a session."""


@dataclass(frozen=True)
class CreateSessionResult:
    """Outcome of creating a session."""

    id: int
    session_id: str
    initiator_id: int
    status: str
    created_at: datetime


@dataclass(frozen=True)
class JoinSessionResult:
    """Outcome of joining a session."""

    participant_id: int
    session_id: str
    user_id: int
    joined_at: datetime
    message: str


@dataclass(frozen=True)
class EndSessionResult:
    """Outcome of ending a session."""

    session_id: str
    status: str
    ended_at: datetime


@dataclass(frozen=True)
class InviteLinkResult:
    """Invitation details the initiator can share."""

    session_id: str
    invite_link: str
    invite_code: str


@dataclass
class SessionService:
    """Application service for the session lifecycle."""

    session_repository: SessionRepository
    participant_repository: SessionParticipantRepository
    view_builder: SessionViewBuilder
    broadcaster: BroadcastCoordinator
    invite_base_url: str = "http://localhost:5173"

    def create_session(self, initiator_id: int) -> CreateSessionResult:
        """Create an Active session and enrol the initiator as a participant."""
        session = self.session_repository.save(Session.create(initiator_id))
        self.participant_repository.save(
            SessionParticipant.create(session.id, session.initiator_id)
        )
        _logger.info(
            "Session created: session=%s initiator_id=%s",
            session.session_id,
            session.initiator_id,
        )
        return CreateSessionResult(
            id=session.id,
            session_id=session.session_id,
            initiator_id=session.initiator_id,
            status=session.status.value,
            created_at=session.created_at,
        )

    async def join_session(
        self, session_id: str, invite_code: str, user_id: int
    ) -> JoinSessionResult:
        """Join with an invite code. Joining twice returns the existing row."""
        _require_user(user_id)
        session = self._find(session_id)
        # A bare public id never grants entry, so a missing session looks
        # exactly like a wrong code.
        if session is None or not session.invite_code.matches(invite_code):
            raise invalid_invite_code()
        if not session.is_active():
            raise state_conflict("Cannot join a session that has ended")

        existing = self.participant_repository.find_by_session_id_and_user_id(
            session.id, user_id
        )
        if existing is not None:
            return _join_result(session, existing, ALREADY_JOINED_MESSAGE)

        candidate = SessionParticipant.create(session.id, user_id)
        participant = self.participant_repository.save(candidate)
        if participant.joined_at != candidate.joined_at:
            # A concurrent join for the same user stored its row first.
            return _join_result(session, participant, ALREADY_JOINED_MESSAGE)
        self.broadcaster.session_changed(session.session_id, PARTICIPANT_JOINED)
        return _join_result(session, participant, JOINED_MESSAGE)

    async def end_session(self, session_id: str, user_id: int) -> EndSessionResult:
        """End a session. Only the initiator may do this, and only once."""
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        session.end(user_id)
        saved = self.session_repository.save(session)
        _logger.info("Session ended: session=%s", saved.session_id)
        self.broadcaster.session_changed(saved.session_id, SESSION_ENDED)
        return EndSessionResult(
            session_id=saved.session_id,
            status=saved.status.value,
            ended_at=saved.updated_at,
        )

    def generate_invite_link(self, session_id: str, user_id: int) -> InviteLinkResult:
        """Return the shareable link and code for the initiator."""
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        if not session.is_initiator(user_id):
            raise not_initiator("Only the session initiator can generate invite links")
        query = urlencode(
            {"sessionId": session.session_id, "code": session.invite_code.value}
        )
        return InviteLinkResult(
            session_id=session.session_id,
            invite_link=f"{self.invite_base_url.rstrip('/')}/join?{query}",
            invite_code=session.invite_code.value,
        )

    def get_session_details(self, session_id: str, user_id: int) -> SessionView:
        """Return the session view for a participant or the initiator."""
        session = self._find(session_id)
        if session is None:
            raise access_denied()
        if not session.is_initiator(
            user_id
        ) and not self.participant_repository.exists_by_session_id_and_user_id(
            session.id, user_id
        ):
            raise access_denied()
        return self.view_builder.build(session)

    def _find(self, session_id: str) -> Session | None:
        return self.session_repository.find_by_session_id(_require_public_id(session_id))


def _require_public_id(session_id: str | None) -> str:
    if session_id is None or not session_id.strip():
        raise validation_error("Session id cannot be blank")
    return session_id.strip()


def _require_user(user_id: int | None) -> None:
    if user_id is None:
        raise validation_error("User id is required")


def _join_result(
    session: Session, participant: SessionParticipant, message: str
) -> JoinSessionResult:
    return JoinSessionResult(
        participant_id=participant.id,
        session_id=session.session_id,
        user_id=participant.user_id,
        joined_at=participant.joined_at,
        message=message,
    )
