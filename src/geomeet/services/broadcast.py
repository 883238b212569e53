"""Best-effort fan-out of session state to subscribers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from geomeet.domain.sessions import Session
    from geomeet.services.sessions import SessionRepository
    from geomeet.services.views import SessionViewBuilder

_logger = logging.getLogger(__name__)

PARTICIPANT_JOINED = "participant_joined"
LOCATION_UPDATED = "location_updated"
MEETING_LOCATION_UPDATED = "meeting_location_updated"
SESSION_ENDED = "session_ended"
OPTIMAL_LOCATION = "optimal_location"


class SessionPublisher(Protocol):
    """Real-time transport used to push payloads to a channel."""

    async def publish(self, channel: str, payload: dict[str, object]) -> None:
        """Publish a payload to every subscriber of the channel."""


@dataclass
class BroadcastCoordinator:
    """Recompute session views and publish them without blocking callers.

    Every publish runs in its own task. Failures are logged and dropped so a
    slow or broken transport never fails the command that triggered it.
    """

    session_repository: SessionRepository
    view_builder: SessionViewBuilder
    publisher: SessionPublisher
    channel_prefix: str = "session"
    _tasks: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    def channel_for(self, public_id: str) -> str:
        """Return the channel key for a session's public id."""
        return f"{self.channel_prefix}:{public_id}"

    def session_changed(self, public_id: str, event: str) -> None:
        """Schedule a broadcast of the refreshed session view."""
        self._schedule(self._publish_view(public_id, event), public_id, event)

    def optimal_location_calculated(
        self, public_id: str, result: dict[str, object]
    ) -> None:
        """Schedule a broadcast of a meeting point calculation."""
        payload = {"event": OPTIMAL_LOCATION, "result": result}
        self._schedule(
            self.publisher.publish(self.channel_for(public_id), payload),
            public_id,
            OPTIMAL_LOCATION,
        )

    async def drain(self) -> None:
        """Wait for all scheduled broadcasts to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _publish_view(self, public_id: str, event: str) -> None:
        session = self.session_repository.find_by_session_id(public_id)
        if session is None:
            _logger.warning("Broadcast skipped, session missing: %s", public_id)
            return
        payload = _view_payload(session, self.view_builder, event)
        await self.publisher.publish(self.channel_for(public_id), payload)

    def _schedule(
        self, coro: Coroutine[Any, Any, None], public_id: str, event: str
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            _logger.warning(
                "Broadcast dropped outside event loop: session=%s event=%s",
                public_id,
                event,
            )
            return
        task = loop.create_task(self._guard(coro, public_id, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @staticmethod
    async def _guard(
        coro: Coroutine[Any, Any, None], public_id: str, event: str
    ) -> None:
        try:
            await coro
        except Exception:
            _logger.exception(
                "Broadcast failed: session=%s event=%s", public_id, event
            )


def _view_payload(
    session: Session, view_builder: SessionViewBuilder, event: str
) -> dict[str, object]:
    payload: dict[str, object] = {
        "event": event,
        "session": view_builder.build(session).to_payload(),
    }
    if event == SESSION_ENDED:
        payload["ended_at"] = session.updated_at.isoformat()
    return payload
