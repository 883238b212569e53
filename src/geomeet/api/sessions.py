"""Session and location endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from geomeet.api.models import (
    JoinSessionRequest,
    UpdateLocationRequest,
    UpdateMeetingLocationRequest,
)

if TYPE_CHECKING:
    from geomeet.containers import AppContainer

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


async def require_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """Return the caller id asserted by the upstream auth gateway."""
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return int(x_user_id.strip())


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Request, user_id: int = Depends(require_user_id)
) -> dict[str, object]:
    """Start a session owned by the caller."""
    result = _container(request).session_service.create_session(user_id)
    return {
        "id": result.id,
        "session_id": result.session_id,
        "initiator_id": result.initiator_id,
        "status": result.status,
        "created_at": result.created_at.isoformat(),
    }


@router.post("/join", status_code=status.HTTP_201_CREATED)
async def join_session(
    body: JoinSessionRequest,
    request: Request,
    user_id: int = Depends(require_user_id),
) -> dict[str, object]:
    """Join a session using its invite code."""
    result = await _container(request).session_service.join_session(
        body.session_id, body.invite_code, user_id
    )
    return {
        "participant_id": result.participant_id,
        "session_id": result.session_id,
        "user_id": result.user_id,
        "joined_at": result.joined_at.isoformat(),
        "message": result.message,
    }


@router.get("/{session_id}")
async def session_details(
    session_id: str, request: Request, user_id: int = Depends(require_user_id)
) -> dict[str, object]:
    """Return the session with participants and last known locations."""
    view = _container(request).session_service.get_session_details(
        session_id, user_id
    )
    return view.to_payload()


@router.get("/{session_id}/invite")
async def invite_link(
    session_id: str, request: Request, user_id: int = Depends(require_user_id)
) -> dict[str, object]:
    """Return the invite link and code. Initiator only."""
    result = _container(request).session_service.generate_invite_link(
        session_id, user_id
    )
    return {
        "session_id": result.session_id,
        "invite_link": result.invite_link,
        "invite_code": result.invite_code,
    }


@router.post("/{session_id}/end")
async def end_session(
    session_id: str, request: Request, user_id: int = Depends(require_user_id)
) -> dict[str, object]:
    """End the session. Initiator only."""
    result = await _container(request).session_service.end_session(
        session_id, user_id
    )
    return {
        "session_id": result.session_id,
        "status": result.status,
        "ended_at": result.ended_at.isoformat(),
    }


@router.post("/{session_id}/location")
async def update_location(
    session_id: str,
    body: UpdateLocationRequest,
    request: Request,
    user_id: int = Depends(require_user_id),
) -> dict[str, object]:
    """Report the caller's current location."""
    result = await _container(request).location_service.update_location(
        session_id,
        user_id,
        latitude=body.latitude,
        longitude=body.longitude,
        accuracy=body.accuracy,
    )
    return {
        "participant_id": result.participant_id,
        "session_id": result.session_id,
        "latitude": result.latitude,
        "longitude": result.longitude,
        "accuracy": result.accuracy,
        "updated_at": result.updated_at.isoformat(),
    }


@router.put("/{session_id}/meeting-location")
async def update_meeting_location(
    session_id: str,
    body: UpdateMeetingLocationRequest,
    request: Request,
    user_id: int = Depends(require_user_id),
) -> dict[str, object]:
    """Set the meeting point. Initiator only."""
    result = await _container(request).location_service.update_meeting_location(
        session_id, user_id, latitude=body.latitude, longitude=body.longitude
    )
    return {
        "session_id": result.session_id,
        "latitude": result.latitude,
        "longitude": result.longitude,
    }


@router.post("/{session_id}/optimal-location")
async def optimal_location(
    session_id: str, request: Request, user_id: int = Depends(require_user_id)
) -> dict[str, object]:
    """Compute and broadcast the suggested meeting point."""
    result = await _container(request).location_service.calculate_optimal_location(
        session_id, user_id
    )
    return result.to_payload()
