"""Pydantic models for request bodies."""

from pydantic import BaseModel, Field


class JoinSessionRequest(BaseModel):
    """Join a session with its public id and invite code."""

    session_id: str = Field(min_length=1)
    invite_code: str = Field(min_length=1)


class UpdateLocationRequest(BaseModel):
    """A participant's current position."""

    latitude: float
    longitude: float
    accuracy: float | None = None


class UpdateMeetingLocationRequest(BaseModel):
    """Meeting point chosen by the initiator."""

    latitude: float
    longitude: float
