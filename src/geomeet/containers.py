"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from geomeet.adapters.realtime_publisher import HttpxRealtimePublisher
from geomeet.adapters.supabase_location_repository import (
    SupabaseParticipantLocationRepository,
)
from geomeet.adapters.supabase_participant_repository import (
    SupabaseSessionParticipantRepository,
)
from geomeet.adapters.supabase_session_repository import SupabaseSessionRepository
from geomeet.adapters.supabase_user_repository import SupabaseUserRepository
from geomeet.config import Settings
from geomeet.services.broadcast import BroadcastCoordinator
from geomeet.services.locations import LocationService
from geomeet.services.sessions import SessionService
from geomeet.services.views import SessionViewBuilder


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    location_service: LocationService
    broadcaster: BroadcastCoordinator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(supabase_client)
    participant_repository = SupabaseSessionParticipantRepository(supabase_client)
    location_repository = SupabaseParticipantLocationRepository(supabase_client)
    user_repository = SupabaseUserRepository(supabase_client)
    publisher = HttpxRealtimePublisher.create(
        supabase_url=resolved_settings.supabase_url,
        api_key=resolved_settings.supabase_service_key,
    )
    view_builder = SessionViewBuilder(
        participant_repository=participant_repository,
        location_repository=location_repository,
        user_repository=user_repository,
    )
    broadcaster = BroadcastCoordinator(
        session_repository=session_repository,
        view_builder=view_builder,
        publisher=publisher,
        channel_prefix=resolved_settings.realtime_channel_prefix,
    )
    session_service = SessionService(
        session_repository=session_repository,
        participant_repository=participant_repository,
        view_builder=view_builder,
        broadcaster=broadcaster,
        invite_base_url=resolved_settings.invite_base_url,
    )
    location_service = LocationService(
        session_repository=session_repository,
        participant_repository=participant_repository,
        location_repository=location_repository,
        broadcaster=broadcaster,
    )

    async def close_resources() -> None:
        await broadcaster.drain()
        await publisher.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        location_service=location_service,
        broadcaster=broadcaster,
        close_resources=close_resources,
    )
