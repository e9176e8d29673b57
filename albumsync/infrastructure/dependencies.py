"""Dependency wiring — connects infrastructure adapters to the application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Any

from fastapi import Depends

from albumsync.config import Settings, get_settings
from albumsync.application.services import (
    AlbumTableView,
    ChannelHub,
    EventChannel,
    ReconnectPolicy,
    StatusPublishService,
)
from albumsync.application.services.event_channel import StatusUpdateHandler
from albumsync.infrastructure.backend import HttpAlbumApiClient
from albumsync.infrastructure.channel import AiohttpChannelTransport, resolve_channel_endpoint


# ── Server side ──────────────────────────────────────────────────────


@lru_cache
def get_channel_hub() -> ChannelHub:
    """Process-wide hub shared by the websocket and publish endpoints."""
    return ChannelHub()


async def get_status_publish_service(
    hub: ChannelHub = Depends(get_channel_hub),
) -> AsyncGenerator[StatusPublishService, None]:
    """Provides a StatusPublishService bound to the shared hub."""
    yield StatusPublishService(hub)


# ── Client side ──────────────────────────────────────────────────────


def build_album_api(settings: Settings | None = None) -> HttpAlbumApiClient:
    settings = settings or get_settings()
    return HttpAlbumApiClient(
        base_url=settings.api_base_url,
        token=settings.api_token,
        timeout=settings.api_timeout,
    )


def build_reconnect_policy(settings: Settings | None = None) -> ReconnectPolicy:
    settings = settings or get_settings()
    return ReconnectPolicy(
        enabled=settings.channel_reconnect,
        initial_delay=settings.channel_reconnect_initial_delay,
        max_delay=settings.channel_reconnect_max_delay,
        max_attempts=settings.channel_reconnect_max_attempts,
    )


def build_event_channel(
    company_id: Any,
    project_id: Any,
    on_status_update: StatusUpdateHandler,
    settings: Settings | None = None,
) -> EventChannel:
    """Unopened channel for one (company, project) scope, configured from Settings."""
    settings = settings or get_settings()
    headers = {"Authorization": f"Bearer {settings.api_token}"} if settings.api_token else {}
    return EventChannel(
        company_id,
        project_id,
        url=resolve_channel_endpoint(settings),
        transport=AiohttpChannelTransport(headers=headers),
        on_status_update=on_status_update,
        reconnect=build_reconnect_policy(settings),
        ping_interval=settings.channel_ping_interval,
    )


def build_album_table_view(
    company_id: Any,
    project_id: Any,
    settings: Settings | None = None,
) -> AlbumTableView:
    settings = settings or get_settings()
    return AlbumTableView(
        company_id,
        project_id,
        api=build_album_api(settings),
        channel_factory=lambda cid, pid, handler: build_event_channel(cid, pid, handler, settings),
    )
