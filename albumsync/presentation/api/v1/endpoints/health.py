"""Health check endpoint — reports version, environment and channel load."""

from fastapi import APIRouter, Depends

from albumsync.config import get_settings
from albumsync.application.services import ChannelHub
from albumsync.infrastructure.dependencies import get_channel_hub

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(hub: ChannelHub = Depends(get_channel_hub)) -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "channelClients": hub.client_count,
    }
