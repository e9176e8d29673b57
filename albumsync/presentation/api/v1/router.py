"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from albumsync.presentation.api.v1.endpoints.health import router as health_router
from albumsync.presentation.api.v1.endpoints.album_status import router as album_status_router
from albumsync.presentation.api.v1.endpoints.chat_messages import router as chat_messages_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(album_status_router)
router.include_router(chat_messages_router)
