"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from albumsync.config import get_settings
from albumsync.infrastructure.dependencies import get_channel_hub
from albumsync.infrastructure.logging.log_config import setup_logging
from albumsync.presentation.api.channel_controller import router as channel_router
from albumsync.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, disconnect channel clients on exit."""
    settings = get_settings()
    setup_logging()
    logger.info("Album status channel starting (env=%s)", settings.app_env)

    yield

    # Shutdown
    hub = get_channel_hub()
    await hub.shutdown()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)
    app.include_router(channel_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "albumsync.main:app",
        host="0.0.0.0",
        port=3001,
        reload=True,
    )
