import logging
from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

_config_logger = logging.getLogger(__name__)

_PROJECT_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _PROJECT_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Album Sync"
    app_version: str = "0.1.0"
    app_env: str = "development"             # development | tunnel | production
    cors_origins: list[str] = ["http://localhost:5173"]

    # Backend request/response API
    api_base_url: str = "http://localhost:3001/api"
    api_token: str = ""
    api_timeout: float = 30.0

    # Event channel endpoints (one per deployment context)
    channel_url: str = ""                    # explicit override, wins when set
    channel_local_url: str = "ws://localhost:3001/ws"
    channel_tunnel_url: str = ""
    channel_production_url: str = "wss://klam.online/ws"

    # Reconnect policy
    channel_reconnect: bool = True
    channel_reconnect_initial_delay: float = 1.0
    channel_reconnect_max_delay: float = 30.0
    channel_reconnect_max_attempts: int = 0  # 0 = unlimited

    # Keepalive, seconds (0 disables)
    channel_ping_interval: float = 25.0

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore, backend API
    log_level_channel: str = "INFO"          # aiohttp + event channel
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        if self.channel_reconnect_initial_delay > self.channel_reconnect_max_delay:
            _config_logger.warning(
                "channel_reconnect_initial_delay (%s) exceeds max delay (%s); clamping",
                self.channel_reconnect_initial_delay,
                self.channel_reconnect_max_delay,
            )
            self.channel_reconnect_initial_delay = self.channel_reconnect_max_delay


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
