"""Channel endpoint resolution from the deployment context."""

import logging
from urllib.parse import urlsplit, urlunsplit

from albumsync.config import Settings

logger = logging.getLogger(__name__)

_SCHEME_MAP = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


def to_websocket_url(url: str, default_path: str = "/ws") -> str:
    """Normalize an http(s)/ws(s) URL to a websocket URL with a path."""
    parts = urlsplit(url.strip())
    scheme = _SCHEME_MAP.get(parts.scheme.lower())
    if scheme is None or not parts.netloc:
        raise ValueError(f"Not a usable channel URL: {url!r}")
    path = parts.path if parts.path not in ("", "/") else default_path
    return urlunsplit((scheme, parts.netloc, path, parts.query, ""))


def resolve_channel_endpoint(settings: Settings) -> str:
    """Pick the channel endpoint for the current deployment context.

    An explicit ``channel_url`` wins. Otherwise ``app_env`` selects the
    production, tunnel or local endpoint; a tunnel context without a tunnel
    URL falls back to the local one.
    """
    if settings.channel_url:
        return to_websocket_url(settings.channel_url)

    env = settings.app_env.strip().lower()
    if env == "production":
        return to_websocket_url(settings.channel_production_url)
    if env == "tunnel":
        if settings.channel_tunnel_url:
            return to_websocket_url(settings.channel_tunnel_url)
        logger.warning("app_env is 'tunnel' but CHANNEL_TUNNEL_URL is empty; using local endpoint")
    return to_websocket_url(settings.channel_local_url)
