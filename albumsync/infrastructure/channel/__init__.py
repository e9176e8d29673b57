from .aiohttp_transport import AiohttpChannelConnection, AiohttpChannelTransport
from .endpoints import resolve_channel_endpoint, to_websocket_url

__all__ = [
    "AiohttpChannelConnection",
    "AiohttpChannelTransport",
    "resolve_channel_endpoint",
    "to_websocket_url",
]
