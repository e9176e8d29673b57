from .album_api import AlbumApi
from .channel_transport import ChannelConnection, ChannelTransport

__all__ = [
    "AlbumApi",
    "ChannelConnection",
    "ChannelTransport",
]
