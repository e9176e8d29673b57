from .album_filters import AlbumFilter, AlbumSummary, filter_albums, summarize
from .album_projection import AlbumProjection
from .album_table_view import AlbumTableView, ChannelFactory
from .channel_hub import ChannelHub, HubClient
from .event_channel import ChannelState, EventChannel, ReconnectPolicy
from .event_history_cache import EventHistoryCache
from .projection_reconciler import ProjectionReconciler
from .status_publish_service import ChatStatusChange, PublishedStatus, StatusPublishService

__all__ = [
    "AlbumFilter",
    "AlbumSummary",
    "filter_albums",
    "summarize",
    "AlbumProjection",
    "AlbumTableView",
    "ChannelFactory",
    "ChannelHub",
    "HubClient",
    "ChannelState",
    "EventChannel",
    "ReconnectPolicy",
    "EventHistoryCache",
    "ProjectionReconciler",
    "ChatStatusChange",
    "PublishedStatus",
    "StatusPublishService",
]
