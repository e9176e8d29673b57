from .album import (
    AlbumEventSchema,
    AlbumSchema,
    ChatMessageRequest,
    ChatMessageResponse,
    ChatStatusChangeSchema,
    PublishStatusRequest,
    PublishStatusResponse,
    StatusAliasesSchema,
)
from .channel_messages import (
    AlbumStatusData,
    AlbumStatusUpdated,
    Connected,
    PingMessage,
    Pong,
    ProjectUpdated,
    SubscribeMessage,
    UnknownMessage,
    parse_client_message,
    parse_push_message,
)

__all__ = [
    "AlbumEventSchema",
    "AlbumSchema",
    "ChatMessageRequest",
    "ChatMessageResponse",
    "ChatStatusChangeSchema",
    "PublishStatusRequest",
    "PublishStatusResponse",
    "StatusAliasesSchema",
    "AlbumStatusData",
    "AlbumStatusUpdated",
    "Connected",
    "PingMessage",
    "Pong",
    "ProjectUpdated",
    "SubscribeMessage",
    "UnknownMessage",
    "parse_client_message",
    "parse_push_message",
]
