from .album import AlbumEvent, AlbumRecord, LastEvent, normalize_id, utc_now_iso
from .album_status import (
    STATUS_COLOR_CLASSES,
    STATUS_LABELS,
    AlbumStatus,
    color_class_for_label,
    resolve_status_label,
    status_from_label,
)

__all__ = [
    "AlbumEvent",
    "AlbumRecord",
    "LastEvent",
    "normalize_id",
    "utc_now_iso",
    "AlbumStatus",
    "STATUS_LABELS",
    "STATUS_COLOR_CLASSES",
    "color_class_for_label",
    "resolve_status_label",
    "status_from_label",
]
