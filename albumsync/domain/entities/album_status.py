"""Album status lifecycle — the closed set of status codes and their display labels."""

from enum import Enum


class AlbumStatus(str, Enum):
    """Status codes as carried on the wire and in the backend's album_statuses table."""

    WAITING = "waiting"
    UPLOAD = "upload"
    SENT = "sent"
    ACCEPTED = "accepted"
    REMARKS = "remarks"
    PRODUCTION = "production"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def color_class(self) -> str:
        return STATUS_COLOR_CLASSES[self]


STATUS_LABELS: dict[AlbumStatus, str] = {
    AlbumStatus.WAITING: "Waiting",
    AlbumStatus.UPLOAD: "Upload",
    AlbumStatus.SENT: "Sent",
    AlbumStatus.ACCEPTED: "Accepted",
    AlbumStatus.REMARKS: "Remarks",
    AlbumStatus.PRODUCTION: "InProduction",
}

# Row highlight classes used by the table renderer
STATUS_COLOR_CLASSES: dict[AlbumStatus, str] = {
    AlbumStatus.WAITING: "bg-gray-100 text-gray-700 border-gray-200",
    AlbumStatus.UPLOAD: "bg-blue-100 text-blue-700 border-blue-200",
    AlbumStatus.SENT: "bg-indigo-100 text-indigo-700 border-indigo-200",
    AlbumStatus.ACCEPTED: "bg-green-100 text-green-700 border-green-200",
    AlbumStatus.REMARKS: "bg-red-100 text-red-700 border-red-200",
    AlbumStatus.PRODUCTION: "bg-purple-100 text-purple-700 border-purple-200",
}

_LABEL_TO_STATUS: dict[str, AlbumStatus] = {label: s for s, label in STATUS_LABELS.items()}


def resolve_status_label(status_code: object) -> str | None:
    """Map a wire status code to its display label.

    Returns None for anything outside the closed set, so callers can keep
    the previously known status instead of writing an empty label.
    """
    if not isinstance(status_code, str):
        return None
    try:
        return AlbumStatus(status_code.strip().lower()).label
    except ValueError:
        return None


def status_from_label(label: str | None) -> AlbumStatus | None:
    """Reverse lookup: display label -> status, None if the label is unknown."""
    if label is None:
        return None
    return _LABEL_TO_STATUS.get(label)


def color_class_for_label(label: str | None) -> str:
    """Row highlight class for a display label; empty string for unknown labels."""
    status = status_from_label(label)
    return status.color_class if status else ""
