"""Domain entities for albums — the local projection row and its history entries."""

import re
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime, timezone
from typing import Any

_INT_ID = re.compile(r"-?\d+")


def normalize_id(value: Any) -> str:
    """Canonical string form of an id that may arrive as a number or a string.

    Bulk loads carry numeric ids while push payloads may carry strings, so
    every map key and comparison operand goes through here first.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid id: {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if not text:
        raise ValueError("Empty id")
    if _INT_ID.fullmatch(text):
        return str(int(text))
    return text


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class LastEvent:
    """Most recent status transition known to the client."""

    status: str
    date: str


@dataclass(frozen=True)
class AlbumRecord:
    """One row of the local projection.

    Only ``status`` and ``last_event`` are ever written by the push
    reconciler; every other field belongs to the CRUD forms.
    """

    id: str
    name: str = ""
    code: str = ""
    status: str = "Waiting"
    department: str = ""
    executor: str = ""
    customer: str = ""
    deadline: date | None = None
    comment: str | None = None
    external_link: str | None = None
    internal_link: str | None = None
    category: str | None = None
    last_event: LastEvent | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def with_status(self, label: str, event_date: str) -> "AlbumRecord":
        """Structural update: new status and last event, all sibling fields copied."""
        return replace(self, status=label, last_event=LastEvent(status=label, date=event_date))

    def merged(self, overrides: dict[str, Any]) -> "AlbumRecord":
        """Return this record with edit-buffer overrides applied on top.

        Keys that are not record fields land in ``extra``; ``id`` is never
        overridden.
        """
        if not overrides:
            return self
        known = {f.name for f in fields(self)} - {"id", "extra"}
        direct = {k: v for k, v in overrides.items() if k in known}
        unknown = {k: v for k, v in overrides.items() if k not in known and k != "id"}
        extra = {**self.extra, **unknown} if unknown else self.extra
        return replace(self, extra=extra, **direct)


@dataclass(frozen=True)
class AlbumEvent:
    """A single entry of an album's status history, as returned by the events endpoint."""

    id: str
    status_code: str
    status_name: str = ""
    comment: str | None = None
    created_at: str | None = None
    created_by: str | None = None
    source: str | None = None
