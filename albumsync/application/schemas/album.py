"""Pydantic DTOs for album payloads returned by the backend API."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from albumsync.domain.entities import AlbumEvent, AlbumRecord, LastEvent, normalize_id, resolve_status_label


def _named(value: Any) -> str:
    """Flatten ``{"code": .., "name": ..}`` style references to a display string."""
    if value is None:
        return ""
    if isinstance(value, dict):
        if "firstName" in value or "lastName" in value:
            parts = [value.get("firstName") or "", value.get("lastName") or ""]
            return " ".join(p for p in parts if p).strip()
        return str(value.get("name") or value.get("code") or "")
    return str(value)


class AlbumSchema(BaseModel):
    """One album row as served by ``GET /companies/{cid}/projects/{pid}/albums``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str = ""
    code: str = ""
    status: Any = None
    status_code: str | None = Field(None, alias="statusCode")
    department: Any = None
    executor: Any = None
    customer: Any = None
    deadline: date | None = None
    comment: str | None = None
    link: str | None = None
    external_link: str | None = Field(None, alias="externalLink")
    internal_link: str | None = Field(None, alias="internalLink")
    category: str | None = None
    last_event: dict[str, Any] | None = Field(None, alias="lastEvent")

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        return normalize_id(value)

    @field_validator("name", "code", mode="before")
    @classmethod
    def _blank_if_null(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("deadline", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        # MySQL DATETIME columns come back as full ISO timestamps
        if isinstance(value, str):
            return value[:10] or None
        return value

    def status_label(self) -> str:
        code = self.status_code
        if code is None and isinstance(self.status, dict):
            code = self.status.get("code")
        label = resolve_status_label(code)
        if label:
            return label
        if isinstance(self.status, str):
            return resolve_status_label(self.status) or self.status
        return "Waiting"

    def to_entity(self) -> AlbumRecord:
        last_event = None
        if self.last_event:
            raw_status = self.last_event.get("status") or self.last_event.get("type") or ""
            if isinstance(raw_status, dict):
                raw_status = raw_status.get("code") or raw_status.get("name") or ""
            last_event = LastEvent(
                status=resolve_status_label(raw_status) or str(raw_status),
                date=str(self.last_event.get("date") or self.last_event.get("createdAt") or ""),
            )
        return AlbumRecord(
            id=self.id,
            name=self.name,
            code=self.code,
            status=self.status_label(),
            department=_named(self.department),
            executor=_named(self.executor),
            customer=_named(self.customer),
            deadline=self.deadline,
            comment=self.comment,
            external_link=self.external_link or self.link,
            internal_link=self.internal_link,
            category=self.category,
            last_event=last_event,
            extra=dict(self.model_extra or {}),
        )


class AlbumEventSchema(BaseModel):
    """One history entry from ``GET .../albums/{aid}/events``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    status: Any = None
    status_code: str | None = Field(None, alias="statusCode")
    comment: str | None = None
    created_at: str | None = Field(None, alias="createdAt")
    created_by: Any = Field(None, alias="createdBy")
    source: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        return normalize_id(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    def to_entity(self) -> AlbumEvent:
        code = self.status_code
        name = ""
        if isinstance(self.status, dict):
            code = code or self.status.get("code")
            name = self.status.get("name") or ""
        elif isinstance(self.status, str):
            code = code or self.status
        return AlbumEvent(
            id=self.id,
            status_code=code or "",
            status_name=name or resolve_status_label(code) or "",
            comment=self.comment,
            created_at=self.created_at,
            created_by=_named(self.created_by) or None,
            source=self.source,
        )


class PublishStatusRequest(BaseModel):
    """Body of the status-publish endpoint: a status code or a Telegram-style alias."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: str | None = Field(None, alias="statusCode", examples=["accepted"])
    alias: str | None = Field(None, examples=["👍"])
    comment: str | None = None


class PublishStatusResponse(BaseModel):
    album_id: str
    project_id: str
    company_id: str
    status_code: str
    status_label: str
    delivered_to: int


class ChatMessageRequest(BaseModel):
    """A chat message carrying status commands, e.g. ``"АР-001, АР-002 принято"``."""

    text: str = Field(..., min_length=1, examples=["АР-001 👍"])
    # Album code -> album id for the project's albums
    albums: dict[str, Any] = Field(default_factory=dict, examples=[{"АР-001": 7}])


class ChatStatusChangeSchema(BaseModel):
    album_code: str
    album_id: str | None
    status_code: str
    alias: str
    applied: bool
    reply: str
    reaction: str | None = None
    delivered_to: int = 0


class ChatMessageResponse(BaseModel):
    changes: list[ChatStatusChangeSchema]


class StatusAliasesSchema(BaseModel):
    code: str
    label: str
    aliases: list[str]
    reaction: str
