"""Pydantic envelopes for the event channel — push frames in, subscribe/ping frames out.

Every frame is a JSON object with a ``type`` discriminator. Known types are
validated into their model; any other type parses to ``UnknownMessage`` so
new server-side message kinds are ignored rather than treated as errors.
"""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from albumsync.domain.entities import normalize_id
from albumsync.domain.exceptions import MalformedMessageError


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> str:
        return json.dumps(self.model_dump(by_alias=True, exclude_none=True))


def _normalize_optional_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return normalize_id(value)


# ── Server → client ──────────────────────────────────────────────────


class AlbumStatusData(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # Left untyped: any non-code value is rejected later as an unknown status
    status_code: Any = Field(None, alias="statusCode")


class AlbumStatusUpdated(_Envelope):
    type: Literal["album_status_updated"]
    album_id: str = Field(alias="albumId")
    project_id: str = Field(alias="projectId")
    company_id: str | None = Field(None, alias="companyId")
    data: AlbumStatusData = Field(default_factory=AlbumStatusData)
    timestamp: str | None = None

    @field_validator("album_id", "project_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> str:
        return normalize_id(value)

    @field_validator("company_id", mode="before")
    @classmethod
    def _normalize_company(cls, value: Any) -> str | None:
        return _normalize_optional_id(value)


class ProjectUpdated(_Envelope):
    type: Literal["project_updated"]
    project_id: str = Field(alias="projectId")
    company_id: str | None = Field(None, alias="companyId")
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: str | None = None

    @field_validator("project_id", mode="before")
    @classmethod
    def _normalize_project(cls, value: Any) -> str:
        return normalize_id(value)

    @field_validator("company_id", mode="before")
    @classmethod
    def _normalize_company(cls, value: Any) -> str | None:
        return _normalize_optional_id(value)


class Connected(_Envelope):
    type: Literal["connected"]
    client_id: str | None = Field(None, alias="clientId")
    message: str | None = None


class Pong(_Envelope):
    type: Literal["pong"]


class UnknownMessage(BaseModel):
    """Any frame whose ``type`` this client does not handle."""

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


PushMessage = Annotated[
    Union[AlbumStatusUpdated, ProjectUpdated, Connected, Pong],
    Field(discriminator="type"),
]

_PUSH_ADAPTER: TypeAdapter[Any] = TypeAdapter(PushMessage)
_PUSH_TYPES = frozenset({"album_status_updated", "project_updated", "connected", "pong"})


# ── Client → server ──────────────────────────────────────────────────


class SubscribeMessage(_Envelope):
    type: Literal["subscribe"] = "subscribe"
    project_id: str | None = Field(None, alias="projectId")
    company_id: str | None = Field(None, alias="companyId")
    user_id: str | None = Field(None, alias="userId")

    @field_validator("project_id", "company_id", "user_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value: Any) -> str | None:
        return _normalize_optional_id(value)


class PingMessage(_Envelope):
    type: Literal["ping"] = "ping"


ClientMessage = Annotated[
    Union[SubscribeMessage, PingMessage],
    Field(discriminator="type"),
]

_CLIENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(ClientMessage)
_CLIENT_TYPES = frozenset({"subscribe", "ping"})


# ── Decoding ─────────────────────────────────────────────────────────


def _decode_object(raw: str | bytes) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedMessageError(f"invalid JSON ({exc})", raw) from exc
    if not isinstance(payload, dict):
        raise MalformedMessageError("frame is not a JSON object", raw)
    msg_type = payload.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        raise MalformedMessageError("missing 'type' discriminator", raw)
    return payload


def parse_push_message(
    raw: str | bytes,
) -> AlbumStatusUpdated | ProjectUpdated | Connected | Pong | UnknownMessage:
    """Decode one server frame.

    Raises:
        MalformedMessageError: the frame is not JSON, not an object, has no
            type, or a known type fails validation.
    """
    payload = _decode_object(raw)
    if payload["type"] not in _PUSH_TYPES:
        return UnknownMessage(type=payload["type"], payload=payload)
    try:
        return _PUSH_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise MalformedMessageError(f"invalid {payload['type']} payload: {exc}", raw) from exc


def parse_client_message(raw: str | bytes) -> SubscribeMessage | PingMessage | UnknownMessage:
    """Decode one client frame received by the server-side hub."""
    payload = _decode_object(raw)
    if payload["type"] not in _CLIENT_TYPES:
        return UnknownMessage(type=payload["type"], payload=payload)
    try:
        return _CLIENT_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise MalformedMessageError(f"invalid {payload['type']} payload: {exc}", raw) from exc
