"""Application service (use case) for publishing album status changes to channel clients."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from albumsync.application.services.channel_hub import ChannelHub
from albumsync.application.services.status_aliases import (
    StatusChangeCommand,
    format_status_change_response,
    get_status_by_alias,
    parse_status_commands,
    reaction_emoji_for_status,
)
from albumsync.domain.entities import AlbumStatus, normalize_id
from albumsync.domain.exceptions import UnknownStatusError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedStatus:
    album_id: str
    project_id: str
    company_id: str
    status: AlbumStatus
    delivered_to: int


@dataclass(frozen=True)
class ChatStatusChange:
    """Outcome of one command found in a chat message."""

    command: StatusChangeCommand
    album_id: str | None
    reply: str
    reaction: str | None = None
    delivered_to: int = 0

    @property
    def applied(self) -> bool:
        return self.album_id is not None


class StatusPublishService:
    """Resolves a status code or alias and fans it out through the hub."""

    def __init__(self, hub: ChannelHub):
        self._hub = hub

    @staticmethod
    def resolve_status(status_code: str | None = None, alias: str | None = None) -> AlbumStatus:
        if status_code:
            try:
                return AlbumStatus(status_code.strip().lower())
            except ValueError:
                raise UnknownStatusError(status_code) from None
        if alias:
            resolved = get_status_by_alias(alias)
            if resolved is None:
                raise UnknownStatusError(alias)
            return AlbumStatus(resolved)
        raise UnknownStatusError("")

    async def publish(
        self,
        company_id: Any,
        project_id: Any,
        album_id: Any,
        *,
        status_code: str | None = None,
        alias: str | None = None,
        comment: str | None = None,
    ) -> PublishedStatus:
        status = self.resolve_status(status_code, alias)
        data: dict[str, Any] = {"statusCode": status.value, "statusName": status.label}
        if comment:
            data["comment"] = comment

        delivered = await self._hub.broadcast_album_status_update(
            album_id, project_id, company_id, data
        )
        return PublishedStatus(
            album_id=normalize_id(album_id),
            project_id=normalize_id(project_id),
            company_id=normalize_id(company_id),
            status=status,
            delivered_to=delivered,
        )

    async def publish_chat_message(
        self,
        company_id: Any,
        project_id: Any,
        text: str,
        album_ids: Mapping[str, Any],
    ) -> list[ChatStatusChange]:
        """Apply every status command in a chat message such as ``"АР-001, АР-002 👍"``.

        ``album_ids`` maps album codes of the project to album ids. Codes
        that are not in it get a failure reply and nothing is broadcast
        for them. The message text travels as the status comment.
        """
        known = {str(code).strip().upper(): normalize_id(album_id) for code, album_id in album_ids.items()}
        changes: list[ChatStatusChange] = []
        for command in parse_status_commands(text):
            album_id = known.get(command.album_code)
            if album_id is None:
                logger.info("Chat command for unknown album %s in project %s", command.album_code, project_id)
                changes.append(
                    ChatStatusChange(
                        command=command,
                        album_id=None,
                        reply=format_status_change_response(command.album_code, command.status_code, False),
                    )
                )
                continue

            published = await self.publish(
                company_id,
                project_id,
                album_id,
                status_code=command.status_code,
                comment=text,
            )
            changes.append(
                ChatStatusChange(
                    command=command,
                    album_id=album_id,
                    reply=format_status_change_response(command.album_code, command.status_code, True),
                    reaction=reaction_emoji_for_status(command.status_code),
                    delivered_to=published.delivered_to,
                )
            )
        return changes
