"""Chat status commands: album codes plus a short alias, published to channel clients."""

from fastapi import APIRouter, Depends, HTTPException, status

from albumsync.application.schemas import (
    ChatMessageRequest,
    ChatMessageResponse,
    ChatStatusChangeSchema,
    StatusAliasesSchema,
)
from albumsync.application.services import StatusPublishService
from albumsync.application.services.status_aliases import aliases_for_status, reaction_emoji_for_status
from albumsync.domain.entities import AlbumStatus
from albumsync.infrastructure.dependencies import get_status_publish_service

router = APIRouter(tags=["Chat status commands"])


@router.post(
    "/companies/{company_id}/projects/{project_id}/chat-messages",
    response_model=ChatMessageResponse,
)
async def publish_chat_message(
    company_id: str,
    project_id: str,
    data: ChatMessageRequest,
    service: StatusPublishService = Depends(get_status_publish_service),
) -> ChatMessageResponse:
    """Parse a chat message and publish one status update per recognised album.

    A message without album codes or without an alias yields an empty list.
    """
    try:
        changes = await service.publish_chat_message(company_id, project_id, data.text, data.albums)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ChatMessageResponse(
        changes=[
            ChatStatusChangeSchema(
                album_code=change.command.album_code,
                album_id=change.album_id,
                status_code=change.command.status_code,
                alias=change.command.original_alias,
                applied=change.applied,
                reply=change.reply,
                reaction=change.reaction,
                delivered_to=change.delivered_to,
            )
            for change in changes
        ]
    )


@router.get("/status-aliases", response_model=list[StatusAliasesSchema])
async def list_status_aliases() -> list[StatusAliasesSchema]:
    """Aliases accepted in chat messages, grouped by status."""
    return [
        StatusAliasesSchema(
            code=s.value,
            label=s.label,
            aliases=aliases_for_status(s.value),
            reaction=reaction_emoji_for_status(s.value),
        )
        for s in AlbumStatus
    ]
