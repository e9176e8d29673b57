"""Album status publish endpoint — pushes a status change to subscribed channel clients."""

from fastapi import APIRouter, Depends, HTTPException, status

from albumsync.application.schemas import PublishStatusRequest, PublishStatusResponse
from albumsync.application.services import StatusPublishService
from albumsync.domain.exceptions import UnknownStatusError
from albumsync.infrastructure.dependencies import get_status_publish_service

router = APIRouter(
    prefix="/companies/{company_id}/projects/{project_id}/albums",
    tags=["Album status"],
)


@router.post("/{album_id}/status", response_model=PublishStatusResponse)
async def publish_album_status(
    company_id: str,
    project_id: str,
    album_id: str,
    data: PublishStatusRequest,
    service: StatusPublishService = Depends(get_status_publish_service),
) -> PublishStatusResponse:
    """Broadcast ``album_status_updated`` for one album.

    The body carries either a ``statusCode`` or an ``alias`` (emoji or word).
    """
    try:
        published = await service.publish(
            company_id,
            project_id,
            album_id,
            status_code=data.status_code,
            alias=data.alias,
            comment=data.comment,
        )
    except UnknownStatusError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PublishStatusResponse(
        album_id=published.album_id,
        project_id=published.project_id,
        company_id=published.company_id,
        status_code=published.status.value,
        status_label=published.status.label,
        delivered_to=published.delivered_to,
    )
