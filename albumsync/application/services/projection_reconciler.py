"""Projection reconciler — applies pushed status changes to the local projection."""

import logging
from typing import Any

from albumsync.application.schemas.channel_messages import AlbumStatusUpdated
from albumsync.application.services.album_projection import AlbumProjection
from albumsync.application.services.event_history_cache import EventHistoryCache
from albumsync.domain.entities import AlbumEvent, AlbumRecord, normalize_id, resolve_status_label

logger = logging.getLogger(__name__)


class ProjectionReconciler:
    """Merges ``album_status_updated`` pushes into one project's projection.

    A push only ever rewrites ``status`` and ``last_event`` of an album that
    is already loaded, and always drops that album's cached history. Unknown
    status codes and unknown album ids are no-ops for the projection.
    """

    def __init__(
        self,
        project_id: Any,
        projection: AlbumProjection,
        history_cache: EventHistoryCache,
    ) -> None:
        self._project_id = normalize_id(project_id)
        self._projection = projection
        self._history = history_cache
        self.applied_count = 0
        self.ignored_count = 0

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def projection(self) -> AlbumProjection:
        return self._projection

    @property
    def history_cache(self) -> EventHistoryCache:
        return self._history

    def handle_push(self, message: AlbumStatusUpdated) -> AlbumRecord | None:
        """Scope-check a pushed message, then apply it."""
        if message.project_id != self._project_id:
            self.ignored_count += 1
            logger.debug(
                "Ignoring status update for album %s of project %s (view is project %s)",
                message.album_id,
                message.project_id,
                self._project_id,
            )
            return None
        return self.apply_status_update(
            message.album_id,
            message.project_id,
            message.data.status_code,
            message.timestamp,
        )

    def apply_status_update(
        self,
        album_id: Any,
        project_id: Any,
        status_code: Any,
        timestamp: str | None = None,
    ) -> AlbumRecord | None:
        """Apply one status change; the caller has already filtered by project.

        Returns the updated record, or None when nothing in the projection
        changed.
        """
        key = normalize_id(album_id)
        self._history.evict(key)

        label = resolve_status_label(status_code)
        if label is None:
            self.ignored_count += 1
            logger.warning(
                "Unknown status code %r for album %s (project %s); keeping previous status",
                status_code,
                key,
                project_id,
            )
            return None

        updated = self._projection.set_status(key, label, timestamp)
        if updated is None:
            self.ignored_count += 1
            logger.debug("Album %s is not loaded in this view; status update skipped", key)
            return None

        self.applied_count += 1
        logger.info("Album %s → %s", key, label)
        return updated

    async def load_event_history(self, album_id: Any) -> list[AlbumEvent]:
        """Hover-triggered history load, served from cache when present."""
        return await self._history.load(album_id)
