"""Album table view — owns the projection, history cache and channel for one mounted view."""

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from albumsync.application.interfaces import AlbumApi
from albumsync.application.schemas.channel_messages import AlbumStatusUpdated
from albumsync.application.services.album_filters import (
    AlbumFilter,
    AlbumSummary,
    filter_albums,
    summarize,
)
from albumsync.application.services.album_projection import AlbumProjection
from albumsync.application.services.event_channel import EventChannel, StatusUpdateHandler
from albumsync.application.services.event_history_cache import EventHistoryCache
from albumsync.application.services.projection_reconciler import ProjectionReconciler
from albumsync.domain.entities import AlbumEvent, AlbumRecord, normalize_id
from albumsync.domain.exceptions import AlbumApiError

logger = logging.getLogger(__name__)

# (company_id, project_id, on_status_update) -> unopened channel
ChannelFactory = Callable[[str, str, StatusUpdateHandler], EventChannel]


class AlbumTableView:
    """Lifetime owner of a project's live album table.

    ``mount`` bulk-loads the albums and opens a scoped channel; ``unmount``
    closes the channel and discards every piece of local state. Errors from
    the backend or the channel are logged and contained here.

    Usage:
        async with AlbumTableView(cid, pid, api=api, channel_factory=factory) as view:
            rows = view.visible_rows(AlbumFilter(status="Accepted"))
    """

    def __init__(
        self,
        company_id: Any,
        project_id: Any,
        *,
        api: AlbumApi,
        channel_factory: ChannelFactory | None = None,
    ) -> None:
        self._company_id = normalize_id(company_id)
        self._project_id = normalize_id(project_id)
        self._api = api
        self._channel_factory = channel_factory
        self._channel: EventChannel | None = None
        self._reconciler: ProjectionReconciler | None = None
        self.load_error: str | None = None

    async def __aenter__(self) -> "AlbumTableView":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.unmount()

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def is_mounted(self) -> bool:
        return self._reconciler is not None

    @property
    def channel(self) -> EventChannel | None:
        return self._channel

    @property
    def reconciler(self) -> ProjectionReconciler:
        if self._reconciler is None:
            raise RuntimeError("Album table view is not mounted")
        return self._reconciler

    @property
    def projection(self) -> AlbumProjection:
        return self.reconciler.projection

    # ── Lifecycle ────────────────────────────────────────────────────

    async def mount(self) -> None:
        if self._reconciler is not None:
            return
        projection = AlbumProjection()
        cache = EventHistoryCache(self._fetch_history)
        self._reconciler = ProjectionReconciler(self._project_id, projection, cache)
        self.load_error = None

        try:
            albums = await self._api.list_albums(self._company_id, self._project_id)
        except AlbumApiError as exc:
            self.load_error = exc.message
            logger.error("Failed to load albums for project %s: %s", self._project_id, exc)
        except Exception as exc:
            self.load_error = str(exc)
            logger.exception("Failed to load albums for project %s", self._project_id)
        else:
            projection.load(albums)
            logger.info("Loaded %d albums for project %s", len(albums), self._project_id)

        if self._channel_factory is not None:
            self._channel = self._channel_factory(
                self._company_id, self._project_id, self.on_push
            )
            if not await self._channel.open():
                logger.warning(
                    "Live updates unavailable for project %s; showing the initial load",
                    self._project_id,
                )

    async def unmount(self) -> None:
        if self._channel is not None:
            try:
                await self._channel.close()
            except Exception:
                logger.exception("Failed to close event channel")
            self._channel = None
        self._reconciler = None

    async def change_scope(self, company_id: Any, project_id: Any) -> None:
        """Re-mount against another (company, project) pair."""
        company_id = normalize_id(company_id)
        project_id = normalize_id(project_id)
        if (company_id, project_id) == (self._company_id, self._project_id) and self.is_mounted:
            return
        await self.unmount()
        self._company_id = company_id
        self._project_id = project_id
        await self.mount()

    # ── Channel callback ─────────────────────────────────────────────

    def on_push(self, message: AlbumStatusUpdated) -> None:
        if self._reconciler is None:
            return
        try:
            self._reconciler.handle_push(message)
        except Exception:
            logger.exception("Failed to apply status update for album %s", message.album_id)

    # ── Hover ────────────────────────────────────────────────────────

    async def _fetch_history(self, album_id: str) -> list[AlbumEvent]:
        return await self._api.get_album_events(self._company_id, self._project_id, album_id)

    async def load_event_history(self, album_id: Any) -> list[AlbumEvent] | None:
        """History for the hovered row, or None when it cannot be loaded."""
        if self._reconciler is None:
            return None
        try:
            return await self._reconciler.load_event_history(album_id)
        except AlbumApiError as exc:
            logger.warning("Could not load history for album %s: %s", album_id, exc)
        except Exception:
            logger.exception("Could not load history for album %s", album_id)
        return None

    # ── Derived views ────────────────────────────────────────────────

    def visible_rows(self, album_filter: AlbumFilter | None = None) -> list[AlbumRecord]:
        """Rows after filtering, with any edit-buffer drafts applied."""
        projection = self.projection
        keep = {normalize_id(r.id) for r in filter_albums(projection.records(), album_filter)}
        return [r for r in projection.rendered_records() if normalize_id(r.id) in keep]

    def summary(self, album_filter: AlbumFilter | None = None, today: date | None = None) -> AlbumSummary:
        return summarize(filter_albums(self.projection.records(), album_filter), today)
