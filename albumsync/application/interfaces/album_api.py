"""Abstract album API interface — port for the backend request/response service."""

from abc import ABC, abstractmethod

from albumsync.domain.entities import AlbumEvent, AlbumRecord


class AlbumApi(ABC):
    """Port — the two read endpoints the table view depends on.

    Album CRUD lives behind the same backend but is not needed here.
    """

    @abstractmethod
    async def list_albums(
        self,
        company_id: str,
        project_id: str,
        *,
        category: str | None = None,
    ) -> list[AlbumRecord]:
        """Bulk-load every album of a project."""
        ...

    @abstractmethod
    async def get_album_events(
        self,
        company_id: str,
        project_id: str,
        album_id: str,
    ) -> list[AlbumEvent]:
        """Fetch an album's status history, most recent first."""
        ...
