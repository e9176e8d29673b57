"""Backend album API client — implements the AlbumApi interface over httpx."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from albumsync.application.interfaces import AlbumApi
from albumsync.application.schemas.album import AlbumEventSchema, AlbumSchema
from albumsync.domain.entities import AlbumEvent, AlbumRecord, normalize_id
from albumsync.domain.exceptions import AlbumApiError

logger = logging.getLogger(__name__)


class HttpAlbumApiClient(AlbumApi):
    """Infrastructure adapter — reads albums and their history from the backend.

    Accepts an injected ``httpx.AsyncClient`` (shared pool or a mock
    transport in tests); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._http_client = http_client

    def _get_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "ngrok-skip-browser-warning": "true",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.get(url, headers=self._get_headers(), params=params)
        except httpx.HTTPError as exc:
            # status 0: no HTTP response at all
            raise AlbumApiError(status_code=0, message=str(exc) or type(exc).__name__) from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            self._raise_api_error(response)
        try:
            return response.json()
        except ValueError as exc:
            raise AlbumApiError(status_code=response.status_code, message=f"Invalid JSON: {exc}") from exc

    @staticmethod
    def _items(data: Any, key: str) -> list[Any]:
        """Accept either a bare list or a ``{"success": .., key: [...]}`` wrapper."""
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            if data.get("success") is False:
                raise AlbumApiError(status_code=200, message=str(data.get("error") or "Request failed"))
            items = data.get(key, data.get("data", []))
            if isinstance(items, list):
                return items
        raise AlbumApiError(status_code=200, message=f"Unexpected response shape for '{key}'")

    async def list_albums(
        self,
        company_id: str,
        project_id: str,
        *,
        category: str | None = None,
    ) -> list[AlbumRecord]:
        path = f"/companies/{normalize_id(company_id)}/projects/{normalize_id(project_id)}/albums"
        params = {"category": category} if category else None
        data = await self._get_json(path, params)

        albums: list[AlbumRecord] = []
        for item in self._items(data, "albums"):
            try:
                albums.append(AlbumSchema.model_validate(item).to_entity())
            except ValidationError as exc:
                logger.warning("Skipping album row that failed validation: %s", exc)
        return albums

    async def get_album_events(
        self,
        company_id: str,
        project_id: str,
        album_id: str,
    ) -> list[AlbumEvent]:
        path = (
            f"/companies/{normalize_id(company_id)}/projects/{normalize_id(project_id)}"
            f"/albums/{normalize_id(album_id)}/events"
        )
        data = await self._get_json(path)

        events: list[AlbumEvent] = []
        for item in self._items(data, "events"):
            try:
                events.append(AlbumEventSchema.model_validate(item).to_entity())
            except ValidationError as exc:
                logger.warning("Skipping album event that failed validation: %s", exc)
        return events

    def _raise_api_error(self, response: httpx.Response) -> None:
        """Raise AlbumApiError from a non-200 httpx Response."""
        try:
            data = response.json()
            message = data.get("error") or data.get("details") or response.text
        except Exception:
            message = response.text

        raise AlbumApiError(status_code=response.status_code, message=str(message))
