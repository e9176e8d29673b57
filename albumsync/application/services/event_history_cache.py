"""Per-album event history cache — lazily filled on hover, evicted on push."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from albumsync.domain.entities import AlbumEvent, normalize_id

logger = logging.getLogger(__name__)

HistoryFetcher = Callable[[str], Awaitable[list[AlbumEvent]]]


class EventHistoryCache:
    """Maps album id to its fetched history list.

    Entries are never merged: a push for an album removes its entry so the
    next hover fetches again. Concurrent loads for the same id may both hit
    the network; whichever finishes writes the same key.
    """

    def __init__(self, fetcher: HistoryFetcher) -> None:
        self._fetcher = fetcher
        self._entries: dict[str, list[AlbumEvent]] = {}
        # Bumped on every eviction so a fetch started before it cannot
        # repopulate the entry with pre-eviction history.
        self._generations: dict[str, int] = {}
        # Bumped by clear(); invalidates every fetch in flight at that moment
        self._epoch = 0
        self.fetch_count = 0

    def get(self, album_id: Any) -> list[AlbumEvent] | None:
        return self._entries.get(normalize_id(album_id))

    def __contains__(self, album_id: object) -> bool:
        try:
            return normalize_id(album_id) in self._entries
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._entries)

    async def load(self, album_id: Any) -> list[AlbumEvent]:
        """Return cached history, fetching it on a miss.

        Fetch errors propagate and leave the cache untouched.
        """
        key = normalize_id(album_id)
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        stamp = self._stamp(key)
        self.fetch_count += 1
        events = await self._fetcher(key)

        if self._stamp(key) == stamp:
            self._entries[key] = events
        else:
            logger.debug("History for album %s was invalidated mid-fetch; not caching", key)
        return events

    def _stamp(self, key: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(key, 0)

    def evict(self, album_id: Any) -> bool:
        key = normalize_id(album_id)
        self._generations[key] = self._generations.get(key, 0) + 1
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        self._epoch += 1
