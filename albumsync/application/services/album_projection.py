"""Local projection — keyed in-memory mirror of a project's albums plus per-row edit buffers."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from albumsync.domain.entities import AlbumRecord, normalize_id, utc_now_iso
from albumsync.domain.exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)

# Fields owned by the push reconciler; edit buffers never override them on render
RECONCILED_FIELDS = frozenset({"status", "last_event"})

ChangeListener = Callable[[], None]


class AlbumProjection:
    """Confirmed album records keyed by canonical id, and a separate edit-buffer map.

    The confirmed map mirrors server state (bulk load, push updates, CRUD
    confirmations). The edit buffer holds staged keystrokes for rows in edit
    mode. Rendering merges the two, so a push that lands mid-edit neither
    discards the draft nor waits for it.
    """

    def __init__(self, records: Iterable[AlbumRecord] = ()) -> None:
        self._records: dict[str, AlbumRecord] = {}
        self._edit_buffer: dict[str, dict[str, Any]] = {}
        self._listeners: list[ChangeListener] = []
        self.version = 0
        for record in records:
            self._records[normalize_id(record.id)] = record

    # ── Change notification ──────────────────────────────────────────

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        self.version += 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Projection change listener failed")

    # ── Confirmed records ────────────────────────────────────────────

    def load(self, records: Iterable[AlbumRecord]) -> None:
        """Replace the whole projection with a fresh bulk load."""
        self._records = {normalize_id(r.id): r for r in records}
        self._edit_buffer.clear()
        logger.debug("Projection loaded with %d albums", len(self._records))
        self._changed()

    def get(self, album_id: Any) -> AlbumRecord | None:
        return self._records.get(normalize_id(album_id))

    def records(self) -> list[AlbumRecord]:
        return list(self._records.values())

    def ids(self) -> list[str]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, album_id: object) -> bool:
        try:
            return normalize_id(album_id) in self._records
        except ValueError:
            return False

    def upsert(self, record: AlbumRecord) -> None:
        """Store a server-confirmed record (CRUD create/update result)."""
        key = normalize_id(record.id)
        self._records[key] = record
        self._changed()

    def remove(self, album_id: Any) -> bool:
        key = normalize_id(album_id)
        removed = self._records.pop(key, None) is not None
        self._edit_buffer.pop(key, None)
        if removed:
            self._changed()
        return removed

    def set_status(self, album_id: Any, label: str, timestamp: str | None = None) -> AlbumRecord | None:
        """Write ``status`` and ``last_event`` on one record, leaving every other field as is.

        Returns the updated record, or None when the album is not in the
        projection (no synthetic record is inserted).
        """
        key = normalize_id(album_id)
        current = self._records.get(key)
        if current is None:
            return None
        updated = current.with_status(label, timestamp or utc_now_iso())
        self._records[key] = updated
        self._changed()
        return updated

    # ── Edit buffer ──────────────────────────────────────────────────

    def stage_edit(self, album_id: Any, **changes: Any) -> dict[str, Any]:
        """Stage field edits for a row, entering edit mode for it if needed."""
        key = normalize_id(album_id)
        if key not in self._records:
            raise EntityNotFoundError("Album", key)
        buffer = self._edit_buffer.setdefault(key, {})
        buffer.update(changes)
        self._changed()
        return dict(buffer)

    def edit_buffer(self, album_id: Any) -> dict[str, Any]:
        return dict(self._edit_buffer.get(normalize_id(album_id), {}))

    def is_editing(self, album_id: Any) -> bool:
        return normalize_id(album_id) in self._edit_buffer

    def pending_edits(self) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in self._edit_buffer.items()}

    def discard_edit(self, album_id: Any) -> None:
        if self._edit_buffer.pop(normalize_id(album_id), None) is not None:
            self._changed()

    def take_edit(self, album_id: Any) -> dict[str, Any]:
        """Remove and return a row's staged edits, ready to be sent to the backend.

        The confirmed record is not touched; the caller stores the
        server's answer with ``upsert`` once the save succeeds.
        """
        changes = self._edit_buffer.pop(normalize_id(album_id), {})
        if changes:
            self._changed()
        return changes

    # ── Render ───────────────────────────────────────────────────────

    def rendered(self, album_id: Any) -> AlbumRecord | None:
        """Confirmed record merged with its edit-buffer overrides."""
        key = normalize_id(album_id)
        record = self._records.get(key)
        if record is None:
            return None
        return self._merge(record, self._edit_buffer.get(key))

    def rendered_records(self) -> list[AlbumRecord]:
        return [self._merge(r, self._edit_buffer.get(k)) for k, r in self._records.items()]

    @staticmethod
    def _merge(record: AlbumRecord, overrides: dict[str, Any] | None) -> AlbumRecord:
        if not overrides:
            return record
        # Confirmed status wins over anything staged under a status key
        staged = {k: v for k, v in overrides.items() if k not in RECONCILED_FIELDS}
        return record.merged(staged)
