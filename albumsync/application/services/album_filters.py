"""Derived table views — filtering, summary counts and deadline indicators.

Everything here is a pure function of the current projection; callers simply
recompute after any change instead of caching results.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from albumsync.domain.entities import AlbumRecord, AlbumStatus

ALL = "all"

_ACCEPTED = AlbumStatus.ACCEPTED.label
_REMARKS = AlbumStatus.REMARKS.label


@dataclass(frozen=True)
class AlbumFilter:
    """Toolbar filter state; ``"all"`` disables a drop-down filter."""

    search: str = ""
    department: str = ALL
    executor: str = ALL
    status: str = ALL

    def matches(self, record: AlbumRecord) -> bool:
        query = self.search.strip().lower()
        if query and query not in record.name.lower() and query not in record.code.lower():
            return False
        if self.department != ALL and record.department != self.department:
            return False
        if self.executor != ALL and record.executor != self.executor:
            return False
        if self.status != ALL and record.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class AlbumSummary:
    total: int = 0
    accepted: int = 0
    in_progress: int = 0
    remarks: int = 0
    overdue: int = 0


def filter_albums(records: Iterable[AlbumRecord], album_filter: AlbumFilter | None = None) -> list[AlbumRecord]:
    if album_filter is None:
        return list(records)
    return [r for r in records if album_filter.matches(r)]


def is_overdue(record: AlbumRecord, today: date | None = None) -> bool:
    if record.deadline is None or record.status == _ACCEPTED:
        return False
    return record.deadline < (today or date.today())


def summarize(records: Iterable[AlbumRecord], today: date | None = None) -> AlbumSummary:
    """Counts shown above the table for the currently visible rows."""
    today = today or date.today()
    total = accepted = in_progress = remarks = overdue = 0
    for record in records:
        total += 1
        if record.status == _ACCEPTED:
            accepted += 1
        elif record.status == _REMARKS:
            remarks += 1
        else:
            in_progress += 1
        if is_overdue(record, today):
            overdue += 1
    return AlbumSummary(
        total=total,
        accepted=accepted,
        in_progress=in_progress,
        remarks=remarks,
        overdue=overdue,
    )


def _options(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return [ALL, *seen]


def department_options(records: Iterable[AlbumRecord]) -> list[str]:
    return _options(r.department for r in records)


def executor_options(records: Iterable[AlbumRecord]) -> list[str]:
    return _options(r.executor for r in records)


def status_options() -> list[str]:
    return [ALL, *(s.label for s in AlbumStatus)]


def deadline_indicator(record: AlbumRecord, today: date | None = None) -> str | None:
    """Traffic-light colour for the deadline cell: green, yellow (≤ 3 days) or red."""
    if record.status == _ACCEPTED:
        return "green"
    if record.deadline is None:
        return None
    days_left = (record.deadline - (today or date.today())).days
    if days_left < 0:
        return "red"
    if days_left <= 3:
        return "yellow"
    return "green"
