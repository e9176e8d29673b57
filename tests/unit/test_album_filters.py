"""Unit tests for table filters, summary counts and deadline indicators."""

from datetime import date

import pytest

from albumsync.application.services.album_filters import (
    ALL,
    AlbumFilter,
    AlbumSummary,
    deadline_indicator,
    department_options,
    executor_options,
    filter_albums,
    is_overdue,
    status_options,
    summarize,
)
from albumsync.domain.entities import AlbumRecord

TODAY = date(2025, 3, 10)


@pytest.fixture
def records() -> list[AlbumRecord]:
    return [
        AlbumRecord(id="1", name="Фасады", code="АР-001", status="Accepted", department="АР", executor="Ivanov", deadline=date(2025, 3, 1)),
        AlbumRecord(id="2", name="Планы", code="АР-002", status="Remarks", department="АР", executor="Petrov", deadline=date(2025, 3, 5)),
        AlbumRecord(id="3", name="Армирование", code="КР-001", status="Sent", department="КР", executor="Ivanov", deadline=date(2025, 3, 12)),
        AlbumRecord(id="4", name="Вентиляция", code="ОВ-001", status="Waiting", department="ОВ", executor="", deadline=None),
    ]


def test_no_filter_returns_everything(records):
    assert filter_albums(records) == records
    assert filter_albums(records, AlbumFilter()) == records


def test_search_matches_name_or_code_case_insensitively(records):
    assert [r.id for r in filter_albums(records, AlbumFilter(search="кр-"))] == ["3"]
    assert [r.id for r in filter_albums(records, AlbumFilter(search="  планы "))] == ["2"]


def test_drop_down_filters_combine(records):
    album_filter = AlbumFilter(department="АР", executor="Ivanov")
    assert [r.id for r in filter_albums(records, album_filter)] == ["1"]
    assert [r.id for r in filter_albums(records, AlbumFilter(status="Waiting"))] == ["4"]


def test_summary_counts(records):
    summary = summarize(records, TODAY)
    assert summary == AlbumSummary(total=4, accepted=1, in_progress=2, remarks=1, overdue=1)


def test_summary_of_nothing():
    assert summarize([], TODAY) == AlbumSummary()


def test_accepted_albums_are_never_overdue(records):
    assert not is_overdue(records[0], TODAY)
    assert is_overdue(records[1], TODAY)
    assert not is_overdue(records[3], TODAY)


@pytest.mark.parametrize(
    ("deadline", "status", "expected"),
    [
        (date(2025, 3, 9), "Sent", "red"),
        (date(2025, 3, 10), "Sent", "yellow"),
        (date(2025, 3, 13), "Sent", "yellow"),
        (date(2025, 3, 14), "Sent", "green"),
        (date(2025, 3, 1), "Accepted", "green"),
        (None, "Sent", None),
    ],
)
def test_deadline_indicator(deadline, status, expected):
    record = AlbumRecord(id="1", status=status, deadline=deadline)
    assert deadline_indicator(record, TODAY) == expected


def test_filter_options(records):
    assert department_options(records) == [ALL, "АР", "КР", "ОВ"]
    assert executor_options(records) == [ALL, "Ivanov", "Petrov"]
    assert status_options() == [ALL, "Waiting", "Upload", "Sent", "Accepted", "Remarks", "InProduction"]
