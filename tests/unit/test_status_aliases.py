"""Unit tests for chat status aliases."""

import pytest

from albumsync.application.services.status_aliases import (
    STATUS_ALIASES,
    aliases_for_status,
    find_status_alias,
    format_status_change_response,
    get_status_by_alias,
    parse_status_commands,
    reaction_emoji_for_status,
)
from albumsync.domain.entities import AlbumStatus


def test_every_alias_maps_into_closed_set():
    codes = {s.value for s in AlbumStatus}
    assert set(STATUS_ALIASES.values()) <= codes


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("АР-001 принято", "accepted"),
        ("АР-001 👍", "accepted"),
        ("КР1 замечания по узлам", "remarks"),
        ("OVVK-123 в работе, wip", "production"),
        ("АР-002 отправил заказчику", "sent"),
        ("АР-003 +", "accepted"),
        ("АР-003 ⏳", "waiting"),
    ],
)
def test_parse_single_command(text, expected):
    commands = parse_status_commands(text)
    assert len(commands) == 1
    assert commands[0].status_code == expected


def test_parse_multiple_codes_share_one_status():
    commands = parse_status_commands("ар-001, АР-002 и АР-001 принято")
    assert [c.album_code for c in commands] == ["АР-001", "АР-002"]
    assert {c.status_code for c in commands} == {"accepted"}
    assert commands[0].original_alias == "принято"


def test_hyphen_in_code_is_not_a_remarks_alias():
    commands = parse_status_commands("АР-001 ок")
    assert commands[0].status_code == "accepted"


def test_word_aliases_need_word_boundaries():
    assert find_status_alias("задание выдано") is None
    # "норм" must not match as a prefix of "нормально"
    assert find_status_alias("всё нормально") == ("нормально", "accepted")


def test_valid_codes_restrict_the_result():
    commands = parse_status_commands("АР-001 АР-009 принято", valid_album_codes={"ар-001"})
    assert [c.album_code for c in commands] == ["АР-001"]


def test_text_without_code_or_alias_gives_nothing():
    assert parse_status_commands("принято") == []
    assert parse_status_commands("АР-001 посмотрите пожалуйста") == []
    assert parse_status_commands("привет") == []
    assert parse_status_commands("КР-1 ✅")[0].status_code == "accepted"


def test_get_status_by_alias():
    assert get_status_by_alias("👍") == "accepted"
    assert get_status_by_alias(" ОК ") == "accepted"
    assert get_status_by_alias("production") == "production"
    assert get_status_by_alias("maybe") is None


def test_aliases_for_status():
    aliases = aliases_for_status("upload")
    assert "выгрузка" in aliases
    assert "принято" not in aliases


def test_response_text_and_reactions():
    assert format_status_change_response("АР-001", "accepted", True) == "✅ Альбом АР-001 → Принято"
    assert format_status_change_response("АР-001", "accepted", False).startswith("❌")
    assert reaction_emoji_for_status("remarks") == "🤔"
    assert reaction_emoji_for_status("unknown") == "👌"
