"""Telegram status aliases — short words and emoji that change an album's status.

Chat messages such as ``"АР-001 принято 👍"`` name one or more album codes
followed by an alias. ``parse_status_commands`` turns such text into
(album code, status code) commands.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from albumsync.domain.entities import AlbumStatus

logger = logging.getLogger(__name__)

_W = AlbumStatus.WAITING.value
_U = AlbumStatus.UPLOAD.value
_S = AlbumStatus.SENT.value
_A = AlbumStatus.ACCEPTED.value
_R = AlbumStatus.REMARKS.value
_P = AlbumStatus.PRODUCTION.value

# Scan order matters: the first alias found in a message wins.
STATUS_ALIASES: dict[str, str] = {
    # waiting
    "ожидание": _W, "ожидаем": _W, "ожидает": _W, "жду": _W, "ждем": _W, "ждёт": _W,
    "hold": _W, "pending": _W, "⏳": _W, "⏸️": _W, "⌛": _W,
    # upload
    "выгрузка": _U, "загрузка": _U, "выгрузил": _U, "загрузил": _U, "выгружаю": _U,
    "загружаю": _U, "выложил": _U, "upload": _U, "📤": _U, "⬆️": _U, "📂": _U,
    # sent
    "отправлено": _S, "отправил": _S, "отправила": _S, "отправили": _S, "отправляю": _S,
    "sent": _S, "send": _S, "отпр": _S, "готово": _S, "→": _S, "➡️": _S, "✉️": _S,
    "📧": _S, "📮": _S,
    # accepted
    "принято": _A, "принял": _A, "приняла": _A, "приняли": _A, "принимаю": _A, "ок": _A,
    "ok": _A, "окей": _A, "okay": _A, "good": _A, "норм": _A, "нормально": _A,
    "отлично": _A, "супер": _A, "да": _A, "yes": _A, "approved": _A, "+": _A, "++": _A,
    "✓": _A, "✅": _A, "👍": _A, "👌": _A, "💯": _A, "🔥": _A,
    # remarks
    "замечания": _R, "замечание": _R, "доработка": _R, "доработать": _R, "исправить": _R,
    "переделать": _R, "правки": _R, "корректировка": _R, "нет": _R, "no": _R, "не": _R,
    "отклонено": _R, "rejected": _R, "remarks": _R, "!": _R, "!!": _R, "!!!": _R,
    "-": _R, "--": _R, "❌": _R, "⚠️": _R, "⛔": _R, "🚫": _R, "👎": _R, "🔴": _R,
    # production
    "производство": _P, "впроизводстве": _P, "впроизводство": _P, "производим": _P,
    "делаем": _P, "работаем": _P, "production": _P, "prod": _P, "wip": _P, "🏭": _P,
    "⚙️": _P, "🔧": _P, "⚡": _P,
}

# АР-001, АР001, КР1, OVVK-123, КР-1
ALBUM_CODE_PATTERN = re.compile(r"(?<!\w)([A-ZА-ЯЁ]{2,4}-?\d{1,4})(?!\w)", re.IGNORECASE)

_STATUS_EMOJI = {_W: "⏳", _U: "📤", _S: "✉️", _A: "✅", _R: "⚠️", _P: "🏭"}
_STATUS_NAMES = {
    _W: "Ожидание",
    _U: "Выгрузка",
    _S: "Отправлено",
    _A: "Принято",
    _R: "Замечания",
    _P: "В производстве",
}
# Only emoji accepted by the Bot API as message reactions
_REACTIONS = {_W: "👀", _U: "🔥", _S: "✍", _A: "👍", _R: "🤔", _P: "🏆"}


@dataclass(frozen=True)
class StatusChangeCommand:
    album_code: str
    status_code: str
    original_alias: str


@lru_cache(maxsize=None)
def _alias_pattern(alias: str) -> re.Pattern[str]:
    escaped = re.escape(alias)
    if all(ch.isalnum() for ch in alias):
        return re.compile(rf"(?<!\w){escaped}(?!\w)")
    if alias.isascii():
        # "+", "!!", "-" only count as standalone tokens
        return re.compile(rf"(?<!\S){escaped}(?!\S)")
    return re.compile(escaped)


def find_status_alias(text: str) -> tuple[str, str] | None:
    """First (alias, status code) present in ``text``, in table order."""
    normalized = text.lower().strip()
    for alias, status_code in STATUS_ALIASES.items():
        if _alias_pattern(alias).search(normalized):
            return alias, status_code
    return None


def parse_status_commands(
    text: str,
    valid_album_codes: list[str] | set[str] | None = None,
) -> list[StatusChangeCommand]:
    """Extract status-change commands from a chat message.

    Every distinct album code in the text gets the same status: the first
    alias found once the codes themselves are removed from the text. When
    ``valid_album_codes`` is given, other codes are skipped.
    """
    codes: list[str] = []
    for match in ALBUM_CODE_PATTERN.finditer(text):
        code = match.group(1).upper()
        if code not in codes:
            codes.append(code)

    if valid_album_codes is not None:
        allowed = {c.upper() for c in valid_album_codes}
        codes = [c for c in codes if c in allowed]

    if not codes:
        logger.debug("No album codes in message %r", text)
        return []

    remainder = ALBUM_CODE_PATTERN.sub(" ", text)
    found = find_status_alias(remainder)
    if found is None:
        logger.debug("No status alias for albums %s in message %r", codes, text)
        return []

    alias, status_code = found
    return [StatusChangeCommand(album_code=c, status_code=status_code, original_alias=alias) for c in codes]


def get_status_by_alias(alias: str) -> str | None:
    """Status code for an exact alias (case-insensitive), or for a bare status code."""
    key = alias.strip().lower()
    if key in STATUS_ALIASES:
        return STATUS_ALIASES[key]
    try:
        return AlbumStatus(key).value
    except ValueError:
        return None


def aliases_for_status(status_code: str) -> list[str]:
    return [alias for alias, code in STATUS_ALIASES.items() if code == status_code]


def format_status_change_response(album_code: str, status_code: str, success: bool) -> str:
    """Bot reply text after a status change attempt."""
    if not success:
        return f"❌ Не удалось изменить статус альбома {album_code}"
    emoji = _STATUS_EMOJI.get(status_code, "📋")
    name = _STATUS_NAMES.get(status_code, status_code)
    return f"{emoji} Альбом {album_code} → {name}"


def reaction_emoji_for_status(status_code: str) -> str:
    return _REACTIONS.get(status_code, "👌")
