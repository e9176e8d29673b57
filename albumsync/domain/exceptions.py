"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class AlbumApiError(Exception):
    """Raised when the backend request/response API returns an error."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"[album-api] {status_code}: {message}")


class MalformedMessageError(Exception):
    """Raised when a push frame cannot be decoded into a known envelope."""

    def __init__(self, reason: str, raw: str | bytes | None = None):
        self.reason = reason
        self.raw = raw
        super().__init__(f"Malformed channel message: {reason}")


class UnknownStatusError(Exception):
    """Raised when a status code or alias is outside the closed status set."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown album status '{value}'")


class ChannelConnectionError(Exception):
    """Raised by a channel transport when the connection cannot be opened."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"Could not connect to {url}: {message}")
