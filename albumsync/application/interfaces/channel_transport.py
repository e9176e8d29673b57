"""Abstract push-channel transport — port for persistent connection adapters."""

from abc import ABC, abstractmethod


class ChannelConnection(ABC):
    """One open, ordered, bidirectional text connection."""

    @abstractmethod
    async def send(self, text: str) -> None:
        ...

    @abstractmethod
    async def receive(self) -> str | bytes | None:
        """Wait for the next frame. Returns None once the connection is closed."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @property
    @abstractmethod
    def closed(self) -> bool:
        ...


class ChannelTransport(ABC):
    """Port — opens connections to a channel endpoint."""

    @abstractmethod
    async def connect(self, url: str) -> ChannelConnection:
        """Open a connection.

        Raises:
            ChannelConnectionError: the endpoint is unreachable or refused.
        """
        ...
