"""aiohttp websocket transport — implements the ChannelTransport interface."""

import asyncio
import logging

from aiohttp import ClientSession, ClientTimeout, ClientWebSocketResponse, WSMsgType, client_exceptions

from albumsync.application.interfaces import ChannelConnection, ChannelTransport
from albumsync.domain.exceptions import ChannelConnectionError

logger = logging.getLogger(__name__)

_CLOSE_TYPES = frozenset({WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED})


class AiohttpChannelConnection(ChannelConnection):
    """One open websocket; control frames are answered by aiohttp itself."""

    def __init__(
        self,
        url: str,
        ws: ClientWebSocketResponse,
        session: ClientSession,
        owns_session: bool,
    ) -> None:
        self._url = url
        self._ws = ws
        self._session = session
        self._owns_session = owns_session

    @property
    def closed(self) -> bool:
        return self._ws.closed

    async def send(self, text: str) -> None:
        await self._ws.send_str(text)

    async def receive(self) -> str | bytes | None:
        while True:
            msg = await self._ws.receive()
            if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                return msg.data
            if msg.type in _CLOSE_TYPES:
                await self._release_session()
                return None
            if msg.type == WSMsgType.ERROR:
                raise ChannelConnectionError(self._url, str(self._ws.exception() or "websocket error"))
            # PING / PONG: handled by autoping, keep reading

    async def close(self) -> None:
        if not self._ws.closed:
            await self._ws.close()
        await self._release_session()

    async def _release_session(self) -> None:
        if self._owns_session and not self._session.closed:
            await self._session.close()


class AiohttpChannelTransport(ChannelTransport):
    """Opens websocket connections with ``aiohttp.ClientSession.ws_connect``.

    A shared session may be injected; otherwise each connection owns a
    session that is closed together with it.
    """

    def __init__(
        self,
        session: ClientSession | None = None,
        *,
        headers: dict[str, str] | None = None,
        heartbeat: float | None = None,
        connect_timeout: float = 30.0,
    ) -> None:
        self._session = session
        self._headers = headers or {}
        self._heartbeat = heartbeat
        self._connect_timeout = connect_timeout

    async def connect(self, url: str) -> ChannelConnection:
        owns_session = self._session is None
        session = self._session or ClientSession(
            timeout=ClientTimeout(
                total=None,
                connect=self._connect_timeout,
                sock_connect=self._connect_timeout,
            )
        )
        try:
            ws = await session.ws_connect(url, headers=self._headers, heartbeat=self._heartbeat)
        except (client_exceptions.ClientError, asyncio.TimeoutError) as exc:
            if owns_session:
                await session.close()
            raise ChannelConnectionError(url, str(exc) or type(exc).__name__) from exc

        logger.debug("Websocket connected to %s", url)
        return AiohttpChannelConnection(url, ws, session, owns_session)
