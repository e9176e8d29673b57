"""Event channel client — one push subscription per mounted table view.

Opens a connection through a ChannelTransport, announces the
(company, project) scope, and hands scope-matching ``album_status_updated``
frames to a callback. Malformed frames are logged and dropped, unknown
frame types are ignored, and callback failures never reach the read loop.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from albumsync.application.interfaces import ChannelConnection, ChannelTransport
from albumsync.application.schemas.channel_messages import (
    AlbumStatusUpdated,
    Connected,
    PingMessage,
    Pong,
    ProjectUpdated,
    SubscribeMessage,
    parse_push_message,
)
from albumsync.domain.entities import normalize_id
from albumsync.domain.exceptions import ChannelConnectionError, MalformedMessageError

logger = logging.getLogger(__name__)

StatusUpdateHandler = Callable[[AlbumStatusUpdated], None]
ProjectUpdateHandler = Callable[[ProjectUpdated], None]
Sleeper = Callable[[float], Awaitable[Any]]

_MAX_BACKOFF_EXPONENT = 64


class ChannelState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass(frozen=True)
class ReconnectPolicy:
    """Bounded exponential backoff between reconnect attempts."""

    enabled: bool = True
    initial_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 0  # 0 = unlimited
    factor: float = 2.0

    def delay_for(self, attempt: int) -> float:
        # Exponent is bounded so long outages never overflow the float
        exponent = min(max(attempt - 1, 0), _MAX_BACKOFF_EXPONENT)
        return min(self.max_delay, self.initial_delay * self.factor ** exponent)

    def exhausted(self, attempt: int) -> bool:
        return self.max_attempts > 0 and attempt > self.max_attempts


class EventChannel:
    """Push-notification subscription scoped to one (company, project) pair."""

    def __init__(
        self,
        company_id: Any,
        project_id: Any,
        *,
        url: str,
        transport: ChannelTransport,
        on_status_update: StatusUpdateHandler,
        on_project_update: ProjectUpdateHandler | None = None,
        reconnect: ReconnectPolicy | None = None,
        ping_interval: float = 0.0,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._company_id = normalize_id(company_id)
        self._project_id = normalize_id(project_id)
        self._url = url
        self._transport = transport
        self._on_status_update = on_status_update
        self._on_project_update = on_project_update
        self._reconnect = reconnect or ReconnectPolicy(enabled=False)
        self._ping_interval = ping_interval
        self._sleep = sleep

        self._connection: ChannelConnection | None = None
        self._task: asyncio.Task | None = None
        self._closing = False
        self.state = ChannelState.IDLE
        self.client_id: str | None = None
        self.connect_count = 0

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_open(self) -> bool:
        return self.state == ChannelState.OPEN

    # ── Lifecycle ────────────────────────────────────────────────────

    async def open(self) -> bool:
        """Connect and subscribe, then keep reading in a background task.

        Returns whether the first attempt succeeded. With reconnect enabled a
        failed first attempt is retried in the background.
        """
        if self._task is not None:
            raise RuntimeError("Event channel is already open")
        self._closing = False
        connected = await self._connect()
        if connected or self._reconnect.enabled:
            self._task = asyncio.create_task(self._run(connected))
        else:
            self.state = ChannelState.FAILED
        return connected

    async def close(self) -> None:
        """Tear down the subscription. No unsubscribe frame is sent."""
        self._closing = True
        connection = self._connection
        if connection is not None and not connection.closed:
            try:
                await connection.close()
            except Exception:
                logger.exception("Error while closing event channel")
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._connection = None
        self.state = ChannelState.CLOSED
        logger.info("Event channel closed (project %s)", self._project_id)

    async def wait_closed(self) -> None:
        """Block until the background read loop stops on its own."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def _connect(self) -> bool:
        self.state = ChannelState.CONNECTING
        try:
            connection = await self._transport.connect(self._url)
        except ChannelConnectionError as exc:
            logger.error("Event channel connect failed: %s", exc)
            return False

        subscribe = SubscribeMessage(project_id=self._project_id, company_id=self._company_id)
        try:
            await connection.send(subscribe.to_wire())
        except Exception as exc:
            logger.error("Event channel subscribe failed: %s", exc)
            await connection.close()
            return False

        self._connection = connection
        self.connect_count += 1
        self.state = ChannelState.OPEN
        logger.info(
            "📡 Subscribed to project %s (company %s) on %s",
            self._project_id,
            self._company_id,
            self._url,
        )
        return True

    async def _run(self, connected: bool) -> None:
        try:
            await self._reconnect_loop(connected)
        except Exception:
            logger.exception("Event channel loop crashed (project %s)", self._project_id)
            self.state = ChannelState.FAILED

    async def _reconnect_loop(self, connected: bool) -> None:
        attempt = 0
        while not self._closing:
            if connected:
                attempt = 0
                await self._pump()
                if self._closing:
                    break
                logger.warning("Event channel connection lost (project %s)", self._project_id)

            if not self._reconnect.enabled:
                self.state = ChannelState.FAILED
                break
            attempt += 1
            if self._reconnect.exhausted(attempt):
                logger.error(
                    "Giving up on event channel after %d reconnect attempts",
                    self._reconnect.max_attempts,
                )
                self.state = ChannelState.FAILED
                break

            delay = self._reconnect.delay_for(attempt)
            self.state = ChannelState.RECONNECTING
            logger.info("Reconnecting event channel in %.1fs (attempt %d)", delay, attempt)
            await self._sleep(delay)
            if self._closing:
                break
            connected = await self._connect()

    async def _pump(self) -> None:
        """Read frames until the connection closes."""
        connection = self._connection
        if connection is None:
            return
        ping_task = None
        if self._ping_interval > 0:
            ping_task = asyncio.create_task(self._ping_loop(connection))
        try:
            while True:
                frame = await connection.receive()
                if frame is None:
                    break
                self.dispatch(frame)
        except ChannelConnectionError as exc:
            logger.error("Event channel read failed: %s", exc)
        except Exception:
            logger.exception("Event channel read loop crashed")
        finally:
            if ping_task is not None:
                ping_task.cancel()
                try:
                    await ping_task
                except asyncio.CancelledError:
                    pass
            if not connection.closed:
                await connection.close()
            self._connection = None

    async def _ping_loop(self, connection: ChannelConnection) -> None:
        ping = PingMessage().to_wire()
        while not connection.closed:
            await self._sleep(self._ping_interval)
            if connection.closed:
                break
            try:
                await connection.send(ping)
            except Exception as exc:
                logger.warning("Event channel ping failed: %s", exc)
                break

    # ── Dispatch ─────────────────────────────────────────────────────

    def dispatch(self, frame: str | bytes) -> None:
        """Decode one frame and route it; never raises."""
        try:
            message = parse_push_message(frame)
        except MalformedMessageError as exc:
            logger.warning("Dropping malformed channel message: %s", exc.reason)
            return

        if isinstance(message, AlbumStatusUpdated):
            if message.project_id != self._project_id:
                logger.debug(
                    "Ignoring album_status_updated for project %s (subscribed to %s)",
                    message.project_id,
                    self._project_id,
                )
                return
            self._invoke(self._on_status_update, message)
        elif isinstance(message, ProjectUpdated):
            if message.project_id != self._project_id or self._on_project_update is None:
                return
            self._invoke(self._on_project_update, message)
        elif isinstance(message, Connected):
            self.client_id = message.client_id
            logger.debug("Channel greeting received (client id %s)", message.client_id)
        elif isinstance(message, Pong):
            logger.debug("Channel pong")
        else:
            logger.debug("Ignoring channel message of type %r", message.type)

    @staticmethod
    def _invoke(handler: Callable[[Any], None], message: Any) -> None:
        try:
            handler(message)
        except Exception:
            logger.exception("Channel handler failed for %s", message.type)
