"""Unit tests for the EventChannel client using an in-memory transport."""

import asyncio
import json

import pytest

from albumsync.application.interfaces import ChannelConnection, ChannelTransport
from albumsync.application.schemas import AlbumStatusUpdated, ProjectUpdated
from albumsync.application.services import ChannelState, EventChannel, ReconnectPolicy
from albumsync.domain.exceptions import ChannelConnectionError


# ── Fakes ──


class FakeConnection(ChannelConnection):
    def __init__(self):
        self.sent: list[str] = []
        self._incoming: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, text: str) -> None:
        if self._closed:
            raise ConnectionError("closed")
        self.sent.append(text)

    async def receive(self) -> str | bytes | None:
        return await self._incoming.get()

    async def close(self) -> None:
        self._closed = True
        self._incoming.put_nowait(None)

    def push(self, frame: dict | str) -> None:
        self._incoming.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def drop(self) -> None:
        """Server-side close."""
        self._closed = True
        self._incoming.put_nowait(None)


class FakeTransport(ChannelTransport):
    def __init__(self, connections: list[FakeConnection] | None = None, failures: int = 0):
        self._connections = list(connections or [])
        self.failures = failures
        self.urls: list[str] = []

    async def connect(self, url: str) -> ChannelConnection:
        self.urls.append(url)
        if self.failures > 0:
            self.failures -= 1
            raise ChannelConnectionError(url, "refused")
        if not self._connections:
            raise ChannelConnectionError(url, "no more connections")
        return self._connections.pop(0)


class FakeSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


async def _until(predicate, rounds: int = 500) -> None:
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def _status_frame(album_id="7", project_id="42", code="accepted") -> dict:
    return {
        "type": "album_status_updated",
        "albumId": album_id,
        "projectId": project_id,
        "data": {"statusCode": code},
        "timestamp": "2025-01-01T00:00:00Z",
    }


def _channel(transport: FakeTransport, received: list, **kwargs) -> EventChannel:
    return EventChannel(
        3,
        42,
        url="ws://test/ws",
        transport=transport,
        on_status_update=received.append,
        **kwargs,
    )


# ── Reconnect policy ──


def test_reconnect_delays_grow_and_cap():
    policy = ReconnectPolicy(initial_delay=1.0, max_delay=5.0)
    assert [policy.delay_for(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_reconnect_attempt_limit():
    assert not ReconnectPolicy(max_attempts=0).exhausted(1000)
    assert not ReconnectPolicy(max_attempts=3).exhausted(3)
    assert ReconnectPolicy(max_attempts=3).exhausted(4)


# ── Open / dispatch / close ──


@pytest.mark.asyncio
async def test_open_subscribes_and_delivers_matching_pushes():
    conn = FakeConnection()
    received: list[AlbumStatusUpdated] = []
    channel = _channel(FakeTransport([conn]), received)

    assert await channel.open() is True
    assert channel.state == ChannelState.OPEN
    assert json.loads(conn.sent[0]) == {"type": "subscribe", "projectId": "42", "companyId": "3"}

    conn.push({"type": "connected", "clientId": "client_1"})
    conn.push(_status_frame())
    await _until(lambda: received)

    assert received[0].album_id == "7"
    assert channel.client_id == "client_1"

    await channel.close()
    assert channel.state == ChannelState.CLOSED
    assert conn.closed


@pytest.mark.asyncio
async def test_malformed_and_unknown_frames_are_dropped():
    conn = FakeConnection()
    received: list = []
    channel = _channel(FakeTransport([conn]), received)
    await channel.open()

    conn.push("{not json")
    conn.push({"type": "album_status_updated", "projectId": "42"})
    conn.push({"type": "album_created", "albumId": "1"})
    conn.push({"type": "pong"})
    conn.push(_status_frame(album_id="8"))
    await _until(lambda: received)

    assert [m.album_id for m in received] == ["8"]
    assert channel.is_open
    await channel.close()


@pytest.mark.asyncio
async def test_pushes_for_other_projects_are_filtered():
    conn = FakeConnection()
    received: list = []
    channel = _channel(FakeTransport([conn]), received)
    await channel.open()

    conn.push(_status_frame(project_id="99"))
    conn.push(_status_frame(project_id=42, album_id="9"))
    await _until(lambda: received)

    assert [m.album_id for m in received] == ["9"]
    await channel.close()


@pytest.mark.asyncio
async def test_handler_errors_do_not_stop_the_read_loop():
    conn = FakeConnection()
    seen: list[str] = []

    def handler(message: AlbumStatusUpdated) -> None:
        seen.append(message.album_id)
        if message.album_id == "1":
            raise ValueError("boom")

    channel = EventChannel("3", "42", url="ws://test/ws", transport=FakeTransport([conn]), on_status_update=handler)
    await channel.open()

    conn.push(_status_frame(album_id="1"))
    conn.push(_status_frame(album_id="2"))
    await _until(lambda: len(seen) == 2)

    assert channel.is_open
    await channel.close()


@pytest.mark.asyncio
async def test_project_updates_go_to_their_own_handler():
    conn = FakeConnection()
    projects: list[ProjectUpdated] = []
    channel = _channel(FakeTransport([conn]), [], on_project_update=projects.append)
    await channel.open()

    conn.push({"type": "project_updated", "projectId": "99", "data": {}})
    conn.push({"type": "project_updated", "projectId": "42", "data": {"name": "Tower"}})
    await _until(lambda: projects)

    assert projects[0].data == {"name": "Tower"}
    await channel.close()


@pytest.mark.asyncio
async def test_open_twice_is_an_error():
    channel = _channel(FakeTransport([FakeConnection()]), [])
    await channel.open()
    with pytest.raises(RuntimeError):
        await channel.open()
    await channel.close()


# ── Failures and reconnect ──


@pytest.mark.asyncio
async def test_connect_failure_without_reconnect_fails_fast():
    transport = FakeTransport(failures=1)
    channel = _channel(transport, [])

    assert await channel.open() is False
    assert channel.state == ChannelState.FAILED
    await channel.close()


@pytest.mark.asyncio
async def test_connection_loss_without_reconnect_ends_in_failed_state():
    conn = FakeConnection()
    channel = _channel(FakeTransport([conn]), [])
    await channel.open()

    conn.drop()
    await channel.wait_closed()
    assert channel.state == ChannelState.FAILED


@pytest.mark.asyncio
async def test_reconnects_and_resubscribes_after_connection_loss():
    first, second = FakeConnection(), FakeConnection()
    received: list = []
    sleep = FakeSleep()
    channel = _channel(
        FakeTransport([first, second], failures=0),
        received,
        reconnect=ReconnectPolicy(initial_delay=0.5, max_delay=4.0),
        sleep=sleep,
    )
    await channel.open()

    first.drop()
    await _until(lambda: channel.connect_count == 2 and channel.is_open)

    assert sleep.delays == [0.5]
    assert json.loads(second.sent[0])["type"] == "subscribe"

    second.push(_status_frame(album_id="5"))
    await _until(lambda: received)
    assert received[0].album_id == "5"
    await channel.close()


@pytest.mark.asyncio
async def test_first_connect_failure_is_retried_in_background():
    conn = FakeConnection()
    sleep = FakeSleep()
    transport = FakeTransport([conn], failures=2)
    channel = _channel(transport, [], reconnect=ReconnectPolicy(initial_delay=1.0, max_delay=30.0), sleep=sleep)

    assert await channel.open() is False
    await _until(lambda: channel.is_open)

    assert len(transport.urls) == 3
    assert sleep.delays == [1.0, 2.0]
    await channel.close()


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    sleep = FakeSleep()
    transport = FakeTransport(failures=10)
    channel = _channel(transport, [], reconnect=ReconnectPolicy(initial_delay=1.0, max_attempts=2), sleep=sleep)

    await channel.open()
    await channel.wait_closed()

    assert channel.state == ChannelState.FAILED
    assert len(transport.urls) == 3
    assert sleep.delays == [1.0, 2.0]


# ── Keepalive ──


@pytest.mark.asyncio
async def test_ping_loop_sends_ping_frames():
    conn = FakeConnection()
    sleep = FakeSleep()
    channel = _channel(FakeTransport([conn]), [], ping_interval=25.0, sleep=sleep)
    await channel.open()

    await _until(lambda: any(json.loads(f)["type"] == "ping" for f in conn.sent))
    assert 25.0 in sleep.delays

    await channel.close()


# ── Long outages ──


def test_delay_stays_capped_for_very_high_attempt_numbers():
    policy = ReconnectPolicy(initial_delay=1.0, max_delay=30.0)
    assert policy.delay_for(1100) == 30.0
    assert policy.delay_for(10**9) == 30.0


@pytest.mark.asyncio
async def test_keeps_retrying_through_a_long_outage():
    conn = FakeConnection()
    sleep = FakeSleep()
    transport = FakeTransport([conn], failures=1200)
    channel = _channel(transport, [], reconnect=ReconnectPolicy(initial_delay=1.0, max_delay=30.0), sleep=sleep)

    assert await channel.open() is False
    await _until(lambda: channel.is_open, rounds=20_000)

    assert len(transport.urls) == 1201
    assert max(sleep.delays) == 30.0
    await channel.close()


@pytest.mark.asyncio
async def test_unexpected_error_in_reconnect_loop_marks_channel_failed():
    async def broken_sleep(delay: float) -> None:
        raise RuntimeError("clock broke")

    channel = _channel(
        FakeTransport(failures=1),
        [],
        reconnect=ReconnectPolicy(initial_delay=1.0),
        sleep=broken_sleep,
    )
    await channel.open()
    await channel.wait_closed()

    assert channel.state == ChannelState.FAILED
    await channel.close()
