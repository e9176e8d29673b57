"""Channel hub — server-side broadcaster for album status pushes over websockets."""

import asyncio
import json
import logging
import time
import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from albumsync.application.schemas.channel_messages import (
    PingMessage,
    SubscribeMessage,
    parse_client_message,
)
from albumsync.domain.entities import normalize_id, utc_now_iso
from albumsync.domain.exceptions import MalformedMessageError

logger = logging.getLogger(__name__)


@dataclass
class HubClient:
    """One connected socket and the scope it subscribed to."""

    client_id: str
    queue: asyncio.Queue
    project_id: str | None = None
    company_id: str | None = None
    user_id: str | None = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def matches(self, project_id: str, company_id: str | None) -> bool:
        if self.project_id is not None and self.project_id == project_id:
            return True
        return self.company_id is not None and company_id is not None and self.company_id == company_id


class ChannelHub:
    """Manages websocket clients and fans out scope-matched messages.

    Each connected client gets its own asyncio.Queue of outgoing frames;
    the websocket endpoint drains it via ``outgoing``. A client is in scope
    for a message when its subscribed project OR company matches.
    """

    def __init__(self, max_queue_size: int = 256) -> None:
        self._clients: dict[str, HubClient] = {}
        self._max_queue_size = max_queue_size

    @staticmethod
    def _generate_client_id() -> str:
        return f"client_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    def connect(self) -> HubClient:
        """Register a new socket and queue the ``connected`` greeting."""
        client = HubClient(
            client_id=self._generate_client_id(),
            queue=asyncio.Queue(maxsize=self._max_queue_size),
        )
        self._clients[client.client_id] = client
        self._enqueue(client, {
            "type": "connected",
            "clientId": client.client_id,
            "message": "Connected to album status channel",
        })
        logger.info("🔌 Channel client connected: %s", client.client_id)
        return client

    def disconnect(self, client_id: str) -> None:
        if self._clients.pop(client_id, None) is not None:
            logger.info("🔌 Channel client disconnected: %s", client_id)

    def get_client(self, client_id: str) -> HubClient | None:
        return self._clients.get(client_id)

    async def outgoing(self, client: HubClient) -> AsyncGenerator[str, None]:
        """Yield frames queued for a client until it is disconnected by the hub."""
        while True:
            frame = await client.queue.get()
            if frame is None:
                break
            yield frame

    def handle_client_message(self, client_id: str, raw: str | bytes) -> None:
        client = self._clients.get(client_id)
        if client is None:
            return
        try:
            message = parse_client_message(raw)
        except MalformedMessageError as exc:
            logger.warning("Ignoring malformed frame from %s: %s", client_id, exc.reason)
            return

        if isinstance(message, SubscribeMessage):
            if message.project_id:
                client.project_id = message.project_id
            if message.company_id:
                client.company_id = message.company_id
            if message.user_id:
                client.user_id = message.user_id
            logger.info(
                "📡 Client %s subscribed to project=%s company=%s",
                client_id,
                client.project_id,
                client.company_id,
            )
        elif isinstance(message, PingMessage):
            self._enqueue(client, {"type": "pong"})
        else:
            logger.debug("Ignoring %r frame from %s", message.type, client_id)

    def _enqueue(self, client: HubClient, payload: dict[str, Any]) -> bool:
        try:
            client.queue.put_nowait(json.dumps(payload, ensure_ascii=False))
            return True
        except asyncio.QueueFull:
            logger.warning("Channel client %s queue full — disconnecting", client.client_id)
            self._drop(client)
            return False

    def _drop(self, client: HubClient) -> None:
        self._clients.pop(client.client_id, None)
        # Make room for the sentinel so the writer loop terminates
        while not client.queue.empty():
            client.queue.get_nowait()
        client.queue.put_nowait(None)

    async def _broadcast(self, payload: dict[str, Any], project_id: str, company_id: str | None) -> int:
        delivered = 0
        for client in list(self._clients.values()):
            if client.matches(project_id, company_id) and self._enqueue(client, payload):
                delivered += 1
        return delivered

    async def broadcast_album_status_update(
        self,
        album_id: Any,
        project_id: Any,
        company_id: Any,
        data: dict[str, Any],
    ) -> int:
        """Push ``album_status_updated`` to subscribed clients; returns how many got it."""
        project_key = normalize_id(project_id)
        company_key = normalize_id(company_id) if company_id is not None else None
        payload = {
            "type": "album_status_updated",
            "albumId": normalize_id(album_id),
            "projectId": project_key,
            "companyId": company_key,
            "data": data,
            "timestamp": utc_now_iso(),
        }
        delivered = await self._broadcast(payload, project_key, company_key)
        logger.info(
            "📡 Broadcast status update for album %s to %d client(s)",
            payload["albumId"],
            delivered,
        )
        return delivered

    async def broadcast_project_update(
        self,
        project_id: Any,
        company_id: Any,
        data: dict[str, Any],
    ) -> int:
        project_key = normalize_id(project_id)
        company_key = normalize_id(company_id) if company_id is not None else None
        payload = {
            "type": "project_updated",
            "projectId": project_key,
            "companyId": company_key,
            "data": data,
            "timestamp": utc_now_iso(),
        }
        return await self._broadcast(payload, project_key, company_key)

    async def shutdown(self) -> None:
        """Disconnect all connected clients."""
        for client in list(self._clients.values()):
            self._drop(client)
        self._clients.clear()

    @property
    def client_count(self) -> int:
        return len(self._clients)
