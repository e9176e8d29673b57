"""Websocket endpoint for the album status channel."""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from albumsync.application.services import ChannelHub, HubClient
from albumsync.infrastructure.dependencies import get_channel_hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Channel"])


async def _forward(websocket: WebSocket, hub: ChannelHub, client: HubClient) -> None:
    async for frame in hub.outgoing(client):
        await websocket.send_text(frame)
    # Hub dropped the client (shutdown or slow consumer)
    await websocket.close()


@router.websocket("/ws")
async def album_channel(
    websocket: WebSocket,
    hub: ChannelHub = Depends(get_channel_hub),
) -> None:
    """Clients send ``subscribe``/``ping`` frames and receive scope-matched pushes."""
    await websocket.accept()
    client = hub.connect()
    writer = asyncio.create_task(_forward(websocket, hub, client))
    try:
        while True:
            raw = await websocket.receive_text()
            hub.handle_client_message(client.client_id, raw)
    except WebSocketDisconnect:
        pass
    except RuntimeError:
        # Socket already closed by the writer
        logger.debug("Channel socket for %s closed by server", client.client_id)
    finally:
        hub.disconnect(client.client_id)
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.debug("Writer for %s ended with an error", client.client_id, exc_info=True)
