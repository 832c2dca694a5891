"""WebSocket streaming endpoint for live snapshots."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Response, WebSocket, WebSocketDisconnect

from .cache import MarketState
from .hub import BroadcastHub, Subscriber

logger = logging.getLogger(__name__)

# Sent when the hub drops a subscriber that fell behind
TRY_AGAIN_LATER = 1013
# Sent when the server shuts down
GOING_AWAY = 1001


def create_stream_router(hub: BroadcastHub, state: MarketState) -> APIRouter:
    """Create the streaming router with references to the hub and state.

    This factory pattern lets us inject both without globals.
    """
    router = APIRouter(tags=["streaming"])

    @router.websocket("/ws")
    async def stream_snapshots(websocket: WebSocket) -> None:
        """Push every snapshot to the client.

        The first message is the current snapshot (``[]`` if none was built
        yet), then one message per build cycle:

            [{"symbol": "BTCUSDT", "name": "BTC", "price": 65000.5, ...}, ...]

        Client messages are not part of the protocol; they are read only to
        notice the client going away.
        """
        await websocket.accept()
        client = websocket.client
        label = f"{client.host}:{client.port}" if client else None
        subscriber = hub.subscribe(label=label)

        sender = asyncio.create_task(_send_loop(websocket, subscriber))
        receiver = asyncio.create_task(_drain_client(websocket))
        try:
            done, _ = await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if sender in done and subscriber.closed and not sender.exception():
                code = TRY_AGAIN_LATER if subscriber.dropped else GOING_AWAY
                await websocket.close(code=code)
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("WebSocket %s closed during shutdown: %s", subscriber.label, e)
        finally:
            for task in (sender, receiver):
                task.cancel()
            await asyncio.gather(sender, receiver, return_exceptions=True)
            hub.unsubscribe(subscriber)

    @router.get("/api/snapshot")
    async def current_snapshot() -> Response:
        """The latest snapshot, same payload as the WebSocket pushes."""
        return Response(content=hub.latest_payload, media_type="application/json")

    @router.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", **state.summary(), "subscribers": hub.subscriber_count}

    return router


async def _send_loop(websocket: WebSocket, subscriber: Subscriber) -> None:
    """Forward queued payloads until the hub closes the subscriber."""
    while True:
        payload = await subscriber.get()
        if payload is None:
            return
        await websocket.send_text(payload)


async def _drain_client(websocket: WebSocket) -> None:
    """Read and discard client messages until it disconnects."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            logger.debug("WebSocket client went away")
            return
