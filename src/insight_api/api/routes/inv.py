"""Live inv feed: transactions relayed through this API, over WebSocket."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from typing import TYPE_CHECKING

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

if TYPE_CHECKING:
    from insight_api.notifications.events import RawEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["inv"])


async def _forward(websocket: WebSocket, queue: asyncio.Queue[RawEvent]) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json(event.to_dict())


async def _wait_closed(websocket: WebSocket) -> None:
    # Client messages are ignored; receiving only detects the disconnect.
    with contextlib.suppress(WebSocketDisconnect):
        while True:
            await websocket.receive_text()


@router.websocket("/inv")
async def inv_stream(websocket: WebSocket) -> None:
    """Stream ``{"type": "tx", "content": <inv summary>}`` messages."""
    engine = getattr(websocket.app.state, "engine", None)
    notifications = engine.notification_service if engine is not None else None
    if notifications is None:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    await websocket.accept()
    key = f"ws-{uuid.uuid4().hex}"
    queue = notifications.add_subscriber(key)
    logger.debug("Inv subscriber %s connected", key)

    tasks = [
        asyncio.create_task(_forward(websocket, queue)),
        asyncio.create_task(_wait_closed(websocket)),
    ]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.debug("Inv subscriber %s dropped: %s", key, task.exception())
    finally:
        for task in tasks:
            task.cancel()
        notifications.remove_subscriber(key)
        logger.debug("Inv subscriber %s disconnected", key)
