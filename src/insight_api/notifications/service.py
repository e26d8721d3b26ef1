"""Notification service: fan relayed transactions out to live subscribers.

Publishers put events on one bounded input queue. A background task copies
each event into every subscriber's own queue, so a slow websocket loses
events instead of stalling the others.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from insight_api.notifications.events import RawEvent

logger = logging.getLogger(__name__)

DEFAULT_BUFFER = 100


class NotificationService:
    """Asyncio fan-out of :class:`RawEvent` objects keyed by subscriber.

    Usage::

        svc = NotificationService()
        q = svc.add_subscriber("ws-1")
        await svc.start()
        await svc.notify(InvEvent.from_view(view))
        event = await q.get()
        await svc.stop()
    """

    def __init__(
        self,
        *,
        input_buffer: int = DEFAULT_BUFFER,
        subscriber_buffer: int = DEFAULT_BUFFER,
    ) -> None:
        self._input: asyncio.Queue[RawEvent] = asyncio.Queue(maxsize=input_buffer)
        self._subscriber_buffer = subscriber_buffer
        self._subscribers: dict[str, asyncio.Queue[RawEvent]] = {}
        self._task: asyncio.Task[None] | None = None
        self._dropped = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def dropped(self) -> int:
        """Events lost so far because a queue was full."""
        return self._dropped

    def add_subscriber(self, key: str, *, buffer: int | None = None) -> asyncio.Queue[RawEvent]:
        """Register *key* and return the queue its events arrive on.

        Raises:
            ValueError: If *key* is already subscribed.
        """
        if key in self._subscribers:
            msg = f"subscriber {key!r} already registered"
            raise ValueError(msg)
        q: asyncio.Queue[RawEvent] = asyncio.Queue(
            maxsize=self._subscriber_buffer if buffer is None else buffer
        )
        self._subscribers[key] = q
        return q

    def remove_subscriber(self, key: str) -> None:
        self._subscribers.pop(key, None)

    async def notify(self, event: RawEvent) -> bool:
        """Queue *event* for delivery; False if the input queue is full."""
        try:
            self._input.put_nowait(event)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.warning("Notification input queue full, dropping %s event", event.type)
            return False
        return True

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._exchange(), name="notification-exchange")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _exchange(self) -> None:
        while True:
            event = await self._input.get()
            self._deliver(event)

    def _deliver(self, event: RawEvent) -> None:
        for key, q in list(self._subscribers.items()):
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                self._dropped += 1
                logger.warning("Subscriber %s queue full, dropping %s event", key, event.type)
