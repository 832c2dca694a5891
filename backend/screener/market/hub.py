"""Fan the current snapshot out to every connected subscriber."""

from __future__ import annotations

import asyncio
import itertools
import logging

from .models import EMPTY_SNAPSHOT_PAYLOAD, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 8

_ids = itertools.count(1)


class Subscriber:
    """One connected client's outbound channel.

    Payloads wait in a bounded queue until the connection handler sends them.
    Once the hub closes the subscriber, ``get()`` returns None.
    """

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE, label: str | None = None) -> None:
        self.id = next(_ids)
        self.label = label or f"subscriber-{self.id}"
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._dropped = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> bool:
        """True when the hub closed this subscriber for falling behind."""
        return self._dropped

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def get(self) -> str | None:
        """Next payload to send, or None once closed."""
        if self._closed and self._queue.empty():
            return None
        return await self._queue.get()

    def offer(self, payload: str) -> bool:
        """Enqueue without waiting. False if the queue is full or closed."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    def close(self, *, dropped: bool = False) -> None:
        """Discard pending payloads and wake the reader with None."""
        if self._closed:
            return
        self._closed = True
        self._dropped = dropped
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(None)


class BroadcastHub:
    """Registry of subscribers plus the latest serialized snapshot.

    Delivery is fire-and-forget: each snapshot is serialized once and offered
    to every subscriber's queue. A subscriber whose queue is full is dropped
    and closed rather than slowing down everyone else.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}
        self._payload: str = EMPTY_SNAPSHOT_PAYLOAD

    @property
    def latest_payload(self) -> str:
        """Last published payload, ``"[]"`` before the first publish."""
        return self._payload

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, label: str | None = None) -> Subscriber:
        """Register a subscriber and hand it the current snapshot right away."""
        subscriber = Subscriber(maxsize=self._queue_size, label=label)
        subscriber.offer(self._payload)
        self._subscribers[subscriber.id] = subscriber
        logger.info("Subscriber connected: %s (%d total)", subscriber.label, len(self._subscribers))
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove a subscriber. No-op if it is already gone."""
        if self._subscribers.pop(subscriber.id, None) is not None:
            logger.info(
                "Subscriber disconnected: %s (%d remaining)",
                subscriber.label,
                len(self._subscribers),
            )
        subscriber.close()

    def publish(self, snapshot: Snapshot) -> int:
        """Serialize once and offer to every subscriber. Returns the number reached."""
        self._payload = snapshot.to_json()
        delivered = 0
        # Copy: dropping a subscriber mutates the registry
        for subscriber in list(self._subscribers.values()):
            if subscriber.offer(self._payload):
                delivered += 1
                continue
            logger.warning("Dropping slow subscriber %s (queue full)", subscriber.label)
            self._subscribers.pop(subscriber.id, None)
            subscriber.close(dropped=True)
        return delivered

    def close_all(self) -> None:
        for subscriber in list(self._subscribers.values()):
            subscriber.close()
        self._subscribers.clear()
