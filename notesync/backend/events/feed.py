"""
Change Feed.

In-process fan-out of NoteChanged events to live subscribers, scoped by uid.
Each subscriber owns a bounded asyncio queue so publishers never block.
When a slow subscriber's queue is full its backlog is discarded and the
queue is marked lagging; the consumer must resynchronise from a fresh
snapshot before applying further changes.

Usage:
    feed = get_change_feed()

    async with feed.subscribe(uid) as queue:
        event = await queue.get()
        if queue.take_lagging():
            ...  # reload everything
"""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from notesync.backend.core.logging import get_logger
from notesync.backend.events.schemas import NoteChanged

logger = get_logger(__name__)


class SubscriberQueue(asyncio.Queue):
    """Queue of NoteChanged events for one subscriber."""

    def __init__(self, maxsize: int) -> None:
        super().__init__(maxsize=maxsize)
        self.lagging = False

    def discard_backlog(self) -> int:
        dropped = 0
        while not self.empty():
            self.get_nowait()
            dropped += 1
        return dropped

    def take_lagging(self) -> bool:
        """Return whether events were dropped since the last call, and clear the mark."""
        lagging, self.lagging = self.lagging, False
        if lagging:
            self.discard_backlog()
        return lagging


class ChangeFeed:
    """Per-user publish/subscribe hub for note changes."""

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, set[SubscriberQueue]] = defaultdict(set)

    def subscriber_count(self, uid: str) -> int:
        return len(self._subscribers.get(uid, ()))

    def publish(self, event: NoteChanged) -> int:
        """
        Deliver an event to every subscriber of ``event.uid``.

        Returns:
            Number of subscribers the event was queued for
        """
        queues = self._subscribers.get(event.uid, ())
        for queue in queues:
            if queue.full():
                dropped = queue.discard_backlog()
                queue.lagging = True
                logger.warning(
                    "Change feed subscriber lagging, resync required",
                    uid=event.uid,
                    dropped=dropped,
                )
            queue.put_nowait(event)
        return len(queues)

    @asynccontextmanager
    async def subscribe(self, uid: str) -> AsyncIterator[SubscriberQueue]:
        """Register a subscriber queue for the lifetime of the context."""
        queue = SubscriberQueue(maxsize=self._queue_size)
        self._subscribers[uid].add(queue)
        logger.debug("Change feed subscriber added", uid=uid)
        try:
            yield queue
        finally:
            self._subscribers[uid].discard(queue)
            if not self._subscribers[uid]:
                del self._subscribers[uid]
            logger.debug("Change feed subscriber removed", uid=uid)


_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Get the shared change feed (lazy initialization)."""
    global _feed
    if _feed is None:
        from notesync.backend.core.config import get_app_config

        _feed = ChangeFeed(queue_size=get_app_config().events.feed.queue_size)
    return _feed


def reset_change_feed() -> None:
    """Forget the shared feed. Used on shutdown and between tests."""
    global _feed
    _feed = None
