"""
Change Stream.

Server-Sent Events rendering of the change feed for one user. A stream
opens with a ``snapshot`` event holding the full note mapping, followed by
one ``change`` event per NoteChanged. A subscriber that fell behind the
feed gets a fresh ``snapshot`` event in place of the changes it missed.
Heartbeat comments keep idle connections open through proxies.

Wire format:
    event: snapshot
    data: {"<note_id>": {"title": ..., "body": ..., "last_modified": ...}}

    event: change
    data: {"note_id": ..., "action": "updated", "note": {...}}
"""

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from notesync.backend.core.logging import get_logger
from notesync.backend.events.feed import ChangeFeed

logger = get_logger(__name__)

SnapshotLoader = Callable[[], Awaitable[dict[str, dict[str, Any]]]]

HEARTBEAT = ": heartbeat\n\n"


def format_sse(event: str, data: Any) -> str:
    """Render one SSE frame."""
    return f"event: {event}\ndata: {json.dumps(data, separators=(',', ':'))}\n\n"


async def note_event_stream(
    feed: ChangeFeed,
    uid: str,
    load_snapshot: SnapshotLoader,
    heartbeat_seconds: float,
) -> AsyncIterator[str]:
    """
    Yield SSE frames for ``uid`` until the consumer stops iterating.

    The feed subscription is taken before the snapshot is read so no change
    committed in between is lost. Changes carry the whole note, so a change
    that is already reflected in the snapshot is harmless to apply twice.
    """
    async with feed.subscribe(uid) as queue:
        snapshot = await load_snapshot()
        logger.debug("Change stream opened", uid=uid, notes=len(snapshot))
        yield format_sse("snapshot", snapshot)

        while True:
            try:
                event = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield HEARTBEAT
                continue
            if queue.take_lagging():
                snapshot = await load_snapshot()
                logger.info("Change stream resynchronised", uid=uid, notes=len(snapshot))
                yield format_sse("snapshot", snapshot)
                continue
            yield format_sse(
                "change",
                {"note_id": event.note_id, "action": event.action, "note": event.note},
            )
