"""
Event Publishers.

Wraps the change feed with the note event schema. Publishing is skipped
when events.publish_enabled is false (no error, no log noise).

Usage:
    from notesync.backend.events.publishers import NoteEventPublisher

    publisher = NoteEventPublisher()
    publisher.note_changed(note, action="updated", correlation_id=request_id)
"""

from notesync.backend.core.logging import get_logger
from notesync.backend.events.feed import ChangeFeed, get_change_feed
from notesync.backend.events.schemas import NoteChanged
from notesync.backend.models.note import Note

logger = get_logger(__name__)


def note_payload(note: Note) -> dict:
    """Stored note fields as they travel inside events."""
    return {
        "title": note.title,
        "body": note.body,
        "last_modified": note.last_modified,
    }


class NoteEventPublisher:
    """Publishes note change events to the change feed."""

    def __init__(self, feed: ChangeFeed | None = None) -> None:
        self._feed = feed

    def note_changed(self, note: Note, action: str, correlation_id: str) -> None:
        """Publish a notes.note.changed event for a created or updated note."""
        self._publish(
            NoteChanged(
                source="note-service",
                correlation_id=correlation_id,
                uid=note.uid,
                note_id=note.note_id,
                action=action,
                note=note_payload(note),
            )
        )

    def note_deleted(self, uid: str, note_id: str, correlation_id: str) -> None:
        """Publish a notes.note.changed event with no note attached."""
        self._publish(
            NoteChanged(
                source="note-service",
                correlation_id=correlation_id,
                uid=uid,
                note_id=note_id,
                action="deleted",
            )
        )

    def _publish(self, event: NoteChanged) -> None:
        from notesync.backend.core.config import get_app_config

        if not get_app_config().events.publish_enabled:
            return

        feed = self._feed or get_change_feed()
        delivered = feed.publish(event)
        logger.debug(
            "Event published",
            event_type=event.event_type,
            event_id=event.event_id,
            note_id=event.note_id,
            subscribers=delivered,
        )
