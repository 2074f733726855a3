"""
Event Schemas.

Standardized event envelope and the note change event.

Naming convention for event_type: domain.entity.action (dot notation)

Usage:
    from notesync.backend.events.schemas import NoteChanged

    event = NoteChanged(
        source="note-service",
        correlation_id=request_id,
        uid=uid,
        note_id=note_id,
        action="updated",
        note={"title": "t", "body": "b", "last_modified": 1},
    )
"""

from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field

from notesync.backend.core.utils import utc_now


class EventEnvelope(BaseModel):
    """Base event envelope. All events inherit from this.

    Fields:
        event_id: Unique event identifier (auto-generated UUID)
        event_type: Domain event type in dot notation (e.g. notes.note.changed)
        event_version: Schema version for forward compatibility
        timestamp: ISO 8601 UTC timestamp
        source: Service/module that published the event
        correlation_id: Request ID for tracing the write that caused the event
    """

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    event_version: int = 1
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    source: str
    correlation_id: str


class NoteChanged(EventEnvelope):
    """Published when a note is created, updated, or deleted.

    ``note`` holds the stored fields after the change, or None on delete.
    """

    event_type: str = "notes.note.changed"
    uid: str
    note_id: str
    action: Literal["created", "updated", "deleted"]
    note: dict[str, Any] | None = None
