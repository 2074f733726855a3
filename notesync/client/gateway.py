"""
Note Gateway.

Interface to a note store keyed by (uid, note_id). Reads deliver through
callbacks so a store can push later values for the same read; writes are
coroutines that raise on failure.
"""

from abc import ABC, abstractmethod

from notesync.client.snapshot import ErrorCallback, Note, Subscription, ValueCallback


class NoteGateway(ABC):
    """
    Read/write access to one note store.

    Implementations call ``on_value`` / ``on_error`` on the event loop and
    never after the returned Subscription was closed.

    Raises (write operations):
        WriteFailure: create/update was not applied
        DeleteFailure: delete was not applied
    """

    @abstractmethod
    def read_once(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Deliver the current note (or ``None``) exactly once."""

    @abstractmethod
    def subscribe(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Deliver the current note, then every later change to it."""

    @abstractmethod
    def subscribe_all(
        self,
        uid: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        """Deliver the user's full ``note_id -> Note`` mapping on every change."""

    @abstractmethod
    async def create(self, uid: str, note_id: str, note: Note) -> None:
        """Store a new note (replaces anything stored at the key)."""

    @abstractmethod
    async def update(
        self,
        uid: str,
        note_id: str,
        title: str,
        body: str,
        last_modified: int | None = None,
    ) -> None:
        """Write title and body of an existing note."""

    @abstractmethod
    async def delete(self, uid: str, note_id: str) -> None:
        """Remove a note."""
