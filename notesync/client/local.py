"""
Local Note Store.

In-process note store with the same delivery semantics as the remote one:
callbacks run on the event loop after the triggering call returns, and
every write is pushed to live subscribers. Used by tests and by the
terminal client's offline mode.
"""

import asyncio
from collections import defaultdict
from uuid import uuid4

from notesync.backend.core.logging import get_logger
from notesync.client.auth import AuthProvider, UserCredentials
from notesync.client.errors import DeleteFailure, WriteFailure
from notesync.client.gateway import NoteGateway
from notesync.client.snapshot import ErrorCallback, Note, Snapshot, Subscription, ValueCallback

logger = get_logger(__name__)


class LocalAuthProvider(AuthProvider):
    """Signs in without a server. A fixed uid keeps notes across sign-ins."""

    def __init__(self, uid: str | None = None) -> None:
        self._uid = uid

    async def sign_in_anonymously(self) -> UserCredentials:
        return UserCredentials(uid=self._uid or uuid4().hex)


class LocalNoteGateway(NoteGateway):
    """Note store held in memory, keyed by uid then note id."""

    def __init__(self) -> None:
        self._notes: dict[str, dict[str, Note]] = defaultdict(dict)
        self._note_listeners: dict[tuple[str, str], list[ValueCallback]] = defaultdict(list)
        self._collection_listeners: dict[str, list[ValueCallback]] = defaultdict(list)

    def notes(self, uid: str) -> dict[str, Note]:
        """Copy of the stored notes of ``uid``."""
        return dict(self._notes.get(uid, {}))

    def _deliver(self, subscription: Subscription, callback: ValueCallback, snapshot: Snapshot) -> None:
        def run() -> None:
            if not subscription.closed:
                callback(snapshot)

        asyncio.get_running_loop().call_soon(run)

    def _note_snapshot(self, uid: str, note_id: str) -> Snapshot:
        return Snapshot(self._notes.get(uid, {}).get(note_id))

    def _collection_snapshot(self, uid: str) -> Snapshot:
        return Snapshot(self.notes(uid))

    def read_once(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        subscription = Subscription()
        self._deliver(subscription, on_value, self._note_snapshot(uid, note_id))
        return subscription

    def subscribe(
        self,
        uid: str,
        note_id: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        key = (uid, note_id)
        listeners = self._note_listeners[key]

        def listener(snapshot: Snapshot) -> None:
            self._deliver(subscription, on_value, snapshot)

        def unsubscribe() -> None:
            listeners.remove(listener)

        subscription = Subscription(on_close=unsubscribe)
        listeners.append(listener)
        listener(self._note_snapshot(uid, note_id))
        return subscription

    def subscribe_all(
        self,
        uid: str,
        on_value: ValueCallback,
        on_error: ErrorCallback,
    ) -> Subscription:
        listeners = self._collection_listeners[uid]

        def listener(snapshot: Snapshot) -> None:
            self._deliver(subscription, on_value, snapshot)

        def unsubscribe() -> None:
            listeners.remove(listener)

        subscription = Subscription(on_close=unsubscribe)
        listeners.append(listener)
        listener(self._collection_snapshot(uid))
        return subscription

    def _changed(self, uid: str, note_id: str) -> None:
        note_snapshot = self._note_snapshot(uid, note_id)
        for listener in list(self._note_listeners.get((uid, note_id), ())):
            listener(note_snapshot)
        collection_snapshot = self._collection_snapshot(uid)
        for listener in list(self._collection_listeners.get(uid, ())):
            listener(collection_snapshot)

    async def create(self, uid: str, note_id: str, note: Note) -> None:
        self._notes[uid][note_id] = note
        logger.debug("Note stored", uid=uid, note_id=note_id)
        self._changed(uid, note_id)

    async def update(
        self,
        uid: str,
        note_id: str,
        title: str,
        body: str,
        last_modified: int | None = None,
    ) -> None:
        if note_id not in self._notes.get(uid, {}):
            raise WriteFailure(f"Note {note_id} does not exist")
        self._notes[uid][note_id] = Note(title=title, body=body, last_modified=last_modified)
        self._changed(uid, note_id)

    async def delete(self, uid: str, note_id: str) -> None:
        if note_id not in self._notes.get(uid, {}):
            raise DeleteFailure(f"Note {note_id} does not exist")
        del self._notes[uid][note_id]
        logger.debug("Note removed", uid=uid, note_id=note_id)
        self._changed(uid, note_id)
