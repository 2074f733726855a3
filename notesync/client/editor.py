"""
Note Editor.

Keeps the displayed note in agreement with the note store. The editor
subscribes to the selected note, echoes local edits immediately, writes
every edit, and reconciles pushes from the store against its own writes.

Two guards decide whether a store callback is applied:

- every subscription carries a token ``(note_id, generation)``; callbacks
  holding any other token belong to a previous selection and are dropped,
- every local write is stamped with ``last_modified`` from the editor
  clock; a push older than the newest local stamp (or unstamped while
  local edits exist) is an echo of a superseded write and is dropped.
"""

import functools
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Union

from notesync.backend.core.logging import get_logger
from notesync.backend.core.utils import now_ms
from notesync.client.auth import AuthContext
from notesync.client.errors import DeleteFailure, NoteMissing, WriteFailure
from notesync.client.gateway import NoteGateway
from notesync.client.navigation import ROOT_PATH, Router
from notesync.client.snapshot import Snapshot, Subscription

logger = get_logger(__name__)

NOT_FOUND_TEXT = "Note cannot be found"


@dataclass(frozen=True)
class Empty:
    """No note selected."""


@dataclass(frozen=True)
class Loading:
    note_id: str


@dataclass(frozen=True)
class Loaded:
    note_id: str
    title: str
    body: str
    last_modified: int | None = None


@dataclass(frozen=True)
class NotFound:
    note_id: str


@dataclass(frozen=True)
class Failed:
    note_id: str
    error: Exception


EditorView = Union[Empty, Loading, Loaded, NotFound, Failed]

Token = tuple[str, int]
TitleListener = Callable[[str, str], None]
ViewListener = Callable[[EditorView], None]


class NoteEditor:
    """
    Sync state machine for the selected note.

    Usage:
        editor = NoteEditor(context, gateway, router)
        editor.show(note_id)
        await editor.change_title("Groceries")
    """

    def __init__(
        self,
        context: AuthContext,
        gateway: NoteGateway,
        router: Router,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._context = context
        self._gateway = gateway
        self._router = router
        self._clock = clock

        self._view: EditorView = Empty()
        self._generation = 0
        self._token: Token | None = None
        self._subscription: Subscription | None = None
        self._last_local_stamp: int | None = None
        self._pending_delete: str | None = None

        self._view_listeners: list[ViewListener] = []
        self._title_listeners: list[TitleListener] = []

    @property
    def view(self) -> EditorView:
        return self._view

    @property
    def note_id(self) -> str | None:
        if isinstance(self._view, Empty):
            return None
        return self._view.note_id

    @property
    def display_title(self) -> str:
        if isinstance(self._view, Loaded):
            return self._view.title
        if isinstance(self._view, (NotFound, Failed)):
            return NOT_FOUND_TEXT
        return ""

    @property
    def display_body(self) -> str:
        if isinstance(self._view, Loaded):
            return self._view.body
        return ""

    @property
    def last_modified(self) -> int | None:
        if isinstance(self._view, Loaded):
            return self._view.last_modified
        return None

    @property
    def can_delete(self) -> bool:
        return isinstance(self._view, Loaded)

    def add_listener(self, listener: ViewListener) -> None:
        """Called with the new view after every view change."""
        self._view_listeners.append(listener)

    def add_title_listener(self, listener: TitleListener) -> None:
        """Called with ``(note_id, title)`` after every local title edit."""
        self._title_listeners.append(listener)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def show(self, note_id: str | None) -> None:
        """Display ``note_id`` (None clears the editor). Same id is a no-op."""
        if note_id is not None and note_id == self.note_id:
            return
        if note_id is None and isinstance(self._view, Empty):
            return

        self._release()
        if note_id is None:
            self._set_view(Empty())
            return

        self._generation += 1
        token = (note_id, self._generation)
        self._token = token
        self._set_view(Loading(note_id))
        self._subscription = self._gateway.subscribe(
            self._context.uid,
            note_id,
            functools.partial(self._on_value, token),
            functools.partial(self._on_error, token),
        )

    def unmount(self) -> None:
        self._release()

    def _release(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        self._token = None
        self._last_local_stamp = None
        self._pending_delete = None

    # ------------------------------------------------------------------
    # Store callbacks
    # ------------------------------------------------------------------

    def _on_value(self, token: Token, snapshot: Snapshot) -> None:
        if token != self._token:
            logger.debug("Dropped note snapshot for previous selection", note_id=token[0])
            return

        note_id = token[0]
        if not snapshot.exists():
            if self._pending_delete == note_id:
                return
            missing = NoteMissing(note_id)
            logger.error("Not able to read note", note_id=note_id, code=missing.code, error=str(missing))
            self._set_view(NotFound(note_id))
            return

        note = snapshot.value()
        if self._last_local_stamp is not None and (
            note.last_modified is None or note.last_modified < self._last_local_stamp
        ):
            logger.debug(
                "Dropped note snapshot older than local edit",
                note_id=note_id,
                last_modified=note.last_modified,
            )
            return

        self._set_view(Loaded(note_id, note.title, note.body, note.last_modified))

    def _on_error(self, token: Token, error: Exception) -> None:
        if token != self._token:
            return
        logger.error("Read note failed", note_id=token[0], error=str(error))
        self._set_view(Failed(token[0], error))

    # ------------------------------------------------------------------
    # Local edits
    # ------------------------------------------------------------------

    async def change_title(self, title: str) -> None:
        if not isinstance(self._view, Loaded):
            return
        view = self._apply_local(title=title)
        for listener in list(self._title_listeners):
            listener(view.note_id, title)
        await self._write(view)

    async def change_body(self, body: str) -> None:
        if not isinstance(self._view, Loaded):
            return
        await self._write(self._apply_local(body=body))

    def _next_stamp(self) -> int:
        stamp = self._clock()
        if self._last_local_stamp is not None and stamp <= self._last_local_stamp:
            stamp = self._last_local_stamp + 1
        self._last_local_stamp = stamp
        return stamp

    def _apply_local(self, **fields: str) -> Loaded:
        view = replace(self._view, last_modified=self._next_stamp(), **fields)
        self._set_view(view)
        return view

    async def _write(self, view: Loaded) -> None:
        try:
            await self._gateway.update(
                self._context.uid,
                view.note_id,
                view.title,
                view.body,
                last_modified=view.last_modified,
            )
        except WriteFailure as e:
            logger.error("Write note failed", note_id=view.note_id, error=str(e))

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self) -> bool:
        """
        Delete the displayed note and go back to the root path.

        Returns:
            True if the note was deleted
        """
        if not isinstance(self._view, Loaded):
            return False

        note_id = self._view.note_id
        self._pending_delete = note_id
        try:
            await self._gateway.delete(self._context.uid, note_id)
        except DeleteFailure as e:
            logger.error("Delete note failed", note_id=note_id, error=str(e))
            if self._pending_delete == note_id:
                self._pending_delete = None
            return False

        if self.note_id == note_id:
            self._release()
            self._set_view(Empty())
            self._router.navigate_to(ROOT_PATH)
        return True

    def _set_view(self, view: EditorView) -> None:
        self._view = view
        for listener in list(self._view_listeners):
            listener(view)
