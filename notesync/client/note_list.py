"""
Note List Presenter.

Live list of the user's notes for the sidebar. Entries are ordered by note
id and the entry matching the current route is marked selected.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace

from notesync.backend.core.logging import get_logger
from notesync.client.auth import AuthContext
from notesync.client.gateway import NoteGateway
from notesync.client.navigation import Router, note_path
from notesync.client.snapshot import Note, Snapshot, Subscription

logger = get_logger(__name__)

UNTITLED = "Untitled"


@dataclass(frozen=True)
class NoteListEntry:
    note_id: str
    label: str
    selected: bool


class NoteListPresenter:
    """
    Subscribes to every note of the user and renders list entries.

    A failed subscription keeps the last known notes and sets ``error``;
    the next successful push clears it.
    """

    def __init__(self, context: AuthContext, gateway: NoteGateway, router: Router) -> None:
        self._context = context
        self._gateway = gateway
        self._router = router
        self._notes: dict[str, Note] = {}
        self._loaded = False
        self._error: Exception | None = None
        self._subscription: Subscription | None = None
        self._remove_route_listener: Callable[[], None] | None = None
        self._listeners: list[Callable[[], None]] = []

    @property
    def loaded(self) -> bool:
        """True once the first collection snapshot arrived."""
        return self._loaded

    @property
    def error(self) -> Exception | None:
        return self._error

    @property
    def entries(self) -> list[NoteListEntry]:
        selected = self._router.selected_note_id
        return [
            NoteListEntry(note_id=note_id, label=note.title or UNTITLED, selected=note_id == selected)
            for note_id, note in sorted(self._notes.items())
        ]

    @property
    def first_note_id(self) -> str | None:
        return min(self._notes, default=None)

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Called without arguments whenever ``entries`` may have changed."""
        self._listeners.append(listener)

    def mount(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self._gateway.subscribe_all(
            self._context.uid,
            self._on_value,
            self._on_error,
        )
        self._remove_route_listener = self._router.add_listener(lambda _path: self._notify())

    def unmount(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
        if self._remove_route_listener is not None:
            self._remove_route_listener()
            self._remove_route_listener = None

    def select(self, note_id: str) -> None:
        self._router.navigate_to(note_path(note_id))

    def rename(self, note_id: str, title: str) -> None:
        """Show a title edit before the store pushes it back."""
        note = self._notes.get(note_id)
        if note is None:
            return
        self._notes[note_id] = replace(note, title=title)
        self._notify()

    def _on_value(self, snapshot: Snapshot) -> None:
        self._notes = dict(snapshot.value() or {})
        self._loaded = True
        self._error = None
        self._notify()

    def _on_error(self, error: Exception) -> None:
        logger.error("Read notes failed", error=str(error))
        self._error = error
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
