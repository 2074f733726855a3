"""
Navigation.

Path based routing for the client. ``/`` means no note is selected and
``/<note_id>`` selects a note.
"""

from collections.abc import Callable

from notesync.backend.core.logging import get_logger

logger = get_logger(__name__)

ROOT_PATH = "/"

RouteListener = Callable[[str], None]


def note_path(note_id: str) -> str:
    return f"/{note_id}"


def note_id_from_path(path: str) -> str | None:
    """The selected note id of a path, or None for the root path."""
    segment = path.strip("/")
    return segment or None


class Router:
    """
    In-memory history with listeners.

    Listeners are called with the new path after every navigation that
    changes the path.
    """

    def __init__(self, initial_path: str = ROOT_PATH) -> None:
        self._history: list[str] = [self._normalize(initial_path)]
        self._listeners: list[RouteListener] = []

    @staticmethod
    def _normalize(path: str) -> str:
        note_id = note_id_from_path(path)
        return ROOT_PATH if note_id is None else note_path(note_id)

    @property
    def path(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def selected_note_id(self) -> str | None:
        return note_id_from_path(self.path)

    def add_listener(self, listener: RouteListener) -> Callable[[], None]:
        """Register a listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def navigate_to(self, path: str) -> None:
        path = self._normalize(path)
        if path == self.path:
            return
        self._history.append(path)
        logger.debug("Navigated", path=path)
        self._notify()

    def back(self) -> None:
        if len(self._history) < 2:
            return
        self._history.pop()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.path)
