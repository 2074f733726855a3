"""
Shell.

Top of the client: waits for anonymous sign-in, then mounts the workspace
(note list + editor) wired to the router. Frontends render from the
Shell's state and forward user input to its components.

Usage:
    shell = Shell(auth_provider, gateway, options=ClientOptions.from_config())
    await shell.start()
    if shell.alert:
        show_blocking_alert(shell.alert)
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from notesync.backend.core.logging import get_logger
from notesync.backend.core.utils import from_epoch_ms
from notesync.client.auth import ALERT_MESSAGE, AuthContext, AuthGate, AuthProvider
from notesync.client.creation import DEFAULT_TITLE, create_note
from notesync.client.editor import NoteEditor
from notesync.client.gateway import NoteGateway
from notesync.client.layout import SMALL_WIDTH, Layout, classify, select_layout
from notesync.client.navigation import Router, note_id_from_path, note_path
from notesync.client.note_list import NoteListPresenter

logger = get_logger(__name__)


def format_last_modified(value: int | None) -> str:
    """Long date of an epoch-milliseconds stamp, e.g. "April 10, 2019"."""
    if value is None:
        return ""
    moment = from_epoch_ms(value)
    return f"{moment:%B} {moment.day}, {moment.year}"


@dataclass(frozen=True)
class ClientOptions:
    small_width: int = SMALL_WIDTH
    default_title: str = DEFAULT_TITLE
    seed_body_with_id: bool = True
    root_redirect_to_first_note: bool = False

    @classmethod
    def from_config(cls, terminal: bool = False) -> "ClientOptions":
        """
        Options from client.yaml.

        Terminal frontends measure width in cells, so they use the
        separate ``layout.tui_small_width`` threshold.
        """
        from notesync.backend.core.config import get_app_config

        client = get_app_config().client
        return cls(
            small_width=client.layout.tui_small_width if terminal else client.layout.small_width,
            default_title=client.notes.default_title,
            seed_body_with_id=client.notes.seed_body_with_id,
            root_redirect_to_first_note=client.root_redirect_to_first_note,
        )


class ErrorBoundary:
    """
    Last line of defence for unexpected exceptions.

    A captured exception is logged with its context and replaces the UI
    with the generic alert.
    """

    def __init__(self) -> None:
        self.error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def message(self) -> str | None:
        return ALERT_MESSAGE if self.failed else None

    def capture(self, error: Exception, **context: Any) -> None:
        logger.error(
            "Unexpected error",
            error=str(error),
            error_type=type(error).__name__,
            exc_info=error,
            **context,
        )
        self.error = error

    @contextmanager
    def guard(self, **context: Any) -> Iterator[None]:
        try:
            yield
        except Exception as e:
            self.capture(e, **context)


class Workspace:
    """Note list and editor for one signed-in user, driven by the router."""

    def __init__(
        self,
        context: AuthContext,
        gateway: NoteGateway,
        router: Router,
        options: ClientOptions,
    ) -> None:
        self.context = context
        self.router = router
        self.options = options
        self._gateway = gateway
        self.note_list = NoteListPresenter(context, gateway, router)
        self.editor = NoteEditor(context, gateway, router)
        self.editor.add_title_listener(self.note_list.rename)
        self._remove_route_listener = None

    def mount(self) -> None:
        self._remove_route_listener = self.router.add_listener(self._on_route)
        if self.options.root_redirect_to_first_note:
            self.note_list.add_listener(self._redirect_root)
        self.note_list.mount()
        self.editor.show(self.router.selected_note_id)

    def unmount(self) -> None:
        if self._remove_route_listener is not None:
            self._remove_route_listener()
            self._remove_route_listener = None
        self.note_list.unmount()
        self.editor.unmount()

    def _on_route(self, path: str) -> None:
        self.editor.show(note_id_from_path(path))

    def _redirect_root(self) -> None:
        first = self.note_list.first_note_id
        if self.router.selected_note_id is None and first is not None:
            self.router.navigate_to(note_path(first))

    def layout(self, width: int) -> Layout:
        return select_layout(self.router.selected_note_id, classify(width, self.options.small_width))

    async def new_note(self) -> str | None:
        return await create_note(
            self.context,
            self._gateway,
            self.router,
            title=self.options.default_title,
            seed_body_with_id=self.options.seed_body_with_id,
        )


class Shell:
    """Auth gate plus workspace, with an error boundary around both."""

    def __init__(
        self,
        auth_provider: AuthProvider,
        gateway: NoteGateway,
        router: Router | None = None,
        options: ClientOptions | None = None,
    ) -> None:
        self.gate = AuthGate(auth_provider)
        self.router = router or Router()
        self.options = options or ClientOptions()
        self.boundary = ErrorBoundary()
        self.workspace: Workspace | None = None
        self._gateway = gateway

    @property
    def alert(self) -> str | None:
        """Blocking alert text; when set, nothing else is rendered."""
        return self.gate.alert or self.boundary.message

    async def start(self) -> Workspace | None:
        with self.boundary.guard(stage="start"):
            context = await self.gate.start()
            if context is None:
                return None
            self.workspace = Workspace(context, self._gateway, self.router, self.options)
            self.workspace.mount()
        return self.workspace

    def layout(self, width: int) -> Layout | None:
        """Layout to render, or None while no workspace is mounted."""
        if self.workspace is None or self.alert:
            return None
        return self.workspace.layout(width)

    def stop(self) -> None:
        if self.workspace is not None:
            self.workspace.unmount()
