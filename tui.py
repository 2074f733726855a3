"""
notesync TUI Client.

Renders the note client shell in the terminal: a sidebar with the note
list and an editor with title, body and last-modified date. Narrow
terminals show one pane at a time, like a phone would.

Usage:
    python tui.py
    python tui.py --local
    python tui.py --debug
"""

from __future__ import annotations

import sys

from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import Resize
from textual.widgets import Footer, Header, Input, Label, ListItem, ListView, Static, TextArea

from notesync.backend.core.logging import get_logger, log_with_source, setup_logging
from notesync.client.editor import Loaded
from notesync.client.layout import Layout
from notesync.client.local import LocalAuthProvider, LocalNoteGateway
from notesync.client.navigation import ROOT_PATH
from notesync.client.remote import APIClient, HttpAuthProvider, HttpNoteGateway
from notesync.client.shell import ClientOptions, Shell, format_last_modified

logger = get_logger(__name__)


class NoteItem(ListItem):
    """Sidebar entry remembering which note it stands for."""

    def __init__(self, note_id: str, label: str) -> None:
        super().__init__(Label(label))
        self.note_id = note_id


class NotesTUI(App):
    """Terminal front-end for the note client shell."""

    TITLE = "notesync"
    SUB_TITLE = "Notes"

    CSS = """
    #alert {
        display: none;
        height: 1fr;
        content-align: center middle;
        color: $error;
        text-style: bold;
    }

    #workspace {
        height: 1fr;
    }

    #sidebar {
        width: 36;
        border-right: solid $primary;
    }

    #workspace.sidebar-only #sidebar {
        width: 1fr;
        border-right: none;
    }

    #workspace.sidebar-only #editor {
        display: none;
    }

    #workspace.editor-only #sidebar {
        display: none;
    }

    #note-list {
        height: 1fr;
    }

    #list-error {
        color: $error;
        height: auto;
    }

    #editor {
        width: 1fr;
        padding: 0 1;
    }

    #note-body {
        height: 1fr;
    }

    #last-modified {
        height: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("ctrl+n", "new_note", "New Note"),
        Binding("ctrl+d", "delete_note", "Delete"),
        Binding("escape", "show_list", "Notes"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, shell: Shell, client: APIClient | None = None) -> None:
        super().__init__()
        self.shell = shell
        self._client = client

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(id="alert")
        with Horizontal(id="workspace"):
            with Vertical(id="sidebar"):
                yield ListView(id="note-list")
                yield Static("", id="list-error")
            with Vertical(id="editor"):
                yield Input(placeholder="Title", id="note-title")
                yield TextArea(id="note-body")
                yield Static("", id="last-modified")
        yield Footer()

    async def on_mount(self) -> None:
        self.query_one("#workspace").display = False
        workspace = await self.shell.start()
        if workspace is None:
            self._show_alert()
            return

        workspace.editor.add_listener(lambda _view: self._guarded(self._render_editor))
        workspace.note_list.add_listener(lambda: self.call_later(self._render_list))
        self.shell.router.add_listener(lambda _path: self._guarded(self._apply_layout))

        self.query_one("#workspace").display = True
        self._render_editor()
        await self._render_list()
        self._apply_layout()
        log_with_source(logger, "tui", "info", "Workspace mounted", uid=workspace.context.uid)

    async def on_unmount(self) -> None:
        self.shell.stop()
        if self._client is not None:
            await self._client.close()

    def on_resize(self, event: Resize) -> None:
        self._guarded(self._apply_layout)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _guarded(self, render, *args) -> None:
        with self.shell.boundary.guard(frontend="tui", handler=render.__name__):
            render(*args)
        self._check_boundary()

    def _check_boundary(self) -> None:
        if self.shell.boundary.failed:
            self._show_alert()

    def _show_alert(self) -> None:
        self.query_one("#workspace").display = False
        alert = self.query_one("#alert", Static)
        alert.update(Text(self.shell.alert or ""))
        alert.display = True

    def _apply_layout(self) -> None:
        layout = self.shell.layout(self.size.width)
        if layout is None:
            return
        workspace = self.query_one("#workspace")
        workspace.set_class(layout is Layout.SIDEBAR_ONLY, "sidebar-only")
        workspace.set_class(layout is Layout.EDITOR_ONLY, "editor-only")

    def _render_editor(self) -> None:
        editor = self.shell.workspace.editor
        editable = isinstance(editor.view, Loaded)

        title = self.query_one("#note-title", Input)
        body = self.query_one("#note-body", TextArea)
        with self.prevent(Input.Changed, TextArea.Changed):
            if title.value != editor.display_title:
                title.value = editor.display_title
            if body.text != editor.display_body:
                body.text = editor.display_body
        title.disabled = not editable
        body.disabled = not editable

        stamp = format_last_modified(editor.last_modified)
        self.query_one("#last-modified", Static).update(f"Last modified {stamp}" if stamp else "")

    async def _render_list(self) -> None:
        note_list = self.shell.workspace.note_list
        entries = note_list.entries

        list_view = self.query_one("#note-list", ListView)
        await list_view.clear()
        await list_view.extend(NoteItem(entry.note_id, entry.label) for entry in entries)
        for position, entry in enumerate(entries):
            if entry.selected:
                list_view.index = position

        error = self.query_one("#list-error", Static)
        error.update("Notes could not be loaded" if note_list.error else "")

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    @on(ListView.Selected, "#note-list")
    def on_note_selected(self, event: ListView.Selected) -> None:
        if isinstance(event.item, NoteItem) and self.shell.workspace is not None:
            self.shell.workspace.note_list.select(event.item.note_id)

    @on(Input.Changed, "#note-title")
    async def on_title_changed(self, event: Input.Changed) -> None:
        if self.shell.workspace is None:
            return
        with self.shell.boundary.guard(frontend="tui", handler="change_title"):
            await self.shell.workspace.editor.change_title(event.value)
        self._check_boundary()

    @on(TextArea.Changed, "#note-body")
    async def on_body_changed(self, event: TextArea.Changed) -> None:
        if self.shell.workspace is None:
            return
        with self.shell.boundary.guard(frontend="tui", handler="change_body"):
            await self.shell.workspace.editor.change_body(event.text_area.text)
        self._check_boundary()

    async def action_new_note(self) -> None:
        if self.shell.workspace is not None:
            await self.shell.workspace.new_note()

    async def action_delete_note(self) -> None:
        if self.shell.workspace is not None and self.shell.workspace.editor.can_delete:
            await self.shell.workspace.editor.delete()

    def action_show_list(self) -> None:
        self.shell.router.navigate_to(ROOT_PATH)


def build_app(local: bool = False) -> NotesTUI:
    """Wire the shell against the note store service, or in memory with ``local``."""
    options = ClientOptions.from_config(terminal=True)
    if local:
        shell = Shell(LocalAuthProvider(), LocalNoteGateway(), options=options)
        return NotesTUI(shell)

    client = APIClient(frontend="tui")
    shell = Shell(HttpAuthProvider(client), HttpNoteGateway(client), options=options)
    return NotesTUI(shell, client)


def main(local: bool = False, debug: bool = False) -> None:
    # The screen belongs to Textual; logs go to the JSONL file only.
    setup_logging(level="DEBUG" if debug else None, enable_console=False)
    build_app(local=local).run()


if __name__ == "__main__":
    main(local="--local" in sys.argv, debug="--debug" in sys.argv)
