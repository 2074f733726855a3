"""
Unit Tests for the Note Editor.

The store is a FakeNoteGateway, so every test pushes snapshots and errors
by hand and in the order it wants.
"""

import asyncio
import itertools

import pytest
from structlog.testing import capture_logs

from notesync.client.editor import (
    NOT_FOUND_TEXT,
    Empty,
    Failed,
    Loaded,
    Loading,
    NoteEditor,
    NotFound,
)
from notesync.client.errors import DeleteFailure, ReadFailure, WriteFailure
from notesync.client.snapshot import Note


def counting_clock(start: int = 1000):
    counter = itertools.count(start)
    return lambda: next(counter)


@pytest.fixture
def editor(context, gateway, router) -> NoteEditor:
    return NoteEditor(context, gateway, router, clock=counting_clock())


@pytest.fixture
def loaded_editor(editor, gateway) -> NoteEditor:
    editor.show("n1")
    gateway.subscriptions[-1].push(Note(title="Groceries", body="milk", last_modified=10))
    return editor


class TestShow:
    """Selection changes and subscriptions."""

    def test_starts_empty(self, editor):
        assert editor.view == Empty()
        assert editor.note_id is None
        assert editor.display_title == ""
        assert editor.display_body == ""

    def test_show_subscribes_and_enters_loading(self, editor, gateway, context):
        editor.show("n1")

        assert editor.view == Loading("n1")
        assert len(gateway.subscriptions) == 1
        assert gateway.subscriptions[0].uid == context.uid
        assert gateway.subscriptions[0].note_id == "n1"

    def test_showing_same_note_again_is_noop(self, editor, gateway):
        editor.show("n1")
        editor.show("n1")

        assert len(gateway.subscriptions) == 1

    def test_switching_note_closes_previous_subscription(self, editor, gateway):
        editor.show("n1")
        editor.show("n2")

        assert gateway.subscriptions[0].subscription.closed
        assert not gateway.subscriptions[1].subscription.closed
        assert editor.view == Loading("n2")

    def test_show_none_clears_editor(self, loaded_editor, gateway):
        loaded_editor.show(None)

        assert loaded_editor.view == Empty()
        assert gateway.subscriptions[0].subscription.closed

    def test_unmount_closes_subscription(self, editor, gateway):
        editor.show("n1")
        editor.unmount()

        assert gateway.subscriptions[0].subscription.closed

    def test_view_listener_sees_every_transition(self, editor, gateway):
        seen = []
        editor.add_listener(seen.append)

        editor.show("n1")
        gateway.subscriptions[0].push(Note(title="t", body="b"))

        assert seen == [Loading("n1"), Loaded("n1", "t", "b", None)]


class TestStoreCallbacks:
    """Read results and errors."""

    def test_value_loads_note(self, editor, gateway):
        editor.show("n1")
        gateway.subscriptions[0].push(Note(title="Groceries", body="milk", last_modified=10))

        assert editor.view == Loaded("n1", "Groceries", "milk", 10)
        assert editor.display_title == "Groceries"
        assert editor.display_body == "milk"
        assert editor.last_modified == 10
        assert editor.can_delete

    def test_missing_note_shows_placeholder_and_logs(self, editor, gateway):
        editor.show("gone")

        with capture_logs() as logs:
            gateway.subscriptions[0].push(None)

        assert editor.view == NotFound("gone")
        assert editor.display_title == NOT_FOUND_TEXT
        assert editor.display_body == ""
        assert not editor.can_delete
        assert {"event": "Not able to read note", "note_id": "gone", "log_level": "error"}.items() <= logs[0].items()
        assert logs[0]["code"] == "CLIENT_NOTE_MISSING"
        assert logs[0]["error"] == "No note stored at gone"

    def test_read_error_shows_placeholder_and_logs(self, editor, gateway):
        editor.show("n1")
        error = ReadFailure("permission denied")

        with capture_logs() as logs:
            gateway.subscriptions[0].fail(error)

        assert editor.view == Failed("n1", error)
        assert editor.display_title == NOT_FOUND_TEXT
        assert editor.display_body == ""
        assert logs[0]["event"] == "Read note failed"
        assert logs[0]["error"] == "permission denied"

    def test_late_value_for_previous_note_is_dropped(self, editor, gateway):
        editor.show("n1")
        editor.show("n2")

        gateway.subscriptions[0].push(Note(title="old", body="stale"))

        assert editor.view == Loading("n2")

    def test_late_error_for_previous_note_is_dropped(self, editor, gateway):
        editor.show("n1")
        editor.show("n2")
        gateway.subscriptions[1].push(Note(title="new", body=""))

        gateway.subscriptions[0].fail(ReadFailure())

        assert editor.view == Loaded("n2", "new", "", None)

    def test_value_after_reselecting_same_note_uses_new_subscription(self, editor, gateway):
        editor.show("n1")
        editor.show("n2")
        editor.show("n1")

        gateway.subscriptions[0].push(Note(title="first subscription"))
        assert editor.view == Loading("n1")

        gateway.subscriptions[2].push(Note(title="third subscription"))
        assert editor.display_title == "third subscription"

    def test_remote_change_replaces_displayed_note(self, loaded_editor, gateway):
        gateway.subscriptions[0].push(Note(title="Groceries", body="milk, eggs", last_modified=20))

        assert loaded_editor.display_body == "milk, eggs"


class TestLocalEdits:
    """Title and body edits write through immediately."""

    @pytest.mark.asyncio
    async def test_change_title_updates_view_and_writes(self, loaded_editor, gateway, context):
        await loaded_editor.change_title("Shopping")

        assert loaded_editor.display_title == "Shopping"
        assert loaded_editor.display_body == "milk"
        assert gateway.updates == [(context.uid, "n1", "Shopping", "milk", 1000)]

    @pytest.mark.asyncio
    async def test_change_body_updates_view_and_writes(self, loaded_editor, gateway, context):
        await loaded_editor.change_body("milk, bread")

        assert loaded_editor.display_body == "milk, bread"
        assert gateway.updates == [(context.uid, "n1", "Groceries", "milk, bread", 1000)]

    @pytest.mark.asyncio
    async def test_every_edit_writes(self, loaded_editor, gateway):
        await loaded_editor.change_body("m")
        await loaded_editor.change_body("mi")
        await loaded_editor.change_title("G")

        assert [u[2:4] for u in gateway.updates] == [
            ("Groceries", "m"),
            ("Groceries", "mi"),
            ("G", "mi"),
        ]

    @pytest.mark.asyncio
    async def test_title_listener_receives_note_id_and_title(self, loaded_editor):
        seen = []
        loaded_editor.add_title_listener(lambda note_id, title: seen.append((note_id, title)))

        await loaded_editor.change_title("Shopping")
        await loaded_editor.change_body("ignored by title listeners")

        assert seen == [("n1", "Shopping")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("setup", ["empty", "loading", "not_found", "failed"])
    async def test_edits_outside_loaded_are_ignored(self, editor, gateway, setup):
        if setup != "empty":
            editor.show("n1")
        if setup == "not_found":
            gateway.subscriptions[0].push(None)
        elif setup == "failed":
            gateway.subscriptions[0].fail(ReadFailure())
        view_before = editor.view

        await editor.change_title("x")
        await editor.change_body("y")

        assert gateway.updates == []
        assert editor.view == view_before

    @pytest.mark.asyncio
    async def test_write_failure_is_logged_and_local_edit_kept(self, loaded_editor, gateway):
        gateway.write_error = WriteFailure("offline")

        with capture_logs() as logs:
            await loaded_editor.change_title("Shopping")

        assert loaded_editor.display_title == "Shopping"
        assert any(log["event"] == "Write note failed" and log["error"] == "offline" for log in logs)


class TestLocalEchoGuard:
    """Pushes of superseded local writes never overwrite newer edits."""

    @pytest.mark.asyncio
    async def test_echo_of_older_write_is_dropped(self, loaded_editor, gateway):
        await loaded_editor.change_body("m")
        await loaded_editor.change_body("mi")

        gateway.subscriptions[0].push(Note(title="Groceries", body="m", last_modified=1000))

        assert loaded_editor.display_body == "mi"

    @pytest.mark.asyncio
    async def test_echo_of_latest_write_is_applied(self, loaded_editor, gateway):
        await loaded_editor.change_body("m")
        await loaded_editor.change_body("mi")

        gateway.subscriptions[0].push(Note(title="Groceries", body="mi", last_modified=1001))

        assert loaded_editor.view == Loaded("n1", "Groceries", "mi", 1001)

    @pytest.mark.asyncio
    async def test_newer_remote_change_wins(self, loaded_editor, gateway):
        await loaded_editor.change_body("mine")

        gateway.subscriptions[0].push(Note(title="Groceries", body="theirs", last_modified=5000))

        assert loaded_editor.display_body == "theirs"

    @pytest.mark.asyncio
    async def test_unstamped_push_after_local_edit_is_dropped(self, loaded_editor, gateway):
        await loaded_editor.change_body("mine")

        gateway.subscriptions[0].push(Note(title="Groceries", body="old"))

        assert loaded_editor.display_body == "mine"

    @pytest.mark.asyncio
    async def test_stamps_strictly_increase_with_coarse_clock(self, context, gateway, router):
        editor = NoteEditor(context, gateway, router, clock=lambda: 500)
        editor.show("n1")
        gateway.subscriptions[0].push(Note())

        await editor.change_body("a")
        await editor.change_body("ab")

        assert [u[4] for u in gateway.updates] == [500, 501]

    @pytest.mark.asyncio
    async def test_switching_note_resets_local_edits(self, loaded_editor, gateway):
        await loaded_editor.change_body("mine")
        loaded_editor.show("n2")

        gateway.subscriptions[1].push(Note(title="Other", body="unstamped"))

        assert loaded_editor.display_body == "unstamped"


class TestDelete:
    """Deleting the displayed note."""

    @pytest.mark.asyncio
    async def test_delete_clears_editor_and_navigates_home(self, loaded_editor, gateway, router, context):
        router.navigate_to("/n1")

        deleted = await loaded_editor.delete()

        assert deleted is True
        assert gateway.deletes == [(context.uid, "n1")]
        assert loaded_editor.view == Empty()
        assert gateway.subscriptions[0].subscription.closed
        assert router.path == "/"

    @pytest.mark.asyncio
    async def test_delete_failure_keeps_state_and_logs(self, loaded_editor, gateway, router):
        router.navigate_to("/n1")
        gateway.delete_error = DeleteFailure("denied")

        with capture_logs() as logs:
            deleted = await loaded_editor.delete()

        assert deleted is False
        assert loaded_editor.view == Loaded("n1", "Groceries", "milk", 10)
        assert not gateway.subscriptions[0].subscription.closed
        assert router.path == "/n1"
        assert logs[-1]["event"] == "Delete note failed"
        assert logs[-1]["error"] == "denied"

    @pytest.mark.asyncio
    async def test_delete_only_while_loaded(self, editor, gateway):
        editor.show("n1")

        assert editor.can_delete is False
        assert await editor.delete() is False
        assert gateway.deletes == []

    @pytest.mark.asyncio
    async def test_delete_finishing_after_switch_keeps_new_selection(self, loaded_editor, gateway, router):
        router.navigate_to("/n1")
        gateway.delete_gate = asyncio.Event()
        pending = asyncio.create_task(loaded_editor.delete())
        await asyncio.sleep(0)

        router.navigate_to("/n2")
        loaded_editor.show("n2")
        gateway.subscriptions[-1].push(Note(title="Other", body="b", last_modified=20))
        gateway.delete_gate.set()

        assert await pending is True
        assert router.path == "/n2"
        assert loaded_editor.view == Loaded("n2", "Other", "b", 20)
        assert not gateway.subscriptions[-1].subscription.closed
