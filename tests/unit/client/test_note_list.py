"""
Unit Tests for the Note List Presenter.
"""

import pytest
from structlog.testing import capture_logs

from notesync.client.errors import ReadFailure
from notesync.client.note_list import UNTITLED, NoteListEntry, NoteListPresenter
from notesync.client.snapshot import Note


@pytest.fixture
def presenter(context, gateway, router) -> NoteListPresenter:
    presenter = NoteListPresenter(context, gateway, router)
    presenter.mount()
    return presenter


@pytest.fixture
def collection(gateway):
    return gateway.collection_subscriptions[0]


class TestEntries:
    """Rendering pushes into entries."""

    def test_mount_subscribes_to_collection(self, presenter, gateway, context):
        assert len(gateway.collection_subscriptions) == 1
        assert gateway.collection_subscriptions[0].uid == context.uid
        assert presenter.entries == []
        assert presenter.loaded is False

    def test_entries_sorted_by_note_id(self, presenter, collection):
        collection.push({
            "c": Note(title="Third"),
            "a": Note(title="First"),
            "b": Note(title="Second"),
        })

        assert [entry.note_id for entry in presenter.entries] == ["a", "b", "c"]
        assert presenter.loaded is True

    def test_empty_title_labelled_untitled(self, presenter, collection):
        collection.push({"a": Note(title="")})

        assert presenter.entries == [NoteListEntry("a", UNTITLED, False)]

    def test_selected_entry_follows_route(self, presenter, collection, router):
        collection.push({"a": Note(title="A"), "b": Note(title="B")})
        router.navigate_to("/b")

        assert [entry.selected for entry in presenter.entries] == [False, True]

    def test_selected_note_missing_from_collection(self, presenter, collection, router):
        router.navigate_to("/deleted")
        collection.push({"a": Note(title="A")})

        assert presenter.entries == [NoteListEntry("a", "A", False)]

    def test_null_collection_means_no_notes(self, presenter, collection):
        collection.push({"a": Note(title="A")})
        collection.push(None)

        assert presenter.entries == []

    def test_push_replaces_previous_collection(self, presenter, collection):
        collection.push({"a": Note(title="A")})
        collection.push({"b": Note(title="B")})

        assert [entry.note_id for entry in presenter.entries] == ["b"]

    def test_first_note_id_is_smallest(self, presenter, collection):
        assert presenter.first_note_id is None
        collection.push({"m": Note(), "c": Note(), "x": Note()})

        assert presenter.first_note_id == "c"


class TestListeners:
    def test_listener_called_on_push_and_route_change(self, presenter, collection, router):
        calls = []
        presenter.add_listener(lambda: calls.append(True))

        collection.push({"a": Note()})
        router.navigate_to("/a")

        assert len(calls) == 2

    def test_unmount_closes_subscription_and_stops_route_updates(self, presenter, collection, router):
        calls = []
        presenter.add_listener(lambda: calls.append(True))

        presenter.unmount()
        router.navigate_to("/a")

        assert collection.subscription.closed
        assert calls == []


class TestErrors:
    def test_failure_sets_error_and_logs(self, presenter, collection):
        with capture_logs() as logs:
            collection.fail(ReadFailure("permission denied"))

        assert isinstance(presenter.error, ReadFailure)
        assert logs[0]["event"] == "Read notes failed"
        assert logs[0]["error"] == "permission denied"

    def test_next_success_clears_error(self, presenter, collection):
        collection.fail(ReadFailure())
        collection.push({"a": Note(title="A")})

        assert presenter.error is None
        assert presenter.entries == [NoteListEntry("a", "A", False)]

    def test_failure_keeps_last_known_entries(self, presenter, collection):
        collection.push({"a": Note(title="A")})
        collection.fail(ReadFailure())

        assert presenter.entries == [NoteListEntry("a", "A", False)]


class TestActions:
    def test_select_navigates_to_note(self, presenter, router):
        presenter.select("abc")

        assert router.path == "/abc"

    def test_rename_updates_label_immediately(self, presenter, collection):
        collection.push({"a": Note(title="Old", body="kept")})

        presenter.rename("a", "New")

        assert presenter.entries == [NoteListEntry("a", "New", False)]

    def test_rename_unknown_note_is_ignored(self, presenter, collection):
        collection.push({"a": Note(title="A")})

        presenter.rename("zzz", "Ghost")

        assert [entry.note_id for entry in presenter.entries] == ["a"]
