"""
Note Client Test Fixtures.

FakeNoteGateway records every call and hands the test the callbacks of
each read, so a test decides exactly when and in which order the store
answers.
"""

import asyncio
from dataclasses import dataclass, field

import pytest

from notesync.client.auth import AuthContext
from notesync.client.gateway import NoteGateway
from notesync.client.navigation import Router
from notesync.client.snapshot import (
    ErrorCallback,
    Note,
    Snapshot,
    SnapshotValue,
    Subscription,
    ValueCallback,
)

UID = "user-1"


@dataclass
class FakeRead:
    uid: str
    note_id: str | None
    on_value: ValueCallback
    on_error: ErrorCallback
    subscription: Subscription = field(default_factory=Subscription)

    def push(self, value: SnapshotValue) -> None:
        self.on_value(Snapshot(value))

    def fail(self, error: Exception) -> None:
        self.on_error(error)


class FakeNoteGateway(NoteGateway):
    def __init__(self) -> None:
        self.reads: list[FakeRead] = []
        self.subscriptions: list[FakeRead] = []
        self.collection_subscriptions: list[FakeRead] = []
        self.creates: list[tuple[str, str, Note]] = []
        self.updates: list[tuple[str, str, str, str, int | None]] = []
        self.deletes: list[tuple[str, str]] = []
        self.write_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.delete_gate: asyncio.Event | None = None

    def read_once(self, uid, note_id, on_value, on_error) -> Subscription:
        read = FakeRead(uid, note_id, on_value, on_error)
        self.reads.append(read)
        return read.subscription

    def subscribe(self, uid, note_id, on_value, on_error) -> Subscription:
        read = FakeRead(uid, note_id, on_value, on_error)
        self.subscriptions.append(read)
        return read.subscription

    def subscribe_all(self, uid, on_value, on_error) -> Subscription:
        read = FakeRead(uid, None, on_value, on_error)
        self.collection_subscriptions.append(read)
        return read.subscription

    async def create(self, uid, note_id, note) -> None:
        self.creates.append((uid, note_id, note))
        if self.write_error is not None:
            raise self.write_error

    async def update(self, uid, note_id, title, body, last_modified=None) -> None:
        self.updates.append((uid, note_id, title, body, last_modified))
        if self.write_error is not None:
            raise self.write_error

    async def delete(self, uid, note_id) -> None:
        self.deletes.append((uid, note_id))
        if self.delete_gate is not None:
            await self.delete_gate.wait()
        if self.delete_error is not None:
            raise self.delete_error


@pytest.fixture
def gateway() -> FakeNoteGateway:
    return FakeNoteGateway()


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def context() -> AuthContext:
    return AuthContext(uid=UID)
