"""
Gateway Value Types.

A Snapshot is what a read or subscription delivers: one note, no note, or
the whole collection of a user. A Subscription is the handle returned by
every read; closing it stops further callbacks.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Note:
    """Stored note fields. Identity (uid, note_id) lives outside the value."""

    title: str = ""
    body: str = ""
    last_modified: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Note":
        return cls(
            title=data.get("title") or "",
            body=data.get("body") or "",
            last_modified=data.get("last_modified"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "body": self.body, "last_modified": self.last_modified}


SnapshotValue = Union[Note, dict[str, Note], None]


@dataclass(frozen=True)
class Snapshot:
    data: SnapshotValue = None

    def value(self) -> SnapshotValue:
        """The note, ``None`` when nothing is stored at the key, or the collection."""
        return self.data

    def exists(self) -> bool:
        return self.data is not None


ValueCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]


class Subscription:
    """
    Handle for a read or live subscription.

    ``close()`` is idempotent and runs the gateway's cleanup once.
    """

    def __init__(self, on_close: Callable[[], None] | None = None) -> None:
        self._on_close = on_close
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()
