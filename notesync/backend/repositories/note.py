"""
Note Repository.

Data access layer for notes. Every query is scoped to one owner uid.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from notesync.backend.models.note import Note
from notesync.backend.repositories.base import BaseRepository


class NoteRepository(BaseRepository[Note]):
    """Repository for the Note model, keyed by (uid, note_id)."""

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def get(self, uid: str, note_id: str) -> Note:
        """
        Raises:
            NotFoundError: If the user has no note with this id
        """
        return await self._one(Note.uid == uid, Note.note_id == note_id)

    async def get_or_none(self, uid: str, note_id: str) -> Note | None:
        return await self._one_or_none(Note.uid == uid, Note.note_id == note_id)

    async def list_for_user(self, uid: str) -> list[Note]:
        """All notes of one user, ordered by note id."""
        return await self._all(Note.uid == uid, order_by=Note.note_id)

    async def put(self, uid: str, note_id: str, **fields: Any) -> Note:
        """Create the note, or replace its fields if it already exists."""
        existing = await self.get_or_none(uid, note_id)
        if existing is None:
            return await self.create(uid=uid, note_id=note_id, **fields)
        return await self._apply(existing, **fields)

    async def update(self, uid: str, note_id: str, **fields: Any) -> Note:
        """
        Raises:
            NotFoundError: If the note does not exist
        """
        note = await self.get(uid, note_id)
        return await self._apply(note, **fields)

    async def delete(self, uid: str, note_id: str) -> None:
        """
        Raises:
            NotFoundError: If the note does not exist
        """
        note = await self.get(uid, note_id)
        await self._remove(note)
