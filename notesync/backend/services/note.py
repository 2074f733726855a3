"""
Note Service.

Business logic for the note store: per-user reads and writes, each
successful write announced on the change feed once it is committed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from notesync.backend.events.publishers import NoteEventPublisher
from notesync.backend.models.note import Note
from notesync.backend.repositories.note import NoteRepository
from notesync.backend.schemas.note import NotePatch, NoteWrite
from notesync.backend.services.base import BaseService


class NoteService(BaseService):
    """
    Service for note business logic.

    All operations are scoped to the owner ``uid``; ownership itself is
    checked by the route dependency before the service is reached.
    """

    def __init__(
        self,
        session: AsyncSession,
        publisher: NoteEventPublisher | None = None,
    ) -> None:
        super().__init__(session)
        self.repo = NoteRepository(session)
        self.publisher = publisher or NoteEventPublisher()

    async def get_note(self, uid: str, note_id: str) -> Note:
        """
        Raises:
            NotFoundError: If the note does not exist
        """
        return await self.repo.get(uid, note_id)

    async def list_notes(self, uid: str) -> list[Note]:
        """Return every note of the user, ordered by note id."""
        return await self.repo.list_for_user(uid)

    async def put_note(
        self,
        uid: str,
        note_id: str,
        data: NoteWrite,
        correlation_id: str,
    ) -> Note:
        """Create a note or replace all of its fields."""
        existed = await self.repo.get_or_none(uid, note_id) is not None
        self._log_operation("Writing note", uid=uid, note_id=note_id, replace=existed)

        note = await self._execute_db_operation(
            "put_note",
            self.repo.put(uid, note_id, **data.model_dump()),
        )
        await self._commit("put_note")
        self.publisher.note_changed(
            note,
            action="updated" if existed else "created",
            correlation_id=correlation_id,
        )
        return note

    async def update_note(
        self,
        uid: str,
        note_id: str,
        data: NotePatch,
        correlation_id: str,
    ) -> Note:
        """
        Update the fields present in ``data``.

        Raises:
            NotFoundError: If the note does not exist
        """
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            return await self.repo.get(uid, note_id)

        self._log_operation(
            "Updating note",
            uid=uid,
            note_id=note_id,
            fields=sorted(update_data),
        )
        note = await self._execute_db_operation(
            "update_note",
            self.repo.update(uid, note_id, **update_data),
        )
        await self._commit("update_note")
        self.publisher.note_changed(note, action="updated", correlation_id=correlation_id)
        return note

    async def delete_note(self, uid: str, note_id: str, correlation_id: str) -> None:
        """
        Raises:
            NotFoundError: If the note does not exist
        """
        self._log_operation("Deleting note", uid=uid, note_id=note_id)
        await self._execute_db_operation(
            "delete_note",
            self.repo.delete(uid, note_id),
        )
        await self._commit("delete_note")
        self.publisher.note_deleted(uid, note_id, correlation_id=correlation_id)
