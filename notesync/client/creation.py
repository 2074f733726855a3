"""
Note Creation.
"""

from collections.abc import Callable

from notesync.backend.core.logging import get_logger
from notesync.backend.core.utils import now_ms
from notesync.client.auth import AuthContext
from notesync.client.errors import WriteFailure
from notesync.client.gateway import NoteGateway
from notesync.client.ids import new_note_id
from notesync.client.navigation import Router, note_path
from notesync.client.snapshot import Note

logger = get_logger(__name__)

DEFAULT_TITLE = "untitled"


async def create_note(
    context: AuthContext,
    gateway: NoteGateway,
    router: Router,
    allocate: Callable[[], str] = new_note_id,
    title: str = DEFAULT_TITLE,
    seed_body_with_id: bool = True,
) -> str | None:
    """
    Store a new note and select it.

    Navigation does not wait for the note list to receive the new note.

    Returns:
        The new note id, or None if the write failed
    """
    note_id = allocate()
    note = Note(
        title=title,
        body=note_id if seed_body_with_id else "",
        last_modified=now_ms(),
    )
    try:
        await gateway.create(context.uid, note_id, note)
    except WriteFailure as e:
        logger.error("Create note failed", note_id=note_id, error=str(e))
        return None

    logger.info("Note created", note_id=note_id)
    router.navigate_to(note_path(note_id))
    return note_id
