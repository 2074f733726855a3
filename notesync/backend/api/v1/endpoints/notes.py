"""
Notes API Endpoints.

Per-user note storage. Every route lives under /users/{uid}/notes and is
only reachable with a bearer token whose subject is {uid}.
"""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from notesync.backend.core.config import get_app_config
from notesync.backend.core.dependencies import DbSession, OwnerUid, RequestId, SessionFactory
from notesync.backend.events.feed import get_change_feed
from notesync.backend.events.publishers import note_payload
from notesync.backend.events.stream import note_event_stream
from notesync.backend.schemas.base import ApiResponse, ResponseMetadata
from notesync.backend.schemas.note import NotePatch, NoteResponse, NoteWrite
from notesync.backend.services.note import NoteService

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[dict[str, NoteResponse]],
    summary="List notes",
    description="All notes of the user as a mapping of note id to note.",
)
async def list_notes(
    uid: OwnerUid,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[dict[str, NoteResponse]]:
    service = NoteService(db)
    notes = await service.list_notes(uid)
    return ApiResponse(
        data={note.note_id: NoteResponse.model_validate(note) for note in notes},
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/stream",
    summary="Stream note changes",
    description="Server-Sent Events: a snapshot of all notes, then one event per change.",
    response_class=StreamingResponse,
)
async def stream_notes(uid: OwnerUid, session_factory: SessionFactory) -> StreamingResponse:
    async def load_snapshot() -> dict[str, dict[str, Any]]:
        async with session_factory() as session:
            notes = await NoteService(session).list_notes(uid)
        return {note.note_id: note_payload(note) for note in notes}

    events = note_event_stream(
        get_change_feed(),
        uid,
        load_snapshot,
        heartbeat_seconds=get_app_config().events.feed.heartbeat_seconds,
    )
    return StreamingResponse(
        events,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Get a note",
    description="Get a single note. 404 when the user has no note with this id.",
)
async def get_note(
    uid: OwnerUid,
    note_id: str,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    service = NoteService(db)
    note = await service.get_note(uid, note_id)
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.put(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Create or replace a note",
)
async def put_note(
    uid: OwnerUid,
    note_id: str,
    data: NoteWrite,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    service = NoteService(db)
    note = await service.put_note(uid, note_id, data, correlation_id=request_id)
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.patch(
    "/{note_id}",
    response_model=ApiResponse[NoteResponse],
    summary="Update a note",
    description="Only provided fields are updated.",
)
async def update_note(
    uid: OwnerUid,
    note_id: str,
    data: NotePatch,
    db: DbSession,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    service = NoteService(db)
    note = await service.update_note(uid, note_id, data, correlation_id=request_id)
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.delete(
    "/{note_id}",
    status_code=204,
    summary="Delete a note",
)
async def delete_note(
    uid: OwnerUid,
    note_id: str,
    db: DbSession,
    request_id: RequestId,
) -> None:
    service = NoteService(db)
    await service.delete_note(uid, note_id, correlation_id=request_id)
