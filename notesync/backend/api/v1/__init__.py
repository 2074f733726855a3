"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from notesync.backend.api.v1.endpoints import auth, notes

router = APIRouter()

# Anonymous sign-in
router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Per-user notes
router.include_router(notes.router, prefix="/users/{uid}/notes", tags=["notes"])
