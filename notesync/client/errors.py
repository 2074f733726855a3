"""
Client Errors.

Failures surfaced by gateways and auth providers. Each component handles
the errors of the operations it issues; nothing here is shown to the user
except the auth failure alert.
"""

from notesync.backend.core.exceptions import ApplicationError


class AuthFailure(ApplicationError):
    """Anonymous sign-in did not produce a user id."""

    def __init__(self, message: str = "Anonymous sign-in failed") -> None:
        super().__init__(message, code="CLIENT_AUTH_FAILED")


class ReadFailure(ApplicationError):
    """A read or subscription could not deliver data."""

    def __init__(self, message: str = "Read failed") -> None:
        super().__init__(message, code="CLIENT_READ_FAILED")


class NoteMissing(ApplicationError):
    """A read completed but there is no note at the key."""

    def __init__(self, note_id: str) -> None:
        self.note_id = note_id
        super().__init__(f"No note stored at {note_id}", code="CLIENT_NOTE_MISSING")


class WriteFailure(ApplicationError):
    """Create or update was rejected or never reached the store."""

    def __init__(self, message: str = "Write failed") -> None:
        super().__init__(message, code="CLIENT_WRITE_FAILED")


class DeleteFailure(ApplicationError):
    """Delete was rejected or never reached the store."""

    def __init__(self, message: str = "Delete failed") -> None:
        super().__init__(message, code="CLIENT_DELETE_FAILED")
