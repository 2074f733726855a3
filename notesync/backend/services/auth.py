"""
Auth Service.

Anonymous sign-in: every call mints a fresh user id and a token for it.
No account record is stored; a uid exists only through the notes it owns.
"""

from uuid import uuid4

from notesync.backend.core.logging import get_logger
from notesync.backend.core.security import create_access_token
from notesync.backend.schemas.auth import AnonymousSession

logger = get_logger(__name__)


class AuthService:
    """Issues anonymous sessions."""

    def sign_in_anonymously(self) -> AnonymousSession:
        uid = uuid4().hex
        token = create_access_token(uid)
        logger.info("Anonymous sign-in", uid=uid)
        return AnonymousSession(uid=uid, access_token=token)
