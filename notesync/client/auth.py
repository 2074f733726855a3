"""
Auth Gate.

Anonymous sign-in in front of everything else. No note operation runs
before the gate reaches AUTHENTICATED; the resulting AuthContext is passed
explicitly to every component that talks to the note store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from notesync.backend.core.logging import get_logger
from notesync.client.errors import AuthFailure

logger = get_logger(__name__)

ALERT_MESSAGE = "Something went wrong. Please refresh the page and try again."


class AuthStatus(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


@dataclass(frozen=True)
class UserCredentials:
    uid: str
    token: str | None = None


@dataclass(frozen=True)
class AuthContext:
    """The signed-in user, handed to components instead of a global."""

    uid: str


class AuthProvider(ABC):
    @abstractmethod
    async def sign_in_anonymously(self) -> UserCredentials:
        """
        Raises:
            AuthFailure: If no user id could be obtained
        """


class AuthGate:
    """
    Tracks the anonymous sign-in of one client session.

    Usage:
        gate = AuthGate(provider)
        context = await gate.start()
        if context is None:
            show(gate.alert)
    """

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self._status = AuthStatus.UNAUTHENTICATED
        self._context: AuthContext | None = None
        self._error: AuthFailure | None = None

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def context(self) -> AuthContext | None:
        return self._context

    @property
    def error(self) -> AuthFailure | None:
        return self._error

    @property
    def alert(self) -> str | None:
        """Blocking alert text, set only after a failed sign-in."""
        if self._status is AuthStatus.AUTH_FAILED:
            return ALERT_MESSAGE
        return None

    async def start(self) -> AuthContext | None:
        """Sign in once. Returns the context, or None when sign-in failed."""
        if self._status is not AuthStatus.UNAUTHENTICATED:
            return self._context

        try:
            credentials = await self._provider.sign_in_anonymously()
        except AuthFailure as e:
            logger.error("Anonymous sign-in failed", error=str(e), code=e.code)
            self._error = e
            self._status = AuthStatus.AUTH_FAILED
            return None

        self._context = AuthContext(uid=credentials.uid)
        logger.info("Signed in anonymously", uid=credentials.uid)
        self._status = AuthStatus.AUTHENTICATED
        return self._context
