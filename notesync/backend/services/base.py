"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, wrap database errors, and log operations.

Usage:
    from notesync.backend.services.base import BaseService

    class NoteService(BaseService):
        def __init__(self, session: AsyncSession) -> None:
            super().__init__(session)
            self.repo = NoteRepository(session)
"""

from collections.abc import Awaitable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notesync.backend.core.exceptions import ConflictError, DatabaseError
from notesync.backend.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Database session access
    - Logging context
    - Error wrapping for database operations

    Subclasses should call super().__init__(session) and create their
    repositories in __init__.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._logger = get_logger(self.__class__.__module__)

    @property
    def session(self) -> AsyncSession:
        """Get the database session."""
        return self._session

    async def _execute_db_operation(self, operation: str, coro: Awaitable[T]) -> T:
        """
        Execute a database operation with error handling.

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning("Database integrity error", operation=operation, error=str(e))
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists")
            raise DatabaseError(f"Database constraint violation: {operation}")
        except SQLAlchemyError as e:
            self._logger.error("Database error", operation=operation, error=str(e))
            raise DatabaseError(f"Database operation failed: {operation}")

    async def _commit(self, operation: str) -> None:
        """Commit the unit of work so its effects can be announced."""
        await self._execute_db_operation(f"{operation}_commit", self._session.commit())

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(operation, service=self.__class__.__name__, **context)

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(message, service=self.__class__.__name__, **context)
