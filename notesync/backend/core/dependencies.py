"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notesync.backend.core.database import get_db_session, get_session_factory
from notesync.backend.core.exceptions import AuthenticationError, AuthorizationError
from notesync.backend.core.security import decode_token

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]

# Session factory for work that outlives the request scope (change streams)
SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]

_bearer = HTTPBearer(auto_error=False)


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_current_uid(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """
    Resolve the anonymous user id from the bearer token.

    Raises:
        AuthenticationError: If no token or an invalid token was sent
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return decode_token(credentials.credentials)["sub"]


CurrentUid = Annotated[str, Depends(get_current_uid)]


async def get_owner_uid(uid: str, current_uid: CurrentUid) -> str:
    """
    Path dependency for /users/{uid}/... routes.

    Raises:
        AuthorizationError: If the path uid is not the caller's uid
    """
    if uid != current_uid:
        raise AuthorizationError("Notes belong to another user")
    return uid


OwnerUid = Annotated[str, Depends(get_owner_uid)]
