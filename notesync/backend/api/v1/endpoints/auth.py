"""
Auth API Endpoints.
"""

from fastapi import APIRouter

from notesync.backend.core.dependencies import RequestId
from notesync.backend.schemas.auth import AnonymousSession
from notesync.backend.schemas.base import ApiResponse, ResponseMetadata
from notesync.backend.services.auth import AuthService

router = APIRouter()


@router.post(
    "/anonymous",
    response_model=ApiResponse[AnonymousSession],
    status_code=201,
    summary="Sign in anonymously",
    description="Mint a new anonymous user id and a bearer token for it.",
)
async def sign_in_anonymously(request_id: RequestId) -> ApiResponse[AnonymousSession]:
    session = AuthService().sign_in_anonymously()
    return ApiResponse(data=session, metadata=ResponseMetadata(request_id=request_id))
