"""
Auth Schemas.
"""

from pydantic import BaseModel, Field


class AnonymousSession(BaseModel):
    """Credentials handed out by anonymous sign-in."""

    uid: str = Field(description="Anonymous user id")
    access_token: str = Field(description="Bearer token for note routes")
    token_type: str = "bearer"
