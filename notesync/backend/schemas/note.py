"""
Note Schemas.

Pydantic schemas for note API request/response validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class NoteWrite(BaseModel):
    """Schema for creating or replacing a note (PUT)."""

    title: str = Field(
        default="",
        max_length=1000,
        description="Note title",
        examples=["untitled"],
    )
    body: str = Field(
        default="",
        max_length=100000,
        description="Note body",
    )
    last_modified: int | None = Field(
        default=None,
        ge=0,
        description="Client timestamp of the write, epoch milliseconds",
        examples=[1554907683672],
    )


class NotePatch(BaseModel):
    """Schema for updating an existing note. Only sent fields change."""

    title: str | None = Field(default=None, max_length=1000)
    body: str | None = Field(default=None, max_length=100000)
    last_modified: int | None = Field(default=None, ge=0)


class NoteResponse(BaseModel):
    """Schema for a note in API responses."""

    note_id: str = Field(description="Note identifier, unique per user")
    title: str = Field(description="Note title")
    body: str = Field(description="Note body")
    last_modified: int | None = Field(description="Client timestamp of last write")

    model_config = ConfigDict(from_attributes=True)
