"""
Note Model.

A note is addressed by (uid, note_id): the anonymous owner and an id
allocated by the client. There is no server-generated key.
"""

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notesync.backend.models.base import Base, TimestampMixin


class Note(TimestampMixin, Base):
    """
    Note database model.

    ``last_modified`` is epoch milliseconds as written by the client, not the
    server clock; clients use it to order their own writes.
    """

    __tablename__ = "notes"

    uid: Mapped[str] = mapped_column(String(64), primary_key=True)
    note_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_modified: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    def __repr__(self) -> str:
        return f"<Note(uid={self.uid}, note_id={self.note_id}, title={self.title!r})>"
