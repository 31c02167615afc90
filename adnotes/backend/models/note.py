"""
Note Model.

Database model for notes. The id is assigned by SQLite on insert and never
reused (AUTOINCREMENT), so newer notes always carry larger ids.
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from adnotes.backend.models.base import Base


class Note(Base):
    """
    Note database model.

    created_at is integer epoch seconds. reminder and reminder_offset are
    reserved integers: stored and carried through edits, never interpreted.
    """

    __tablename__ = "notes"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    created_at: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    reminder: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reminder_offset: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, created_at={self.created_at})>"
