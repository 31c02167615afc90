"""
Note Repository.

Data access layer for notes. Issues the primary-table statements through
the ORM and the full-text index statements as raw SQL against the FTS5
table. Each method is a single step; NoteStore groups them into
transactions so the table and the index always change together.
"""

from sqlalchemy import delete, select, text as sql_text, update
from sqlalchemy.ext.asyncio import AsyncSession

from adnotes.backend.core.database import FTS_TABLE
from adnotes.backend.models.note import Note
from adnotes.backend.repositories.base import BaseRepository


def build_match_expression(query: str) -> str | None:
    """
    Turn free text into an FTS5 MATCH expression.

    Every whitespace-separated token becomes a quoted prefix term, so
    "call dent" matches notes containing words starting with "call" and
    with "dent". Tokens without any word character are dropped.

    Returns:
        The MATCH expression, or None when nothing is left to match
        (the caller then matches every indexed note).
    """
    terms = []
    for token in query.split():
        if not any(ch.isalnum() for ch in token):
            continue
        escaped = token.replace('"', '""')
        terms.append(f'"{escaped}"*')
    if not terms:
        return None
    return " ".join(terms)


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model and its full-text index.

    Inherits reads from BaseRepository and adds note-specific queries.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def insert(
        self,
        text: str,
        created_at: int,
        reminder: int = 0,
        reminder_offset: int = 0,
    ) -> Note:
        """Insert a note row and return it with its assigned id."""
        note = Note(
            text=text,
            created_at=created_at,
            reminder=reminder,
            reminder_offset=reminder_offset,
        )
        self.session.add(note)
        await self.session.flush()
        return note

    async def list_newest(self, limit: int, offset: int) -> list[Note]:
        """
        Get one window of notes, newest first.

        Args:
            limit: Maximum number of notes to return
            offset: Number of notes to skip

        Returns:
            Notes ordered by id descending
        """
        result = await self.session.execute(
            select(Note)
            .order_by(Note.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def update_fields(
        self,
        id: int,
        text: str,
        created_at: int,
        reminder: int,
        reminder_offset: int,
    ) -> int:
        """Overwrite a note row. Returns the number of rows affected."""
        result = await self.session.execute(
            update(Note)
            .where(Note.id == id)
            .values(
                text=text,
                created_at=created_at,
                reminder=reminder,
                reminder_offset=reminder_offset,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete_by_id(self, id: int) -> int:
        """Delete a note row. Returns the number of rows affected."""
        result = await self.session.execute(
            delete(Note)
            .where(Note.id == id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def search(self, query: str) -> list[Note]:
        """
        Find notes whose indexed text matches query.

        Args:
            query: Free text; see build_match_expression()

        Returns:
            Matching notes in no particular order
        """
        expression = build_match_expression(query)
        statement = (
            f"SELECT notes.* FROM notes "
            f"JOIN {FTS_TABLE} ON {FTS_TABLE}.rowid = notes.id"
        )
        if expression is None:
            stmt = sql_text(statement)
        else:
            stmt = sql_text(f"{statement} WHERE {FTS_TABLE} MATCH :expression").bindparams(
                expression=expression,
            )
        result = await self.session.execute(select(Note).from_statement(stmt))
        return list(result.scalars().all())

    async def index_note(self, id: int, text: str) -> None:
        """Add the index entry for a note."""
        await self.session.execute(
            sql_text(f"INSERT INTO {FTS_TABLE} (rowid, text) VALUES (:id, :text)"),
            {"id": id, "text": text},
        )

    async def unindex_note(self, id: int) -> None:
        """Remove the index entry for a note."""
        await self.session.execute(
            sql_text(f"DELETE FROM {FTS_TABLE} WHERE rowid = :id"),
            {"id": id},
        )

    async def index_entries(self) -> dict[int, str]:
        """Map of indexed rowid to indexed text."""
        result = await self.session.execute(
            sql_text(f"SELECT rowid, text FROM {FTS_TABLE}")
        )
        return {row[0]: row[1] for row in result.all()}

    async def primary_entries(self) -> dict[int, str]:
        """Map of note id to note text."""
        result = await self.session.execute(select(Note.id, Note.text))
        return {row[0]: row[1] for row in result.all()}

    async def reindex_all(self) -> int:
        """Drop every index entry and rebuild from the notes table."""
        await self.session.execute(sql_text(f"DELETE FROM {FTS_TABLE}"))
        await self.session.execute(
            sql_text(f"INSERT INTO {FTS_TABLE} (rowid, text) SELECT id, text FROM notes")
        )
        return await self.count()
