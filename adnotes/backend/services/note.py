"""
Note Store.

Business logic layer for notes: durable CRUD plus the full-text index.
Every write runs in one transaction that covers both the notes table and
the index, so a reader never sees one without the other and a failed
index write undoes the row write.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adnotes.backend.core.exceptions import StorageError
from adnotes.backend.models.note import Note
from adnotes.backend.repositories.note import NoteRepository
from adnotes.backend.services.base import BaseService


class NoteStore(BaseService):
    """
    Service for note persistence and search.

    Update and delete return the number of rows affected; 0 means the note
    does not exist, which is a normal outcome and leaves the index alone.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory)

    async def create(
        self,
        text: str,
        created_at: int,
        reminder: int = 0,
        reminder_offset: int = 0,
    ) -> int:
        """
        Create a new note and its index entry.

        Args:
            text: Note body
            created_at: Epoch seconds
            reminder: Reserved
            reminder_offset: Reserved

        Returns:
            The new note id

        Raises:
            StorageError: If either write fails (neither is kept)
        """
        self._log_operation("Creating note", length=len(text))

        async def _create() -> int:
            async with self._transaction() as session:
                repo = NoteRepository(session)
                note = await repo.insert(text, created_at, reminder, reminder_offset)
                await repo.index_note(note.id, note.text)
                return note.id

        note_id = await self._execute_db_operation("create_note", _create())
        self._log_debug("Note created", note_id=note_id)
        return note_id

    async def list(self, limit: int, offset: int) -> list[Note]:
        """
        List one window of notes, newest first.

        Args:
            limit: Maximum number of notes
            offset: Number to skip for pagination

        Returns:
            List of notes; empty when offset is past the end
        """
        async def _list() -> list[Note]:
            async with self._reader() as session:
                return await NoteRepository(session).list_newest(limit, offset)

        return await self._execute_db_operation("list_notes", _list())

    async def get(self, note_id: int) -> Note | None:
        """Get a note by id, or None."""
        async def _get() -> Note | None:
            async with self._reader() as session:
                return await NoteRepository(session).get_by_id_or_none(note_id)

        return await self._execute_db_operation("get_note", _get())

    async def update(
        self,
        note_id: int,
        text: str,
        created_at: int,
        reminder: int,
        reminder_offset: int,
    ) -> int:
        """
        Overwrite a note and replace its index entry.

        Returns:
            1 on success, 0 if the note does not exist
        """
        self._log_operation("Updating note", note_id=note_id)

        async def _update() -> int:
            async with self._transaction() as session:
                repo = NoteRepository(session)
                rows = await repo.update_fields(
                    note_id, text, created_at, reminder, reminder_offset,
                )
                if rows == 1:
                    await repo.unindex_note(note_id)
                    await repo.index_note(note_id, text)
                return rows

        rows = await self._execute_db_operation("update_note", _update())
        if rows == 0:
            self._log_debug("Note to update not found", note_id=note_id)
        return rows

    async def delete(self, note_id: int) -> int:
        """
        Delete a note and its index entry.

        Returns:
            1 on success, 0 if the note does not exist
        """
        self._log_operation("Deleting note", note_id=note_id)

        async def _delete() -> int:
            async with self._transaction() as session:
                repo = NoteRepository(session)
                rows = await repo.delete_by_id(note_id)
                if rows == 1:
                    await repo.unindex_note(note_id)
                return rows

        rows = await self._execute_db_operation("delete_note", _delete())
        if rows == 0:
            self._log_debug("Note to delete not found", note_id=note_id)
        return rows

    async def search(self, query: str) -> list[Note]:
        """
        Full-text prefix search.

        Args:
            query: Free text; empty matches every indexed note

        Returns:
            Matching notes, order unspecified
        """
        self._log_debug("Searching notes", query=query)

        async def _search() -> list[Note]:
            async with self._reader() as session:
                return await NoteRepository(session).search(query)

        return await self._execute_db_operation("search_notes", _search())

    async def count(self) -> int:
        """Total number of notes."""
        async def _count() -> int:
            async with self._reader() as session:
                return await NoteRepository(session).count()

        return await self._execute_db_operation("count_notes", _count())

    async def verify_index(self) -> None:
        """
        Check that the index mirrors the notes table exactly.

        Raises:
            StorageError: If an id is missing on either side or the
                indexed text differs from the note text
        """
        async def _entries() -> tuple[dict[int, str], dict[int, str]]:
            async with self._reader() as session:
                repo = NoteRepository(session)
                return await repo.primary_entries(), await repo.index_entries()

        primary, indexed = await self._execute_db_operation("verify_index", _entries())

        missing = sorted(primary.keys() - indexed.keys())
        orphaned = sorted(indexed.keys() - primary.keys())
        stale = sorted(
            note_id for note_id in primary.keys() & indexed.keys()
            if primary[note_id] != indexed[note_id]
        )
        if missing or orphaned or stale:
            self._logger.error(
                "Index mismatch detected",
                extra={"missing": missing, "orphaned": orphaned, "stale": stale},
            )
            raise StorageError(
                f"Index mismatch: missing={missing} orphaned={orphaned} stale={stale}"
            )

    async def rebuild_index(self) -> int:
        """
        Rebuild the index from the notes table in one transaction.

        Returns:
            Number of notes indexed
        """
        self._log_operation("Rebuilding index")

        async def _rebuild() -> int:
            async with self._transaction() as session:
                return await NoteRepository(session).reindex_all()

        return await self._execute_db_operation("rebuild_index", _rebuild())
