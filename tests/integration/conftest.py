"""
Integration Test Fixtures.

Fixtures for integration tests - uses the real SQLite database engine
and FTS5 index. These fixtures build on the root conftest.py fixtures.
"""

import pytest

from adnotes.backend.services.note import NoteStore

BASE_TIME = 1_700_000_000


@pytest.fixture
def seed_notes(note_store: NoteStore):
    """
    Factory fixture that creates n notes with increasing timestamps.

    Usage:
        async def test_paging(seed_notes):
            ids = await seed_notes(25)
    """
    async def _seed(count: int, prefix: str = "Note") -> list[int]:
        ids = []
        for i in range(count):
            ids.append(await note_store.create(f"{prefix} {i + 1}", BASE_TIME + i * 60))
        return ids

    return _seed
