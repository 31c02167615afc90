"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are faked.
Unit tests should be fast and isolated, never touching real databases.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from adnotes.backend.core.exceptions import StorageError


# =============================================================================
# Store Fakes
# =============================================================================


@dataclass
class FakeNoteStore:
    """
    In-memory stand-in for NoteStore.

    Notes are SimpleNamespace rows with the model's attributes. Set fail
    to an operation name ("create", "update", ...) to make that operation
    raise StorageError. Every call is recorded in calls.
    """

    rows: dict[int, SimpleNamespace] = field(default_factory=dict)
    next_id: int = 1
    fail: str | None = None
    calls: list[tuple] = field(default_factory=list)

    def _check(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if self.fail == operation:
            raise StorageError(f"Database operation failed: {operation}_note")

    def add(self, text: str, created_at: int = 0) -> int:
        """Seed a note without recording a call."""
        note_id = self.next_id
        self.next_id += 1
        self.rows[note_id] = SimpleNamespace(
            id=note_id, created_at=created_at, text=text, reminder=0, reminder_offset=0,
        )
        return note_id

    async def create(self, text, created_at, reminder=0, reminder_offset=0) -> int:
        self._check("create", text, created_at)
        return self.add(text, created_at)

    async def list(self, limit, offset):
        self._check("list", limit, offset)
        newest = sorted(self.rows.values(), key=lambda n: n.id, reverse=True)
        return newest[offset:offset + limit]

    async def update(self, note_id, text, created_at, reminder, reminder_offset) -> int:
        self._check("update", note_id, text, created_at, reminder, reminder_offset)
        if note_id not in self.rows:
            return 0
        self.rows[note_id] = SimpleNamespace(
            id=note_id, created_at=created_at, text=text,
            reminder=reminder, reminder_offset=reminder_offset,
        )
        return 1

    async def delete(self, note_id) -> int:
        self._check("delete", note_id)
        return 1 if self.rows.pop(note_id, None) is not None else 0

    async def search(self, query):
        self._check("search", query)
        terms = query.lower().split()
        return [
            note for note in self.rows.values()
            if all(any(word.startswith(t) for word in note.text.lower().split()) for t in terms)
        ]

    async def count(self) -> int:
        self._check("count")
        return len(self.rows)

    def calls_to(self, operation: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == operation]


@pytest.fixture
def fake_store() -> FakeNoteStore:
    """Empty in-memory note store."""
    return FakeNoteStore()
