"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Database Configuration:
    Tests use a fresh in-memory SQLite database per test, with the notes
    table and the FTS5 index created by init_schema(). StaticPool keeps the
    single in-memory connection alive for every session the store opens.
"""

from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass, field

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from adnotes.backend.core.database import create_session_factory, init_schema
from adnotes.backend.services.note import NoteStore


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory engine with the schema in place."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
def note_store(db_session_factory: async_sessionmaker[AsyncSession]) -> NoteStore:
    """
    NoteStore backed by the test database.

    Usage:
        async def test_create(note_store: NoteStore):
            note_id = await note_store.create("milk, eggs", 1700000000)
            assert await note_store.count() == 1
    """
    return NoteStore(db_session_factory)


# =============================================================================
# Timer Fixtures
# =============================================================================


@dataclass
class FakeTimer:
    """Timer handle recorded by FakeScheduler."""

    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """
    Manual clock for timer-driven code.

    Nothing fires until advance() moves the clock past a timer's due time.
    """

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(due=self.now + delay, callback=callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in due order."""
        self.now += seconds
        for timer in sorted(self.timers, key=lambda t: t.due):
            if timer.due <= self.now + 1e-9 and not timer.cancelled and not timer.fired:
                timer.fired = True
                timer.callback()

    @property
    def armed(self) -> list[FakeTimer]:
        """Timers that have neither fired nor been cancelled."""
        return [t for t in self.timers if not t.cancelled and not t.fired]


@pytest.fixture
def scheduler() -> FakeScheduler:
    """Manual scheduler; call advance() to fire timers."""
    return FakeScheduler()
