"""
Database Configuration.

SQLAlchemy async engine and session management for the SQLite note file.
Uses lazy initialization so importing modules never touches the disk.

The full-text index is an FTS5 virtual table whose rowid is the note id.
SQLAlchemy has no model for virtual tables, so it is created with raw DDL
in init_schema() after the declarative tables.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from adnotes.backend.core.logging import get_logger
from adnotes.backend.models.base import Base

logger = get_logger(__name__)

FTS_TABLE = "notes_fts"

FTS_DDL = (
    f"CREATE VIRTUAL TABLE IF NOT EXISTS {FTS_TABLE} "
    "USING fts5(text, tokenize = 'unicode61 remove_diacritics 2')"
)

# Module-level state for lazy initialization
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def _create_engine() -> AsyncEngine:
    """Create async SQLAlchemy engine for the configured database file."""
    from adnotes.backend.core.config import (
        get_app_config,
        get_database_path,
        get_database_url,
    )

    db_path = get_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(
        get_database_url(db_path),
        echo=get_app_config().database.echo,
    )
    logger.debug("Database engine created", extra={"path": str(db_path)})
    return engine


def get_engine() -> AsyncEngine:
    """
    Get the database engine, creating it on first use.

    Returns:
        SQLAlchemy async engine instance
    """
    global _engine
    if _engine is None:
        _engine = _create_engine()
    return _engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory, creating it on first use.

    Returns:
        SQLAlchemy async session factory
    """
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = create_session_factory(get_engine())
    return _async_session_factory


async def init_schema(engine: AsyncEngine) -> None:
    """
    Create the notes table and its full-text index if they do not exist.

    Args:
        engine: Engine to create the schema on
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(FTS_DDL))
    logger.debug("Database schema ready", extra={"fts_table": FTS_TABLE})


async def dispose_engine() -> None:
    """Dispose the shared engine and forget the session factory."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.debug("Database engine disposed")
    _engine = None
    _async_session_factory = None
