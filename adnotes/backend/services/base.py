"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, own transactions, and convert database
failures into application errors.

Usage:
    from adnotes.backend.services.base import BaseService

    class NoteStore(BaseService):
        async def count(self) -> int:
            async def _count() -> int:
                async with self._reader() as session:
                    return await NoteRepository(session).count()
            return await self._execute_db_operation("count_notes", _count())
"""

from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from adnotes.backend.core.exceptions import StorageError
from adnotes.backend.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Session creation from a session factory
    - One transaction per write operation
    - Error wrapping for database operations
    - Logging context
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize the service with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory
        self._logger = get_logger(self.__class__.__module__)

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session inside a single transaction.

        Commits when the block exits normally, rolls back every statement
        issued in the block when it raises.
        """
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def _reader(self) -> AsyncIterator[AsyncSession]:
        """Open a session for reads; nothing is committed."""
        async with self._session_factory() as session:
            yield session

    async def _execute_db_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Execute a database operation with error handling.

        Wraps database operations to convert SQLAlchemy exceptions
        to StorageError.

        Args:
            operation: Description of the operation for logging
            coro: Coroutine to execute

        Returns:
            Result of the coroutine

        Raises:
            StorageError: For constraint violations and other database errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            raise StorageError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise StorageError(f"Database operation failed: {operation}") from e

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
