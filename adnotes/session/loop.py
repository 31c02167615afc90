"""
Session Loop.

Single consumer around the session machine: events are queued in arrival
order and each is handled to completion before the next is taken. After
every event the render callback receives a fresh snapshot.
"""

import asyncio
from collections.abc import Callable

from adnotes.backend.core.logging import get_logger
from adnotes.session.context import SessionSnapshot
from adnotes.session.events import Event
from adnotes.session.machine import SessionMachine

logger = get_logger(__name__)


class SessionLoop:
    """
    Event queue plus the consumer coroutine.

    post() is safe to call from timer callbacks and UI handlers running on
    the same event loop.
    """

    def __init__(self, render: Callable[[SessionSnapshot], None] | None = None) -> None:
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._render = render

    def post(self, event: Event) -> None:
        """Queue an event for the machine."""
        self._queue.put_nowait(event)

    @property
    def pending(self) -> int:
        """Number of events waiting to be handled."""
        return self._queue.qsize()

    async def run(self, machine: SessionMachine) -> SessionSnapshot:
        """
        Consume events until the session ends.

        Returns:
            The final snapshot

        Raises:
            Whatever the machine raises; the loop stops at that event.
        """
        snapshot = machine.context.snapshot()
        self._emit(snapshot)
        logger.debug("Session loop started", extra={"mode": snapshot.mode.value})

        while not snapshot.ended:
            event = await self._queue.get()
            try:
                snapshot = await machine.handle(event)
            finally:
                self._queue.task_done()
            self._emit(snapshot)

        logger.debug("Session loop finished", extra={"mode": snapshot.mode.value})
        return snapshot

    def _emit(self, snapshot: SessionSnapshot) -> None:
        if self._render is not None:
            self._render(snapshot)
