"""
Search Debounce.

Coalesces bursts of search input into one delayed query. The debouncer owns
at most one timer: scheduling invalidates the previous one before arming a
new one. Firing only signals; the caller re-reads the current query.
"""

from collections.abc import Callable

from adnotes.backend.core.logging import get_logger
from adnotes.session.timers import Scheduler, TimerHandle

logger = get_logger(__name__)


class Debouncer:
    """
    Single-timer debounce.

    Each schedule() and cancel() bumps a generation token. A callback from
    an older generation is ignored even if its timer could not be cancelled
    in time, and is_current() lets consumers drop events that were already
    queued when the generation moved on.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        delay: float,
        on_elapsed: Callable[[], None],
    ) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._on_elapsed = on_elapsed
        self._handle: TimerHandle | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Token of the timer that is armed, or that fired last."""
        return self._generation

    def is_current(self, generation: int) -> bool:
        """Whether a fired timer still belongs to the live schedule."""
        return generation == self._generation

    @property
    def pending(self) -> bool:
        """Whether a timer is armed and has not fired."""
        return self._handle is not None

    def schedule(self, query: str) -> None:
        """
        Cancel any pending timer and arm a new one.

        Args:
            query: The query that triggered this schedule, for logging only
        """
        self.cancel()
        self._generation += 1
        generation = self._generation
        self._handle = self._scheduler.call_later(
            self._delay, lambda: self._fire(generation),
        )
        logger.debug(
            "Search debounce armed",
            extra={"query_length": len(query), "delay": self._delay},
        )

    def cancel(self) -> None:
        """Drop the pending timer, if any, and invalidate fired ones."""
        self._generation += 1
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None

    def _fire(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._handle = None
        self._on_elapsed()
