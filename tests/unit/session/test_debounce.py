"""
Unit Tests for the Search Debouncer.

Uses the manual scheduler from the root conftest; nothing sleeps.
"""

import pytest

from adnotes.session.debounce import Debouncer


@pytest.fixture
def fired():
    return []


@pytest.fixture
def debouncer(scheduler, fired):
    return Debouncer(scheduler, 0.5, lambda: fired.append(scheduler.now))


class TestSchedule:
    """Tests for arming and collapsing timers."""

    def test_fires_once_after_delay(self, debouncer, scheduler, fired):
        debouncer.schedule("milk")

        scheduler.advance(0.49)
        assert fired == []
        scheduler.advance(0.01)
        assert fired == [pytest.approx(0.5)]

    def test_burst_collapses_to_one_fire(self, debouncer, scheduler, fired):
        """N schedules less than the delay apart fire exactly once."""
        for query in ("m", "mi", "mil", "milk"):
            debouncer.schedule(query)
            scheduler.advance(0.3)

        scheduler.advance(1.0)

        assert len(fired) == 1

    def test_at_most_one_timer_armed(self, debouncer, scheduler):
        debouncer.schedule("a")
        debouncer.schedule("ab")
        debouncer.schedule("abc")

        assert len(scheduler.armed) == 1

    def test_pending_tracks_armed_timer(self, debouncer, scheduler):
        assert debouncer.pending is False
        debouncer.schedule("a")
        assert debouncer.pending is True
        scheduler.advance(0.5)
        assert debouncer.pending is False

    def test_separate_bursts_fire_separately(self, debouncer, scheduler, fired):
        debouncer.schedule("a")
        scheduler.advance(0.6)
        debouncer.schedule("b")
        scheduler.advance(0.6)

        assert len(fired) == 2


class TestCancel:
    """Tests for dropping the pending timer."""

    def test_cancel_prevents_fire(self, debouncer, scheduler, fired):
        debouncer.schedule("a")
        debouncer.cancel()
        scheduler.advance(1.0)

        assert fired == []
        assert debouncer.pending is False

    def test_cancel_without_timer_is_noop(self, debouncer):
        debouncer.cancel()
        assert debouncer.pending is False

    def test_cancel_after_fire_invalidates_generation(self, debouncer, scheduler):
        """A generation that already fired is no longer current once cancelled."""
        debouncer.schedule("a")
        scheduler.advance(0.5)
        fired_generation = debouncer.generation
        assert debouncer.is_current(fired_generation) is True

        debouncer.cancel()

        assert debouncer.is_current(fired_generation) is False

    def test_schedule_invalidates_previous_generation(self, debouncer):
        debouncer.schedule("a")
        first = debouncer.generation
        debouncer.schedule("ab")

        assert debouncer.is_current(first) is False
        assert debouncer.is_current(debouncer.generation) is True

    def test_callback_of_replaced_timer_is_ignored(self, debouncer, scheduler, fired):
        """A superseded timer that still runs its callback does nothing."""
        debouncer.schedule("a")
        stale = scheduler.timers[0]
        debouncer.schedule("ab")

        stale.callback()

        assert fired == []
        assert debouncer.pending is True
