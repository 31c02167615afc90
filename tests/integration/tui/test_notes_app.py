"""
Integration Tests for the Notes TUI.

Runs NotesApp headless with Textual's pilot against a real in-memory store.
"""

import pytest

from adnotes.session.context import SessionTimings
from adnotes.session.modes import Mode
from adnotes.tui.app import NotesApp

FAST = SessionTimings(debounce=0.05, note_saved=0.05, edit_result=0.05, server_stopped=0.05)


class TestNotesApp:
    """End-to-end flows through the widgets."""

    @pytest.mark.asyncio
    async def test_resize_and_typing_reach_the_session(self, note_store):
        """Terminal size and compose text flow into the session snapshot."""
        app = NotesApp(note_store, timings=FAST)

        async with app.run_test(size=(100, 30)) as pilot:
            await pilot.pause()
            assert (app._snapshot.width, app._snapshot.height) == (100, 30)

            await pilot.resize_terminal(120, 40)
            await pilot.pause(0.1)
            assert (app._snapshot.width, app._snapshot.height) == (120, 40)

            await pilot.press(*"hi")
            await pilot.pause(0.1)
            assert app._snapshot.compose_text == "hi"
            assert app._snapshot.ended is False

    @pytest.mark.asyncio
    async def test_compose_and_save_closes_window(self, note_store):
        app = NotesApp(note_store, timings=FAST)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press(*"milk")
            await pilot.pause(0.1)
            await pilot.press("ctrl+s")
            await pilot.pause(0.3)

        notes = await note_store.list(10, 0)
        assert [note.text for note in notes] == ["milk"]

    @pytest.mark.asyncio
    async def test_browse_and_quit(self, note_store):
        await note_store.create("first note", 1_700_000_000)
        await note_store.create("second note", 1_700_000_060)
        app = NotesApp(note_store, timings=FAST)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("ctrl+r")
            await pilot.pause(0.1)
            assert app._snapshot.mode is Mode.BROWSING_NOTES
            assert [n.text for n in app._snapshot.notes] == ["second note", "first note"]

            await pilot.press("j")
            await pilot.pause(0.1)
            assert app._snapshot.selected_index == 1

            await pilot.press("ctrl+q")
            await pilot.pause(0.1)
            assert app._snapshot.ended is True

    @pytest.mark.asyncio
    async def test_search_finds_note(self, note_store):
        target = await note_store.create("Call dentist tomorrow", 1_700_000_000)
        await note_store.create("Buy milk", 1_700_000_060)
        app = NotesApp(note_store, timings=FAST)

        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("ctrl+a")
            await pilot.pause(0.1)
            await pilot.press(*"dent")
            await pilot.pause(0.3)

            assert app._snapshot.mode is Mode.SEARCHING_NOTES
            assert [n.id for n in app._snapshot.notes] == [target]
