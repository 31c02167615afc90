"""
Session State Machine.

Routes each input event to the handler of the current mode and applies the
resulting transition to the SessionContext. Handlers run to completion and
never wait on anything but the store; delays are timers that come back as
TimerFired events through the post callback.

Usage:
    loop = SessionLoop(render=print)
    machine = SessionMachine(store, AsyncioScheduler(), loop.post)
    await loop.run(machine)
"""

import asyncio
from collections.abc import Callable

from adnotes.backend.core.exceptions import StorageError
from adnotes.backend.core.logging import get_logger, log_with_source
from adnotes.backend.core.pagination import clamp_page, paginate, total_pages_for
from adnotes.backend.core.utils import epoch_now, note_title, truncate_to_minute
from adnotes.backend.services.note import NoteStore
from adnotes.backend.services.process import terminate_process
from adnotes.session.context import NoteView, SessionContext, SessionSnapshot, SessionTimings
from adnotes.session.debounce import Debouncer
from adnotes.session.events import Event, KeyPressed, Resized, TextChanged, TimerFired, TimerKind
from adnotes.session.keys import Action, KeyMap
from adnotes.session.modes import Mode, SearchState
from adnotes.session.timers import Scheduler

logger = get_logger(__name__)

_TIMER_MODES: dict[TimerKind, Mode] = {
    TimerKind.DEBOUNCE: Mode.SEARCHING_NOTES,
    TimerKind.NOTE_SAVED: Mode.NOTE_SAVED_SHOWN,
    TimerKind.EDIT_RESULT: Mode.EDIT_RESULT_SHOWN,
    TimerKind.SERVER_STOPPED: Mode.SERVER_STOPPED,
}

_ENTRY_STATUS: dict[Mode, str] = {
    Mode.CONFIRMING_SERVER_STOP: "Do you want to terminate the server? (y/n)",
    Mode.SERVER_STARTING: "Server is running. Press the quit key to close this window.",
}


class SessionMachine:
    """
    Finite-state controller for one session.

    The machine is the only caller of the store. Timer callbacks only post
    events; the transition happens when the loop hands the event back.
    """

    _HANDLERS: dict[Mode, str] = {
        Mode.COMPOSING_NOTE: "_on_composing",
        Mode.BROWSING_NOTES: "_on_browsing",
        Mode.EDITING_NOTE: "_on_editing",
        Mode.CONFIRMING_EDIT: "_on_confirming_edit",
        Mode.EDIT_RESULT_SHOWN: "_on_edit_result_shown",
        Mode.CONFIRMING_DELETE: "_on_confirming_delete",
        Mode.CONFIRMING_SERVER_STOP: "_on_confirming_server_stop",
        Mode.SERVER_STOPPED: "_on_server_stopped",
        Mode.SERVER_STARTING: "_on_server_starting",
        Mode.SEARCHING_NOTES: "_on_searching",
        Mode.NOTE_SAVED_SHOWN: "_on_note_saved_shown",
    }

    def __init__(
        self,
        store: NoteStore,
        scheduler: Scheduler,
        post: Callable[[Event], None],
        *,
        keymap: KeyMap | None = None,
        timings: SessionTimings | None = None,
        companion_name: str = "server",
        terminate: Callable[[str], None] = terminate_process,
        clock: Callable[[], int] = epoch_now,
        initial_mode: Mode = Mode.COMPOSING_NOTE,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._post = post
        self._keymap = keymap or KeyMap()
        self._timings = timings or SessionTimings()
        self._companion_name = companion_name
        self._terminate = terminate
        self._clock = clock

        debouncer = Debouncer(
            scheduler,
            self._timings.debounce,
            lambda: self._post(TimerFired(TimerKind.DEBOUNCE, debouncer.generation)),
        )
        self.context = SessionContext(mode=initial_mode, debounce=debouncer)
        self.context.status = _ENTRY_STATUS.get(initial_mode, "")

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def handle(self, event: Event) -> SessionSnapshot:
        """
        Apply one event and return the resulting snapshot.

        Raises:
            CompanionProcessError: If stopping the companion process fails
            UnsupportedEnvironmentError: If the platform cannot stop it
        """
        ctx = self.context
        if ctx.ended:
            logger.debug("Event after session end ignored", extra={"event": repr(event)})
            return ctx.snapshot()

        if isinstance(event, Resized):
            ctx.width, ctx.height = event.width, event.height
            return ctx.snapshot()

        if isinstance(event, KeyPressed) and self._keymap.resolve(event.key) is Action.QUIT:
            self._end("quit")
            return ctx.snapshot()

        if isinstance(event, TimerFired) and _TIMER_MODES[event.kind] is not ctx.mode:
            logger.debug(
                "Stale timer ignored",
                extra={"kind": event.kind.value, "mode": ctx.mode.value},
            )
            return ctx.snapshot()

        previous = ctx.mode
        handler = getattr(self, self._HANDLERS[ctx.mode])
        await handler(event)

        if ctx.mode is not previous:
            log_with_source(
                logger, "session", "debug", "Mode changed",
                previous=previous.value, mode=ctx.mode.value,
            )
        return ctx.snapshot()

    def _action(self, event: Event) -> Action | None:
        if isinstance(event, KeyPressed):
            return self._keymap.resolve(event.key)
        return None

    # -------------------------------------------------------------------------
    # Mode handlers
    # -------------------------------------------------------------------------

    async def _on_composing(self, event: Event) -> None:
        ctx = self.context
        if isinstance(event, TextChanged):
            ctx.compose_text = event.text
            return

        action = self._action(event)
        if action is Action.SAVE:
            await self._save_new_note()
        elif action is Action.SEARCH:
            self._enter_search()
        elif action is Action.BROWSE:
            ctx.page = 1
            await self._enter_browse(select="first")

    async def _on_browsing(self, event: Event) -> None:
        ctx = self.context
        action = self._action(event)

        if action is Action.DOWN:
            await self._move_down()
        elif action is Action.UP:
            await self._move_up()
        elif action is Action.SELECT:
            self._start_edit()
        elif action is Action.DELETE:
            note = ctx.selected_note
            if note is not None:
                ctx.target = note
                ctx.status = f"Delete note '{note_title(note.text)}'? (y/n)"
                ctx.mode = Mode.CONFIRMING_DELETE
        elif action is Action.SEARCH:
            self._enter_search()
        elif action is Action.COMPOSE:
            ctx.status = ""
            ctx.mode = Mode.COMPOSING_NOTE
        elif action is Action.BROWSE:
            await self._load_page(select="keep")

    async def _on_editing(self, event: Event) -> None:
        ctx = self.context
        if isinstance(event, TextChanged):
            ctx.edit_text = event.text
            return

        action = self._action(event)
        if action is Action.SAVE:
            ctx.status = "Save changes to this note? (y/n)"
            ctx.mode = Mode.CONFIRMING_EDIT
        elif action is Action.CANCEL:
            ctx.target = None
            await self._enter_browse(select="keep")

    async def _on_confirming_edit(self, event: Event) -> None:
        ctx = self.context
        action = self._action(event)
        if action is Action.NO:
            ctx.status = ""
            ctx.mode = Mode.EDITING_NOTE
            return
        if action is not Action.YES or ctx.target is None:
            return

        note = ctx.target
        try:
            rows = await self._store.update(
                note.id, ctx.edit_text, self._clock(), note.reminder, note.reminder_offset,
            )
        except StorageError as e:
            logger.error("Failed to update note", extra={"note_id": note.id, "error": e.message})
            ctx.status = f"Error: {e.message}\nThe note was not saved."
        else:
            if rows == 1:
                ctx.status = f"Note '{note_title(ctx.edit_text)}' edited successfully."
            else:
                ctx.status = f"Note {note.id} no longer exists."
            await self._load_page(select="keep")

        ctx.target = None
        self._enter_shown(Mode.EDIT_RESULT_SHOWN, TimerKind.EDIT_RESULT, self._timings.edit_result)

    async def _on_edit_result_shown(self, event: Event) -> None:
        if isinstance(event, TimerFired):
            self.context.status = ""
            self.context.mode = Mode.BROWSING_NOTES

    async def _on_confirming_delete(self, event: Event) -> None:
        ctx = self.context
        action = self._action(event)
        if action is Action.NO:
            ctx.target = None
            ctx.status = ""
            ctx.mode = Mode.BROWSING_NOTES
            return
        if action is not Action.YES or ctx.target is None:
            return

        note = ctx.target
        ctx.target = None
        try:
            rows = await self._store.delete(note.id)
        except StorageError as e:
            logger.error("Failed to delete note", extra={"note_id": note.id, "error": e.message})
            ctx.status = f"Error: {e.message}\nThe note was not deleted."
            ctx.mode = Mode.BROWSING_NOTES
            return

        if rows == 1:
            ctx.status = f"Note '{note_title(note.text)}' deleted successfully."
            await self._load_page(select="keep")
            self._enter_shown(
                Mode.EDIT_RESULT_SHOWN, TimerKind.EDIT_RESULT, self._timings.edit_result,
            )
        else:
            ctx.mode = Mode.BROWSING_NOTES
            await self._load_page(select="keep")
            ctx.status = f"Note {note.id} no longer exists."

    async def _on_confirming_server_stop(self, event: Event) -> None:
        ctx = self.context
        action = self._action(event)
        if action is Action.YES:
            await asyncio.to_thread(self._terminate, self._companion_name)
            ctx.status = "Server terminated"
            self._enter_shown(
                Mode.SERVER_STOPPED, TimerKind.SERVER_STOPPED, self._timings.server_stopped,
            )
        elif action is Action.NO:
            self._end("server stop declined")

    async def _on_server_stopped(self, event: Event) -> None:
        if isinstance(event, TimerFired):
            self._end("server stopped")

    async def _on_server_starting(self, event: Event) -> None:
        # Only the global quit key applies here.
        return

    async def _on_searching(self, event: Event) -> None:
        ctx = self.context
        search = ctx.search

        if isinstance(event, TextChanged):
            search.query = event.text
            if event.text != search.committed:
                search.committed = event.text
                search.settled = False
                ctx.debounce.schedule(event.text)
            return

        if isinstance(event, TimerFired):
            if not ctx.debounce.is_current(event.generation):
                logger.debug("Superseded debounce ignored", extra={"generation": event.generation})
                return
            await self._run_search()
            return

        action = self._action(event)
        if action is Action.DOWN:
            if ctx.selected_index is not None and ctx.selected_index < len(ctx.notes) - 1:
                ctx.selected_index += 1
        elif action is Action.UP:
            if ctx.selected_index:
                ctx.selected_index -= 1
        elif action is Action.SELECT:
            self._start_edit()
        elif action is Action.BROWSE:
            await self._enter_browse(select="first")

    async def _on_note_saved_shown(self, event: Event) -> None:
        if isinstance(event, TimerFired):
            self._end("note saved")

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def _save_new_note(self) -> None:
        ctx = self.context
        created_at = truncate_to_minute(self._clock())
        try:
            note_id = await self._store.create(ctx.compose_text, created_at)
        except StorageError as e:
            logger.error("Failed to save note", extra={"error": e.message})
            ctx.status = f"Error: {e.message}\nThe note was not saved."
        else:
            logger.info("Note saved", extra={"note_id": note_id})
            ctx.status = "Note saved successfully!"
        self._enter_shown(Mode.NOTE_SAVED_SHOWN, TimerKind.NOTE_SAVED, self._timings.note_saved)

    def _enter_shown(self, mode: Mode, kind: TimerKind, delay: float) -> None:
        """Enter a transient mode and arm its one, non-cancellable timer."""
        self.context.mode = mode
        self._scheduler.call_later(delay, lambda: self._post(TimerFired(kind)))

    def _enter_search(self) -> None:
        ctx = self.context
        ctx.debounce.cancel()
        ctx.mode = Mode.SEARCHING_NOTES
        ctx.search = SearchState()
        ctx.status = ""
        ctx.set_notes([])

    async def _enter_browse(self, select: str) -> None:
        ctx = self.context
        ctx.debounce.cancel()
        ctx.status = ""
        ctx.mode = Mode.BROWSING_NOTES
        await self._load_page(select=select)

    def _start_edit(self) -> None:
        ctx = self.context
        note = ctx.selected_note
        if note is None:
            return
        ctx.debounce.cancel()
        ctx.target = note
        ctx.edit_text = note.text
        ctx.status = ""
        ctx.mode = Mode.EDITING_NOTE

    async def _move_down(self) -> None:
        ctx = self.context
        if ctx.selected_index is None:
            return
        if ctx.selected_index < len(ctx.notes) - 1:
            ctx.selected_index += 1
            return
        await self._refresh_window()
        if ctx.window.has_next:
            ctx.page += 1
            await self._load_page(select="first")

    async def _move_up(self) -> None:
        ctx = self.context
        if ctx.selected_index is None:
            return
        if ctx.selected_index > 0:
            ctx.selected_index -= 1
            return
        if ctx.page == 1:
            return
        await self._refresh_window()
        if ctx.window.has_prev:
            ctx.page -= 1
            await self._load_page(select="last")

    async def _refresh_window(self) -> None:
        ctx = self.context
        try:
            total = await self._store.count()
        except StorageError as e:
            logger.error("Failed to count notes", extra={"error": e.message})
            ctx.status = f"Error: {e.message}"
            return
        ctx.window = paginate(total, ctx.page, self._timings.page_size)

    async def _load_page(self, select: str) -> None:
        """Reload the window for ctx.page, clamping the page to what exists."""
        ctx = self.context
        size = self._timings.page_size
        try:
            total = await self._store.count()
            ctx.page = clamp_page(ctx.page, total_pages_for(total, size))
            ctx.window = paginate(total, ctx.page, size)
            notes = await self._store.list(size, ctx.window.offset)
        except StorageError as e:
            logger.error("Failed to load notes", extra={"page": ctx.page, "error": e.message})
            ctx.status = f"Error: {e.message}\nCould not load notes."
            ctx.set_notes([])
            return
        ctx.set_notes([NoteView.from_model(note) for note in notes], select=select)

    async def _run_search(self) -> None:
        ctx = self.context
        query = ctx.search.query
        try:
            found = await self._store.search(query)
        except StorageError as e:
            logger.error("Search failed", extra={"error": e.message})
            ctx.status = f"Error: {e.message}"
            found = []
        views = sorted(
            (NoteView.from_model(note) for note in found),
            key=lambda note: note.id,
            reverse=True,
        )
        ctx.set_notes(views, select="first")
        ctx.search.settled = True

    def _end(self, reason: str) -> None:
        ctx = self.context
        ctx.debounce.cancel()
        ctx.ended = True
        log_with_source(logger, "session", "info", "Session ended", reason=reason, mode=ctx.mode.value)


_unhandled = set(Mode) - SessionMachine._HANDLERS.keys()
if _unhandled:
    raise RuntimeError(f"Session modes without a handler: {sorted(m.value for m in _unhandled)}")
