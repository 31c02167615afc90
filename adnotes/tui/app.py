"""
Notes TUI.

Textual front end for the session machine. Every key press and text change
becomes a session event; every snapshot the loop emits is painted onto the
widgets. The app itself holds no note state.

Usage:
    app = NotesApp(store, keymap=KeyMap(), timings=SessionTimings())
    app.run()
"""

from __future__ import annotations

from rich.text import Text
from textual import events, on, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Input, Static, TextArea

from adnotes.backend.core.exceptions import CompanionProcessError, UnsupportedEnvironmentError
from adnotes.backend.core.logging import get_logger, log_with_source
from adnotes.backend.services.note import NoteStore
from adnotes.session.context import NoteView, SessionSnapshot, SessionTimings
from adnotes.session.events import KeyPressed, Resized, TextChanged
from adnotes.session.keys import Action, KeyMap
from adnotes.session.loop import SessionLoop
from adnotes.session.machine import SessionMachine
from adnotes.session.modes import Mode
from adnotes.session.timers import AsyncioScheduler
from adnotes.tui.formatting import help_entries, list_title, note_subtitle, note_title

logger = get_logger(__name__)

# Keys for these actions are taken before any widget sees them.
COMMAND_ACTIONS = frozenset({
    Action.SAVE,
    Action.QUIT,
    Action.CANCEL,
    Action.BROWSE,
    Action.COMPOSE,
    Action.SEARCH,
    Action.DELETE,
})

# Modes where no text widget has focus, so every bound key is a command.
KEY_ONLY_MODES = frozenset({
    Mode.BROWSING_NOTES,
    Mode.CONFIRMING_EDIT,
    Mode.EDIT_RESULT_SHOWN,
    Mode.CONFIRMING_DELETE,
    Mode.CONFIRMING_SERVER_STOP,
    Mode.SERVER_STOPPED,
    Mode.SERVER_STARTING,
    Mode.NOTE_SAVED_SHOWN,
})

LIST_MODES = frozenset({
    Mode.BROWSING_NOTES,
    Mode.EDITING_NOTE,
    Mode.CONFIRMING_EDIT,
    Mode.EDIT_RESULT_SHOWN,
    Mode.CONFIRMING_DELETE,
    Mode.SEARCHING_NOTES,
})


def claims_key(key: str, mode: Mode, keymap: KeyMap) -> bool:
    """
    Decide whether a key press belongs to the session rather than a widget.

    Command keys always go to the session. Navigation and confirmation keys
    go to the session only where they cannot be typed text: in key-only
    modes, and for the non-printable arrow and enter keys while searching.
    """
    action = keymap.resolve(key)
    if action is None:
        return False
    if action in COMMAND_ACTIONS or mode in KEY_ONLY_MODES:
        return True
    if mode is Mode.SEARCHING_NOTES:
        return action in (Action.UP, Action.DOWN, Action.SELECT) and len(key) > 1
    return False


class NoteList(Static):
    """Title and subtitle of each note in the current window."""

    def show(self, snapshot: SessionSnapshot) -> None:
        text = Text()
        text.append(list_title(snapshot.mode, snapshot.page, snapshot.total_pages), style="bold")
        text.append("\n\n")
        if not snapshot.notes:
            empty = "Type to search." if snapshot.mode is Mode.SEARCHING_NOTES else "No notes yet."
            if snapshot.mode is Mode.SEARCHING_NOTES and snapshot.search_settled:
                empty = "No matching notes."
            text.append(empty, style="dim")
        for index, note in enumerate(snapshot.notes):
            self._append_note(text, note, index == snapshot.selected_index)
        self.update(text)

    @staticmethod
    def _append_note(text: Text, note: NoteView, selected: bool) -> None:
        marker = "> " if selected else "  "
        title_style = "bold reverse" if selected else ""
        text.append(marker)
        text.append(note_title(note.text), style=title_style)
        text.append("\n  ")
        text.append(note_subtitle(note.created_at), style="dim")
        text.append("\n")


class HelpLine(Static):
    """Key hints for the current mode."""

    def show(self, mode: Mode, keymap: KeyMap) -> None:
        text = Text()
        for key, description in help_entries(mode, keymap):
            if text:
                text.append(" • ", style="dim")
            text.append(key, style="bold")
            text.append(f" {description}", style="dim")
        self.update(text)


class NotesApp(App):
    """Terminal note manager."""

    TITLE = "adnotes"

    CSS = """
    Screen {
        layout: vertical;
    }

    #compose {
        height: 1fr;
        border: round $primary;
    }

    #browser {
        height: 1fr;
    }

    #list-pane {
        width: 2fr;
    }

    #search {
        margin: 0 0;
    }

    NoteList {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #editor {
        width: 3fr;
        border: round $secondary;
    }

    #message {
        height: auto;
        padding: 1 2;
        text-style: bold;
        content-align: center middle;
    }

    HelpLine {
        dock: bottom;
        height: 1;
        background: $surface;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        store: NoteStore,
        *,
        keymap: KeyMap | None = None,
        timings: SessionTimings | None = None,
        companion_name: str = "server",
        initial_mode: Mode = Mode.COMPOSING_NOTE,
    ) -> None:
        super().__init__()
        self._note_keys = keymap or KeyMap()
        self._session_loop = SessionLoop(render=self._render_snapshot)
        self._machine = SessionMachine(
            store,
            AsyncioScheduler(),
            self._session_loop.post,
            keymap=self._note_keys,
            timings=timings,
            companion_name=companion_name,
            initial_mode=initial_mode,
        )
        self._snapshot = self._machine.context.snapshot()
        self._focused_mode: Mode | None = None

    def compose(self) -> ComposeResult:
        yield TextArea(id="compose")
        with Horizontal(id="browser"):
            with Vertical(id="list-pane"):
                yield Input(placeholder="Search notes...", id="search")
                yield NoteList()
            yield TextArea(id="editor", read_only=True)
        yield Static(id="message")
        yield HelpLine()

    def on_mount(self) -> None:
        self._session_loop.post(Resized(self.size.width, self.size.height))
        self._run_session()

    @work(exclusive=True)
    async def _run_session(self) -> None:
        try:
            await self._session_loop.run(self._machine)
        except (CompanionProcessError, UnsupportedEnvironmentError) as e:
            logger.error("Stopping the server failed", extra={"error": e.message, "code": e.code})
            self.exit(return_code=1, message=f"Error stopping server: {e.message}")

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    async def on_event(self, event: events.Event) -> None:
        if (
            isinstance(event, events.Key)
            and not event.is_forwarded
            and claims_key(event.key, self._snapshot.mode, self._note_keys)
        ):
            self._session_loop.post(KeyPressed(event.key))
            return
        await super().on_event(event)

    def on_resize(self, event: events.Resize) -> None:
        self._session_loop.post(Resized(event.size.width, event.size.height))

    @on(TextArea.Changed, "#compose")
    def _compose_changed(self, event: TextArea.Changed) -> None:
        if self._snapshot.mode is Mode.COMPOSING_NOTE:
            self._session_loop.post(TextChanged(event.text_area.text))

    @on(TextArea.Changed, "#editor")
    def _editor_changed(self, event: TextArea.Changed) -> None:
        if self._snapshot.mode is Mode.EDITING_NOTE and not event.text_area.read_only:
            self._session_loop.post(TextChanged(event.text_area.text))

    @on(Input.Changed, "#search")
    def _search_changed(self, event: Input.Changed) -> None:
        if self._snapshot.mode is Mode.SEARCHING_NOTES:
            self._session_loop.post(TextChanged(event.value))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def _render_snapshot(self, snapshot: SessionSnapshot) -> None:
        self._snapshot = snapshot
        if snapshot.ended:
            log_with_source(logger, "tui", "debug", "Closing window", mode=snapshot.mode.value)
            self.exit()
            return

        mode = snapshot.mode
        compose = self.query_one("#compose", TextArea)
        editor = self.query_one("#editor", TextArea)
        search = self.query_one("#search", Input)

        compose.display = mode in (Mode.COMPOSING_NOTE, Mode.NOTE_SAVED_SHOWN)
        self.query_one("#browser").display = mode in LIST_MODES
        search.display = mode is Mode.SEARCHING_NOTES

        if compose.text != snapshot.compose_text:
            compose.text = snapshot.compose_text
        if search.value != snapshot.search_query:
            search.value = snapshot.search_query

        self._show_editor(editor, snapshot)
        self.query_one(NoteList).show(snapshot)
        self.query_one("#message", Static).update(snapshot.status)
        self.query_one(HelpLine).show(mode, self._note_keys)

        if mode is not self._focused_mode:
            self._focused_mode = mode
            self._focus_for(mode, compose, editor, search)

    def _show_editor(self, editor: TextArea, snapshot: SessionSnapshot) -> None:
        editing = snapshot.mode in (Mode.EDITING_NOTE, Mode.CONFIRMING_EDIT)
        editor.read_only = snapshot.mode is not Mode.EDITING_NOTE
        if editing:
            content = snapshot.edit_text
        else:
            note = snapshot.selected_note
            content = note.text if note is not None else ""
        if editor.text != content:
            editor.text = content
        editor.border_title = (
            note_subtitle(snapshot.target.created_at) if editing and snapshot.target else None
        )

    def _focus_for(self, mode: Mode, compose: TextArea, editor: TextArea, search: Input) -> None:
        if mode is Mode.COMPOSING_NOTE:
            compose.focus()
        elif mode is Mode.EDITING_NOTE:
            editor.focus()
        elif mode is Mode.SEARCHING_NOTES:
            search.focus()
        else:
            self.set_focus(None)
