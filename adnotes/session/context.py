"""
Session View-State.

SessionContext is the single mutable value threaded through every
transition. Renderers never see it directly: they get a SessionSnapshot,
a frozen copy taken after each event.
"""

from dataclasses import dataclass, field

from adnotes.backend.core.config_schema import SessionSchema
from adnotes.backend.core.pagination import PAGE_SIZE, PageWindow, paginate
from adnotes.backend.models.note import Note
from adnotes.session.debounce import Debouncer
from adnotes.session.modes import Mode, SearchState


@dataclass(frozen=True)
class SessionTimings:
    """Page size and timer delays (seconds) used by the machine."""

    page_size: int = PAGE_SIZE
    debounce: float = 0.5
    note_saved: float = 1.0
    edit_result: float = 0.8
    server_stopped: float = 1.0

    @classmethod
    def from_schema(cls, schema: SessionSchema) -> "SessionTimings":
        return cls(
            page_size=schema.page_size,
            debounce=schema.debounce_ms / 1000,
            note_saved=schema.note_saved_ms / 1000,
            edit_result=schema.edit_result_ms / 1000,
            server_stopped=schema.server_stopped_ms / 1000,
        )


@dataclass(frozen=True)
class NoteView:
    """Detached, immutable copy of a stored note."""

    id: int
    created_at: int
    text: str
    reminder: int = 0
    reminder_offset: int = 0

    @classmethod
    def from_model(cls, note: Note) -> "NoteView":
        return cls(
            id=note.id,
            created_at=note.created_at,
            text=note.text,
            reminder=note.reminder,
            reminder_offset=note.reminder_offset,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session after one event."""

    mode: Mode
    page: int
    total_pages: int
    has_next: bool
    has_prev: bool
    notes: tuple[NoteView, ...]
    selected_index: int | None
    target: NoteView | None
    compose_text: str
    edit_text: str
    search_query: str
    search_settled: bool
    debounce_pending: bool
    status: str
    width: int
    height: int
    ended: bool

    @property
    def selected_note(self) -> NoteView | None:
        if self.selected_index is None:
            return None
        return self.notes[self.selected_index]


@dataclass
class SessionContext:
    """
    Mutable state of one session.

    target is the note an edit or delete applies to; it is fixed when the
    edit or delete starts so reloading the list cannot change it.
    """

    mode: Mode
    debounce: Debouncer
    page: int = 1
    window: PageWindow = field(default_factory=lambda: paginate(0, 1))
    notes: list[NoteView] = field(default_factory=list)
    selected_index: int | None = None
    target: NoteView | None = None
    compose_text: str = ""
    edit_text: str = ""
    search: SearchState = field(default_factory=SearchState)
    status: str = ""
    width: int = 0
    height: int = 0
    ended: bool = False

    @property
    def selected_note(self) -> NoteView | None:
        if self.selected_index is None or not self.notes:
            return None
        return self.notes[self.selected_index]

    def set_notes(self, notes: list[NoteView], select: str = "first") -> None:
        """
        Replace the loaded window and place the cursor.

        Args:
            notes: New window
            select: "first", "last" or "keep" (clamped to the new window)
        """
        self.notes = notes
        if not notes:
            self.selected_index = None
        elif select == "last":
            self.selected_index = len(notes) - 1
        elif select == "keep" and self.selected_index is not None:
            self.selected_index = min(self.selected_index, len(notes) - 1)
        else:
            self.selected_index = 0

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self.mode,
            page=self.page,
            total_pages=self.window.total_pages,
            has_next=self.window.has_next,
            has_prev=self.window.has_prev,
            notes=tuple(self.notes),
            selected_index=self.selected_index,
            target=self.target,
            compose_text=self.compose_text,
            edit_text=self.edit_text,
            search_query=self.search.query,
            search_settled=self.search.settled,
            debounce_pending=self.debounce.pending,
            status=self.status,
            width=self.width,
            height=self.height,
            ended=self.ended,
        )
