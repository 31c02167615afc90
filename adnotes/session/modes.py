"""
Session Modes.

The closed set of modes a session can be in. Mode-specific data lives in
payload classes next to the enum; only the search mode carries one.
"""

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    """Interaction modes of a session."""

    COMPOSING_NOTE = "composing_note"
    BROWSING_NOTES = "browsing_notes"
    EDITING_NOTE = "editing_note"
    CONFIRMING_EDIT = "confirming_edit"
    EDIT_RESULT_SHOWN = "edit_result_shown"
    CONFIRMING_DELETE = "confirming_delete"
    CONFIRMING_SERVER_STOP = "confirming_server_stop"
    SERVER_STOPPED = "server_stopped"
    SERVER_STARTING = "server_starting"
    SEARCHING_NOTES = "searching_notes"
    NOTE_SAVED_SHOWN = "note_saved_shown"


@dataclass
class SearchState:
    """
    Payload of SEARCHING_NOTES.

    query is what the search box holds now. committed is the last query a
    debounce was scheduled for; settled turns true once results for the
    current query have been loaded.
    """

    query: str = ""
    committed: str = ""
    settled: bool = False
