"""
Display helpers for notes and help lines.
"""

from datetime import datetime

from adnotes.backend.core.utils import note_title
from adnotes.session.keys import Action, KeyMap
from adnotes.session.modes import Mode

__all__ = ["help_entries", "list_title", "note_subtitle", "note_title"]

_HELP: dict[Mode, list[tuple[Action, str]]] = {
    Mode.COMPOSING_NOTE: [
        (Action.SAVE, "Save and Quit"),
        (Action.BROWSE, "Read Notes"),
        (Action.SEARCH, "Advanced Search"),
        (Action.QUIT, "Quit"),
    ],
    Mode.BROWSING_NOTES: [
        (Action.COMPOSE, "Insert Note"),
        (Action.SELECT, "Edit Note"),
        (Action.SEARCH, "Advanced Search"),
        (Action.DELETE, "Delete Note"),
        (Action.QUIT, "Quit"),
    ],
    Mode.EDITING_NOTE: [
        (Action.SAVE, "Save Note"),
        (Action.CANCEL, "Quit Editing"),
    ],
    Mode.CONFIRMING_EDIT: [(Action.YES, "Yes"), (Action.NO, "No")],
    Mode.CONFIRMING_DELETE: [(Action.YES, "Yes"), (Action.NO, "No")],
    Mode.CONFIRMING_SERVER_STOP: [(Action.YES, "Yes"), (Action.NO, "No")],
    Mode.SERVER_STARTING: [(Action.QUIT, "Close Window")],
    Mode.SEARCHING_NOTES: [
        (Action.SELECT, "Edit Note"),
        (Action.BROWSE, "Read Notes"),
        (Action.QUIT, "Close Window"),
    ],
}


def note_subtitle(created_at: int) -> str:
    """Local creation time as d/m/yyyy h:mm."""
    ts = datetime.fromtimestamp(created_at)
    return f"{ts.day}/{ts.month}/{ts.year} {ts.hour}:{ts.minute:02d}"


def list_title(mode: Mode, page: int, total_pages: int) -> str:
    if mode is Mode.SEARCHING_NOTES:
        return "Search Results"
    return f"Notes ({page}/{total_pages})"


def help_entries(mode: Mode, keymap: KeyMap) -> list[tuple[str, str]]:
    """
    Help line entries for a mode.

    Returns:
        (key, description) pairs using the first key bound to each action;
        empty for transient modes
    """
    entries = []
    for action, description in _HELP.get(mode, []):
        keys = keymap.keys_for(action)
        if keys:
            entries.append((keys[0], description))
    return entries
