"""
Session Events.

Discrete input messages consumed by the session machine. The machine does
not care how they were captured.
"""

from dataclasses import dataclass
from enum import Enum


class TimerKind(str, Enum):
    """Which timer fired."""

    DEBOUNCE = "debounce"
    NOTE_SAVED = "note_saved"
    EDIT_RESULT = "edit_result"
    SERVER_STOPPED = "server_stopped"


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class KeyPressed:
    """A key identity such as "ctrl+s", "enter" or "y"."""

    key: str


@dataclass(frozen=True)
class TextChanged:
    """New content of the text surface of the current mode."""

    text: str


@dataclass(frozen=True)
class TimerFired:
    """A timer elapsed. Debounce timers carry the debouncer generation."""

    kind: TimerKind
    generation: int = 0


Event = Resized | KeyPressed | TextChanged | TimerFired
