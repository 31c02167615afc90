"""
Core Utilities.

Shared utility functions used across the backend.
All modules should import utilities from this module.
"""

import time


def epoch_now() -> int:
    """Return the current time as integer epoch seconds."""
    return int(time.time())


def truncate_to_minute(epoch_seconds: int) -> int:
    """Drop the seconds component of an epoch timestamp."""
    return epoch_seconds - epoch_seconds % 60


def note_title(text: str, max_length: int = 40) -> str:
    """
    Short title for a note: the text up to the first comma or line break,
    cut to max_length characters with a trailing ellipsis.
    """
    head = text.split(",", 1)[0].split("\n", 1)[0]
    if len(head) > max_length:
        return head[:max_length] + "..."
    return head
