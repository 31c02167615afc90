"""
Unit Tests for Core Utilities.
"""

from adnotes.backend.core.utils import epoch_now, note_title, truncate_to_minute


class TestTruncateToMinute:
    """Tests for dropping seconds from timestamps."""

    def test_drops_seconds(self):
        assert truncate_to_minute(1_700_000_059) == 1_699_999_980 + 60

    def test_exact_minute_unchanged(self):
        assert truncate_to_minute(1_699_999_980) == 1_699_999_980

    def test_epoch_now_is_integer(self):
        assert isinstance(epoch_now(), int)


class TestNoteTitle:
    """Tests for deriving a list title from note text."""

    def test_stops_at_comma(self):
        assert note_title("Buy milk, eggs and bread") == "Buy milk"

    def test_stops_at_newline(self):
        assert note_title("Shopping\nmilk") == "Shopping"

    def test_short_text_unchanged(self):
        assert note_title("Call dentist") == "Call dentist"

    def test_long_text_is_cut_with_ellipsis(self):
        text = "x" * 45
        assert note_title(text) == "x" * 40 + "..."

    def test_exactly_forty_characters_is_not_cut(self):
        assert note_title("y" * 40) == "y" * 40

    def test_empty_text(self):
        assert note_title("") == ""
