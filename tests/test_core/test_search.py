# tests/test_core/test_search.py
"""Search Controller Tests
========================

Unit tests for the incremental search state machine.

This module verifies that:

1. Searching wraps around the document in both directions.
2. The match span is tagged MATCH and restored before the next step.
3. Escape restores the cursor and scroll offsets; Enter keeps the match.
4. A miss or an empty query leaves the cursor where it was.
5. The interactive `run()` drives the prompt through the editor's keys.
"""

import pytest

from tilde.core.Highlighter import Highlight
from tilde.core.Search import SearchEvent, SearchState, event_for_key
from tilde.ui.KeyBinder import Key

MATCH3 = [Highlight.MATCH] * 3
NORMAL3 = [Highlight.NORMAL] * 3


@pytest.fixture
def foo_editor(load_editor):
    return load_editor([b"foo", b"bar", b"foo"])


def hl(editor, index):
    return list(editor.document.rows[index].highlight)


class TestWraparound:
    """Repeated searches move through matches and wrap."""

    def test_next_from_last_row_wraps_to_first(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        assert foo_editor.cy == 0
        search.dispatch(SearchEvent.NEXT, b"foo")
        assert foo_editor.cy == 2
        search.dispatch(SearchEvent.NEXT, b"foo")
        assert foo_editor.cy == 0
        assert search.last_match == 0

    def test_previous_wraps_backwards(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        search.dispatch(SearchEvent.PREVIOUS, b"foo")
        assert foo_editor.cy == 2
        assert search.direction == -1

    def test_edit_restarts_from_top(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        search.dispatch(SearchEvent.NEXT, b"foo")
        search.dispatch(SearchEvent.EDIT, b"fo")
        assert foo_editor.cy == 0
        assert search.direction == 1


class TestMatchHighlight:
    """The MATCH override is applied to one span at a time."""

    def test_match_span_is_tagged_then_restored(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        assert hl(foo_editor, 0) == MATCH3
        search.dispatch(SearchEvent.NEXT, b"foo")
        assert hl(foo_editor, 0) == NORMAL3
        assert hl(foo_editor, 2) == MATCH3

    def test_accept_restores_highlight_and_keeps_cursor(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        search.dispatch(SearchEvent.NEXT, b"foo")
        search.dispatch(SearchEvent.ACCEPT, b"foo")
        assert foo_editor.cy == 2
        assert hl(foo_editor, 2) == NORMAL3
        assert search.state is SearchState.IDLE

    def test_match_forces_scroll_to_top(self, foo_editor):
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"bar")
        assert foo_editor.rowoff == foo_editor.document.row_count
        foo_editor.drawer.scroll()
        assert foo_editor.rowoff == 1


class TestCancelAndMisses:
    """Escape, misses and empty queries."""

    def test_cancel_restores_cursor_and_scroll(self, foo_editor):
        foo_editor.cx, foo_editor.cy, foo_editor.rowoff, foo_editor.coloff = 1, 1, 0, 0
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"foo")
        assert (foo_editor.cx, foo_editor.cy) == (0, 0)
        search.dispatch(SearchEvent.CANCEL, b"foo")
        assert (foo_editor.cx, foo_editor.cy, foo_editor.rowoff, foo_editor.coloff) == (1, 1, 0, 0)
        assert hl(foo_editor, 0) == NORMAL3

    def test_miss_leaves_cursor(self, foo_editor):
        foo_editor.cy = 1
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"zzz")
        assert foo_editor.cy == 1
        assert search.last_match == -1

    def test_empty_query_searches_nothing(self, foo_editor):
        foo_editor.cy = 1
        search = foo_editor.search
        search.begin()
        search.dispatch(SearchEvent.EDIT, b"")
        assert foo_editor.cy == 1

    def test_events_ignored_when_idle(self, foo_editor):
        foo_editor.search.dispatch(SearchEvent.EDIT, b"foo")
        assert foo_editor.cy == 0
        assert hl(foo_editor, 0) == NORMAL3


def test_match_column_accounts_for_tabs(load_editor):
    """The cursor lands on the byte whose display column starts the match."""
    editor = load_editor([b"\tfoo"])
    search = editor.search
    search.begin()
    search.dispatch(SearchEvent.EDIT, b"foo")
    assert editor.cx == 1


def test_event_for_key():
    assert event_for_key(Key.ENTER) is SearchEvent.ACCEPT
    assert event_for_key(Key.ESCAPE) is SearchEvent.CANCEL
    assert event_for_key(Key.ARROW_DOWN) is SearchEvent.NEXT
    assert event_for_key(Key.ARROW_RIGHT) is SearchEvent.NEXT
    assert event_for_key(Key.ARROW_UP) is SearchEvent.PREVIOUS
    assert event_for_key(Key.ARROW_LEFT) is SearchEvent.PREVIOUS
    assert event_for_key(ord("x")) is SearchEvent.EDIT


class TestInteractiveRun:
    """`find()` reads keys from the terminal until Enter or Escape."""

    def test_enter_keeps_match(self, foo_editor, fake_terminal):
        fake_terminal.read_key.side_effect = [ord("b"), ord("a"), ord("r"), Key.ENTER]
        foo_editor.find()
        assert foo_editor.cy == 1
        assert foo_editor.search.state is SearchState.IDLE
        assert hl(foo_editor, 1) == NORMAL3

    def test_escape_restores_position(self, foo_editor, fake_terminal):
        foo_editor.cy = 2
        fake_terminal.read_key.side_effect = [ord("b"), Key.ESCAPE]
        foo_editor.find()
        assert foo_editor.cy == 2

    def test_arrow_moves_to_next_match(self, foo_editor, fake_terminal):
        fake_terminal.read_key.side_effect = [ord("f"), Key.ARROW_DOWN, Key.ENTER]
        foo_editor.find()
        assert foo_editor.cy == 2
