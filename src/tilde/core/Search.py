# tilde/core/Search.py
"""tilde.core.Search
===================

Incremental search, driven by the message-bar prompt.

``SearchController`` is a small state machine. While it is SEARCHING it
observes a ``LinePrompt``: every keystroke becomes a ``SearchEvent`` and moves
the cursor to the next occurrence of the query in the render buffers, wrapping
around the document in either direction. The matched span is temporarily
tagged ``Highlight.MATCH``; the tags it replaced are put back before the next
step and when the search ends.

Escape puts the cursor and scroll offsets back where they were when the
search started; Enter leaves the cursor on the match.
"""

import enum
import logging
from typing import TYPE_CHECKING, Optional

from tilde.core.DisplayMapper import display_col_to_byte_col
from tilde.core.Highlighter import Highlight
from tilde.ui.KeyBinder import Key
from tilde.ui.Prompt import LinePrompt

if TYPE_CHECKING:
    from tilde.core.Editor import Editor

logger = logging.getLogger("tilde")

SEARCH_PROMPT = "Search: %s (Use ESC/Arrows/Enter)"


class SearchState(enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"


class SearchEvent(enum.Enum):
    ACCEPT = "accept"
    CANCEL = "cancel"
    NEXT = "next"
    PREVIOUS = "previous"
    EDIT = "edit"


def event_for_key(key: int) -> SearchEvent:
    """Classifies a prompt keystroke."""
    if key == Key.ENTER:
        return SearchEvent.ACCEPT
    if key == Key.ESCAPE:
        return SearchEvent.CANCEL
    if key in (Key.ARROW_RIGHT, Key.ARROW_DOWN):
        return SearchEvent.NEXT
    if key in (Key.ARROW_LEFT, Key.ARROW_UP):
        return SearchEvent.PREVIOUS
    return SearchEvent.EDIT


## ==================== SearchController Class ====================
class SearchController:
    """Incremental search over the editor's document.

    Attributes:
        editor (Editor): Session whose cursor and viewport the search moves.
        state (SearchState): IDLE outside a search.
        last_match (int): Row index of the current match, -1 for none.
        direction (int): 1 searches forward, -1 backward.
    """

    def __init__(self, editor: "Editor") -> None:
        self.editor = editor
        self.state = SearchState.IDLE
        self.last_match = -1
        self.direction = 1
        self._saved_hl_line: Optional[int] = None
        self._saved_hl: Optional[bytes] = None
        self._saved_view: Optional[tuple[int, int, int, int]] = None

    # --- lifecycle ---

    def begin(self) -> None:
        ed = self.editor
        self._saved_view = (ed.cx, ed.cy, ed.coloff, ed.rowoff)
        self.last_match = -1
        self.direction = 1
        self.state = SearchState.SEARCHING
        logger.debug("Search started at cy=%d cx=%d", ed.cy, ed.cx)

    def run(self) -> Optional[bytes]:
        """Runs a complete interactive search; returns the accepted query."""
        self.begin()
        query = LinePrompt(self.editor, SEARCH_PROMPT, observer=self).run()
        # The prompt notifies accept/cancel itself; this covers a prompt
        # that ended without doing so.
        if self.state is SearchState.SEARCHING:
            self._finish()
        return query

    def _finish(self) -> None:
        self._restore_highlight()
        self.state = SearchState.IDLE
        self.last_match = -1
        self.direction = 1
        self._saved_view = None

    # --- prompt observer ---

    def on_prompt_key(self, query: bytes, key: int) -> None:
        self.dispatch(event_for_key(key), query)

    def dispatch(self, event: SearchEvent, query: bytes) -> None:
        """Applies one event to the state machine."""
        if self.state is SearchState.IDLE:
            return

        self._restore_highlight()

        if event is SearchEvent.ACCEPT:
            logger.debug("Search accepted at row %d", self.last_match)
            self._finish()
            return
        if event is SearchEvent.CANCEL:
            self._restore_view()
            self._finish()
            return

        if event is SearchEvent.NEXT:
            self.direction = 1
        elif event is SearchEvent.PREVIOUS:
            self.direction = -1
        else:
            self.last_match = -1
            self.direction = 1

        if self.last_match == -1:
            self.direction = 1
        self._step(query)

    # --- helpers ---

    def _step(self, query: bytes) -> None:
        if not query:
            return
        doc = self.editor.document
        rows = doc.rows
        numrows = len(rows)
        current = self.last_match
        for _ in range(numrows):
            current += self.direction
            if current == -1:
                current = numrows - 1
            elif current == numrows:
                current = 0

            row = rows[current]
            offset = row.render.find(query)
            if offset == -1:
                continue

            ed = self.editor
            self.last_match = current
            ed.cy = current
            ed.cx = display_col_to_byte_col(row, offset, doc.tab_stop)
            # Past the end, so the next scroll puts the match row on top.
            ed.rowoff = numrows

            self._saved_hl_line = current
            self._saved_hl = bytes(row.highlight)
            end = min(offset + len(query), len(row.highlight))
            row.highlight[offset:end] = bytes([Highlight.MATCH]) * (end - offset)
            return

    def _restore_highlight(self) -> None:
        if self._saved_hl_line is None or self._saved_hl is None:
            return
        rows = self.editor.document.rows
        if self._saved_hl_line < len(rows):
            rows[self._saved_hl_line].highlight = bytearray(self._saved_hl)
        self._saved_hl_line = None
        self._saved_hl = None

    def _restore_view(self) -> None:
        if self._saved_view is None:
            return
        ed = self.editor
        ed.cx, ed.cy, ed.coloff, ed.rowoff = self._saved_view
