# tilde/core/Document.py
"""tilde.core.Document
=====================

The row store: an ordered list of ``Row`` objects plus a dirty counter.

Every row owns its raw bytes and the state derived from them (the tab-expanded
``render`` buffer, the per-byte ``highlight`` tags and the ``comment_open``
flag). All mutations go through ``Document`` so the derived state is
recomputed, and the highlight cascade run, before the mutation returns.

Editing positions are clamped silently: the key handling layer is expected to
have constrained the cursor already, so an out-of-range request is a no-op
rather than an error.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tilde.core.DisplayMapper import DEFAULT_TAB_STOP, render_tabs
from tilde.core.Highlighter import Highlighter
from tilde.core.Syntax import SyntaxProfile

logger = logging.getLogger("tilde")


@dataclass
class Row:
    """One line of the document, without its trailing newline."""

    index: int
    raw: bytearray
    render: bytes = b""
    highlight: bytearray = field(default_factory=bytearray)
    comment_open: bool = False

    @property
    def size(self) -> int:
        return len(self.raw)

    @property
    def rsize(self) -> int:
        return len(self.render)


## ==================== Document Class ====================
class Document:
    """Ordered rows plus the modification counter.

    Attributes:
        rows (list[Row]): The rows, always indexed 0..N-1 in document order.
        dirty (int): Incremented by every content change; reset by ``load``
            and ``mark_clean``.
        tab_stop (int): Width of a tab stop used to build render buffers.
        highlighter (Highlighter): Classifies rows for the active profile.
    """

    def __init__(
        self,
        tab_stop: int = DEFAULT_TAB_STOP,
        syntax: Optional[SyntaxProfile] = None,
    ) -> None:
        self.rows: list[Row] = []
        self.dirty: int = 0
        self.tab_stop: int = max(1, tab_stop)
        self.highlighter: Highlighter = Highlighter(syntax)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def syntax(self) -> Optional[SyntaxProfile]:
        return self.highlighter.profile

    # --- derived state ---

    def update_row(self, index: int) -> None:
        """Rebuilds the render buffer of ``rows[index]`` and re-highlights it,
        cascading to following rows when the comment state changes."""
        row = self.rows[index]
        row.render = render_tabs(row.raw, self.tab_stop)
        self.highlighter.update(self.rows, index)

    def set_syntax(self, profile: Optional[SyntaxProfile]) -> None:
        """Switches the syntax profile and re-highlights the whole document."""
        self.highlighter.set_profile(profile)
        self._rehighlight_all()

    def set_tab_stop(self, tab_stop: int) -> None:
        self.tab_stop = max(1, tab_stop)
        for row in self.rows:
            row.render = render_tabs(row.raw, self.tab_stop)
        self._rehighlight_all()

    def _rehighlight_all(self) -> None:
        in_comment = False
        for row in self.rows:
            in_comment = self.highlighter.scan(row, in_comment)
            row.comment_open = in_comment

    # --- structural operations ---

    def insert_row(self, at: int, data: bytes = b"") -> Row:
        """Inserts a new row holding *data* at position *at* (clamped)."""
        at = max(0, min(at, len(self.rows)))
        row = Row(index=at, raw=bytearray(data))
        # The successor used to see the predecessor's state; starting from it
        # makes the cascade fire exactly when the successor's input changes.
        if at > 0:
            row.comment_open = self.rows[at - 1].comment_open
        self.rows.insert(at, row)
        self._renumber(at + 1)
        self.update_row(at)
        self.dirty += 1
        logger.debug("Inserted row %d (%d bytes)", at, len(data))
        return row

    def delete_row(self, at: int) -> None:
        """Removes row *at*. Out-of-range indices and the only row are kept."""
        if at < 0 or at >= len(self.rows) or len(self.rows) == 1:
            logger.debug("delete_row(%d) ignored; %d rows", at, len(self.rows))
            return
        del self.rows[at]
        self._renumber(at)
        if at < len(self.rows):
            self.highlighter.update(self.rows, at)
        self.dirty += 1
        logger.debug("Deleted row %d", at)

    def split_row(self, index: int, at: int) -> None:
        """Moves the bytes of row *index* from column *at* into a new next row."""
        if not 0 <= index < len(self.rows):
            return
        row = self.rows[index]
        at = max(0, min(at, row.size))
        suffix = bytes(row.raw[at:])
        self.insert_row(index + 1, suffix)
        del row.raw[at:]
        self.update_row(index)
        self.dirty += 1

    def _renumber(self, start: int) -> None:
        for j in range(start, len(self.rows)):
            self.rows[j].index = j

    # --- in-row operations ---

    def insert_char(self, index: int, at: int, ch: int) -> None:
        """Inserts byte *ch* into row *index* at column *at* (clamped)."""
        if not 0 <= index < len(self.rows):
            return
        row = self.rows[index]
        at = max(0, min(at, row.size))
        row.raw.insert(at, ch & 0xFF)
        self.update_row(index)
        self.dirty += 1

    def delete_char(self, index: int, at: int) -> None:
        """Removes the byte at column *at* of row *index*; out of range is a no-op."""
        if not 0 <= index < len(self.rows):
            return
        row = self.rows[index]
        if at < 0 or at >= row.size:
            return
        del row.raw[at]
        self.update_row(index)
        self.dirty += 1

    def append_bytes(self, index: int, data: bytes) -> None:
        if not 0 <= index < len(self.rows):
            return
        self.rows[index].raw.extend(data)
        self.update_row(index)
        self.dirty += 1

    # --- persistence ---

    def rows_to_text(self) -> bytes:
        """Serializes the document: every row followed by one ``\\n``."""
        return b"".join(bytes(row.raw) + b"\n" for row in self.rows)

    def load(self, lines: Iterable[bytes]) -> None:
        """Replaces the content with *lines* and marks the document clean."""
        self.rows = [
            Row(index=i, raw=bytearray(line)) for i, line in enumerate(lines)
        ]
        for row in self.rows:
            row.render = render_tabs(row.raw, self.tab_stop)
        self._rehighlight_all()
        self.dirty = 0
        logger.debug("Loaded %d rows", len(self.rows))

    def mark_clean(self) -> None:
        self.dirty = 0
