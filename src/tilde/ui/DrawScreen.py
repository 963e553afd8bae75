# tilde/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen composes one complete frame of the editor as VT100 escape sequences.

It is responsible for:
- keeping the cursor inside the visible grid (row and column scrolling),
- drawing the visible slice of every row with syntax colours,
- showing control bytes as inverse-video placeholders,
- drawing filler rows and the welcome banner for an empty document,
- rendering the status bar and the message bar,
- placing the terminal cursor.

The frame is built into a single ``bytearray`` and handed to the terminal in
one write, with the cursor hidden while it is being painted.
"""

import logging
import time
from typing import TYPE_CHECKING, Any

from tilde.core.DisplayMapper import byte_col_to_display_col
from tilde.core.Highlighter import Highlight
from tilde.utils.utils import DEFAULT_CONFIG, VERSION, get_int_setting

if TYPE_CHECKING:
    from tilde.core.Editor import Editor

HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
CURSOR_HOME = b"\x1b[H"
ERASE_LINE = b"\x1b[K"
INVERSE = b"\x1b[7m"
RESET_ATTRS = b"\x1b[m"
DEFAULT_FG = b"\x1b[39m"
CRLF = b"\r\n"

WELCOME = f"tilde editor -- version {VERSION}"
FALLBACK_COLOR = 37

# Highlight class -> key of the [colors] configuration table.
# NORMAL text is drawn in the terminal's default foreground.
COLOR_KEYS: dict[Highlight, str] = {
    Highlight.COMMENT: "comment",
    Highlight.BLOCK_COMMENT: "block_comment",
    Highlight.KEYWORD1: "keyword1",
    Highlight.KEYWORD2: "keyword2",
    Highlight.STRING: "string",
    Highlight.NUMBER: "number",
    Highlight.MATCH: "match",
}


def is_control(byte: int) -> bool:
    return byte < 32 or byte == 127


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Turns the editor's document, cursor and viewport state into terminal output.

    Attributes:
        editor (Editor): The session being drawn.
        colors (dict[Highlight, int]): ANSI foreground code per highlight class.
        message_timeout (int): Seconds a status message stays visible.

    Methods:
        scroll(): Recomputes ``rx`` and adjusts ``rowoff``/``coloff``.
        compose(): Returns the complete frame as bytes.
        draw(): Scrolls, composes and writes the frame in one call.
    """

    def __init__(self, editor: "Editor", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.colors = self._load_colors(config)
        self.message_timeout = get_int_setting(config, "editor", "message_timeout")

    @staticmethod
    def _load_colors(config: dict[str, Any]) -> dict[Highlight, int]:
        configured = config.get("colors", {})
        defaults = DEFAULT_CONFIG["colors"]
        colors = {}
        for hl, key in COLOR_KEYS.items():
            value = configured.get(key, defaults[key])
            try:
                colors[hl] = int(value)
            except (TypeError, ValueError):
                logging.warning("Invalid colour for %s: %r; using %s", key, value, defaults[key])
                colors[hl] = defaults[key]
        return colors

    def syntax_to_color(self, hl: int) -> int:
        """ANSI foreground code for highlight class *hl*."""
        try:
            return self.colors.get(Highlight(hl), FALLBACK_COLOR)
        except ValueError:
            return FALLBACK_COLOR

    # ── public ───────────────────────────────────────────────────────────────

    def draw(self) -> None:
        self.scroll()
        self.editor.terminal.write(self.compose())

    def scroll(self) -> None:
        """Adjusts the offsets just enough to keep the cursor on screen."""
        ed = self.editor
        doc = ed.document
        ed.rx = 0
        if ed.cy < doc.row_count:
            ed.rx = byte_col_to_display_col(doc.rows[ed.cy], ed.cx, doc.tab_stop)

        if ed.cy < ed.rowoff:
            ed.rowoff = ed.cy
        if ed.cy >= ed.rowoff + ed.screenrows:
            ed.rowoff = ed.cy - ed.screenrows + 1
        if ed.rx < ed.coloff:
            ed.coloff = ed.rx
        if ed.rx >= ed.coloff + ed.screencols:
            ed.coloff = ed.rx - ed.screencols + 1

    def compose(self) -> bytes:
        """Builds the frame for the current state; does not scroll."""
        ed = self.editor
        ab = bytearray()
        ab += HIDE_CURSOR
        ab += CURSOR_HOME

        self._draw_rows(ab)
        self._draw_status_bar(ab)
        self._draw_message_bar(ab)

        ab += b"\x1b[%d;%dH" % (ed.cy - ed.rowoff + 1, ed.rx - ed.coloff + 1)
        ab += SHOW_CURSOR
        return bytes(ab)

    # ── text area ────────────────────────────────────────────────────────────

    def _draw_rows(self, ab: bytearray) -> None:
        ed = self.editor
        doc = ed.document
        for y in range(ed.screenrows):
            filerow = y + ed.rowoff
            if filerow >= doc.row_count:
                if doc.row_count == 0 and y == ed.screenrows // 2:
                    self._draw_welcome(ab)
                else:
                    ab += b"~"
            else:
                self._draw_row_slice(ab, filerow)
            ab += ERASE_LINE
            ab += CRLF

    def _draw_welcome(self, ab: bytearray) -> None:
        screencols = self.editor.screencols
        welcome = WELCOME.encode()[:screencols]
        padding = (screencols - len(welcome)) // 2
        if padding:
            ab += b"~"
            padding -= 1
        ab += b" " * padding
        ab += welcome

    def _draw_row_slice(self, ab: bytearray, filerow: int) -> None:
        ed = self.editor
        row = ed.document.rows[filerow]
        length = max(0, min(row.rsize - ed.coloff, ed.screencols))
        chars = row.render[ed.coloff:ed.coloff + length]
        hl = row.highlight[ed.coloff:ed.coloff + length]

        current_color = -1
        for j, c in enumerate(chars):
            if is_control(c):
                sym = ord("@") + c if c <= 26 else ord("?")
                ab += INVERSE
                ab.append(sym)
                ab += RESET_ATTRS
                if current_color != -1:
                    ab += b"\x1b[%dm" % current_color
            elif hl[j] == Highlight.NORMAL:
                if current_color != -1:
                    ab += DEFAULT_FG
                    current_color = -1
                ab.append(c)
            else:
                color = self.syntax_to_color(hl[j])
                if color != current_color:
                    current_color = color
                    ab += b"\x1b[%dm" % color
                ab.append(c)
        ab += DEFAULT_FG

    # ── bars ─────────────────────────────────────────────────────────────────

    def _draw_status_bar(self, ab: bytearray) -> None:
        ed = self.editor
        doc = ed.document
        screencols = ed.screencols
        ab += INVERSE

        filename = ed.filename or "[No Name]"
        status = "%.20s - %d lines %s - %s" % (
            filename,
            doc.row_count,
            "(modified)" if doc.dirty else "",
            ed.mode.value,
        )
        syntax = doc.syntax
        rstatus = "%s | %d/%d" % (
            syntax.filetype if syntax else "no ft",
            ed.cy + 1,
            doc.row_count,
        )
        left = status.encode(errors="replace")[:screencols]
        right = rstatus.encode(errors="replace")

        ab += left
        length = len(left)
        while length < screencols:
            if screencols - length == len(right):
                ab += right
                break
            ab += b" "
            length += 1

        ab += RESET_ATTRS
        ab += CRLF

    def _draw_message_bar(self, ab: bytearray) -> None:
        ed = self.editor
        ab += ERASE_LINE
        msg = ed.status_message.encode(errors="replace")[:ed.screencols]
        if msg and time.time() - ed.status_message_time < self.message_timeout:
            ab += msg
