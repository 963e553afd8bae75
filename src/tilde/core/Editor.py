# tilde/core/Editor.py
"""tilde.core.Editor
============================
Editor: the editing session of the tilde terminal text editor.

This module defines the ``Editor`` class, the single handle that owns all
mutable state of a session and is passed explicitly to every component:

- the ``Document`` (rows, dirty counter, syntax profile),
- cursor position (``cx``/``cy``) and display column (``rx``),
- the viewport (``rowoff``/``coloff``, ``screenrows``/``screencols``),
- the editing mode, the status message and the unsaved-exit guard.

Components created here (``DrawScreen``, ``KeyBinder``, ``SearchController``)
hold a reference back to the editor. The terminal is injected; anything that
offers ``get_window_size``, ``write``, ``read_key`` and ``clear_screen`` will
do, which is how the tests drive the editor without a real terminal.
"""

import logging
import os
import time
from typing import Any, Optional

from tilde.core.Document import Document
from tilde.core.FileStore import load_lines, save_bytes
from tilde.core.Search import SearchController
from tilde.core.Syntax import SyntaxProfile, profiles_from_config, select_syntax
from tilde.ui.DrawScreen import DrawScreen
from tilde.ui.KeyBinder import Key, KeyBinder, Mode, ctrl_key
from tilde.ui.Prompt import LinePrompt, PromptObserver
from tilde.utils.utils import get_int_setting

logger = logging.getLogger("tilde")

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find | i = insert"
SAVE_AS_PROMPT = "Save as: %s (ESC to cancel)"
QUIT_WARNING = "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit."


## ==================== Editor Class ====================
class Editor:
    """The editing session.

    Attributes:
        terminal: Output sink and key source (see module docstring).
        config (dict[str, Any]): The merged configuration.
        document (Document): The text being edited.
        cx (int): Cursor byte column in ``document.rows[cy]``.
        cy (int): Cursor row; may equal ``document.row_count``.
        rx (int): Display column of the cursor, recomputed every refresh.
        rowoff (int): First document row shown on screen.
        coloff (int): First display column shown on screen.
        screenrows (int): Text rows available (terminal rows minus two bars).
        screencols (int): Terminal columns.
        filename (Optional[str]): Path the document is saved to.
        mode (Mode): NORMAL or INSERT.
        quit_times (int): Remaining Ctrl-Q presses refused while dirty.
        running (bool): Cleared when the session ends.
    """

    def __init__(
        self,
        terminal: Any,
        config: dict[str, Any],
        profiles: Optional[tuple[SyntaxProfile, ...]] = None,
    ) -> None:
        self.terminal = terminal
        self.config = config
        self._initialize_state(profiles)
        self._initialize_components()
        self.handle_resize()
        logger.info(
            "Editor initialized: %dx%d, tab_stop=%d, %d syntax profiles",
            self.screencols, self.screenrows, self.document.tab_stop, len(self.profiles),
        )

    def _initialize_state(self, profiles: Optional[tuple[SyntaxProfile, ...]]) -> None:
        self.profiles: tuple[SyntaxProfile, ...] = (
            profiles if profiles is not None else profiles_from_config(self.config)
        )
        self.document = Document(
            tab_stop=get_int_setting(self.config, "editor", "tab_stop", minimum=1)
        )
        self.cx: int = 0
        self.cy: int = 0
        self.rx: int = 0
        self.rowoff: int = 0
        self.coloff: int = 0
        self.screenrows: int = 0
        self.screencols: int = 0
        self.filename: Optional[str] = None
        self.status_message: str = ""
        self.status_message_time: float = 0.0
        self.mode: Mode = Mode.NORMAL
        self.max_quit_times: int = get_int_setting(self.config, "editor", "quit_times")
        self.quit_times: int = self.max_quit_times
        self.running: bool = True

    def _initialize_components(self) -> None:
        self.drawer = DrawScreen(self, self.config)
        self.search = SearchController(self)
        # KeyBinder binds editor methods, so it comes last.
        self.keybinder = KeyBinder(self)
        self.handle_input = self.keybinder.handle_input

    # --- status bar ---

    def set_status_message(self, fmt: str, *args: object) -> None:
        """Sets the message bar text, ``%``-formatted with *args*."""
        self.status_message = fmt % args if args else fmt
        self.status_message_time = time.time()

    # --- files ---

    def select_syntax_highlight(self) -> None:
        self.document.set_syntax(select_syntax(self.filename, self.profiles))

    def open_file(self, filename: str) -> None:
        """Loads *filename* into the document.

        Raises:
            OSError: The file cannot be read. Callers treat this as fatal.
        """
        self.filename = filename
        lines = load_lines(filename)
        self.document.set_syntax(select_syntax(filename, self.profiles))
        self.document.load(lines)
        self.cx = self.cy = self.rowoff = self.coloff = 0

    def save_file(self) -> bool:
        """Writes the document to ``filename``, prompting for one if unset.

        Returns:
            bool: True if the file was written.
        """
        if self.filename is None:
            name = self.prompt(SAVE_AS_PROMPT)
            if name is None:
                self.set_status_message("Save aborted")
                return False
            self.filename = os.fsdecode(name)
            self.select_syntax_highlight()

        data = self.document.rows_to_text()
        try:
            written = save_bytes(self.filename, data)
        except OSError as e:
            logger.error("Could not save %s: %s", self.filename, e, exc_info=True)
            self.set_status_message("Can't save! I/O error: %s", e.strerror or str(e))
            return False

        self.document.mark_clean()
        self.set_status_message("%d bytes written to disk", written)
        return True

    # --- prompts and search ---

    def prompt(self, template: str, observer: Optional[PromptObserver] = None) -> Optional[bytes]:
        return LinePrompt(self, template, observer).run()

    def find(self) -> bool:
        self.search.run()
        return True

    # --- cursor movement ---

    def move_cursor(self, key: int) -> bool:
        """Moves the cursor one step; wraps at line ends and snaps to row length."""
        doc = self.document
        row = doc.rows[self.cy] if self.cy < doc.row_count else None

        if key == Key.ARROW_LEFT:
            if self.cx != 0:
                self.cx -= 1
            elif self.cy > 0:
                self.cy -= 1
                self.cx = doc.rows[self.cy].size
        elif key == Key.ARROW_RIGHT:
            if row is not None and self.cx < row.size:
                self.cx += 1
            elif row is not None and self.cx == row.size:
                self.cy += 1
                self.cx = 0
        elif key == Key.ARROW_UP:
            if self.cy != 0:
                self.cy -= 1
        elif key == Key.ARROW_DOWN:
            if self.cy < doc.row_count:
                self.cy += 1
        else:
            return False

        row = doc.rows[self.cy] if self.cy < doc.row_count else None
        rowlen = row.size if row is not None else 0
        if self.cx > rowlen:
            self.cx = rowlen
        return True

    def handle_home(self) -> bool:
        self.cx = 0
        return True

    def handle_end(self) -> bool:
        if self.cy < self.document.row_count:
            self.cx = self.document.rows[self.cy].size
        return True

    def handle_page_up(self) -> bool:
        """Cursor to the top of the screen, then up one screen."""
        self.cy = self.rowoff
        for _ in range(self.screenrows):
            self.move_cursor(Key.ARROW_UP)
        return True

    def handle_page_down(self) -> bool:
        """Cursor to the bottom of the screen, then down one screen."""
        self.cy = min(self.rowoff + self.screenrows - 1, self.document.row_count)
        for _ in range(self.screenrows):
            self.move_cursor(Key.ARROW_DOWN)
        return True

    # --- editing ---

    def set_mode(self, mode: Mode) -> bool:
        if self.mode is mode:
            return False
        logger.debug("Mode %s -> %s", self.mode.value, mode.value)
        self.mode = mode
        return True

    def insert_char(self, ch: int) -> bool:
        """Inserts byte *ch* at the cursor; past the last row a row is appended first."""
        doc = self.document
        if self.cy == doc.row_count:
            doc.insert_row(doc.row_count)
        doc.insert_char(self.cy, self.cx, ch)
        self.cx += 1
        return True

    def insert_newline(self) -> bool:
        doc = self.document
        if self.cx == 0:
            doc.insert_row(self.cy)
        else:
            doc.split_row(self.cy, self.cx)
        self.cy += 1
        self.cx = 0
        return True

    def delete_char(self) -> bool:
        """Deletes the byte left of the cursor, joining rows at column 0.

        Returns:
            bool: False when there is nothing to delete.
        """
        doc = self.document
        if self.cy == doc.row_count:
            return False
        if self.cx == 0 and self.cy == 0:
            logger.debug("delete_char at start of document ignored")
            return False

        if self.cx > 0:
            doc.delete_char(self.cy, self.cx - 1)
            self.cx -= 1
        else:
            prev = doc.rows[self.cy - 1]
            self.cx = prev.size
            doc.append_bytes(self.cy - 1, bytes(doc.rows[self.cy].raw))
            doc.delete_row(self.cy)
            self.cy -= 1
        return True

    def delete_forward(self) -> bool:
        self.move_cursor(Key.ARROW_RIGHT)
        return self.delete_char()

    # --- session ---

    def quit_editor(self) -> bool:
        """Ends the session unless unsaved changes still need confirming.

        Returns:
            bool: True if the session ended.
        """
        if self.document.dirty and self.quit_times > 0:
            self.set_status_message(QUIT_WARNING, self.quit_times)
            self.quit_times -= 1
            return False
        self.terminal.clear_screen()
        self.running = False
        logger.info("Editor session ended")
        return True

    def process_keypress(self, key: Optional[int] = None) -> None:
        """Reads (unless given) and handles one key."""
        if key is None:
            key = self.read_key()
        if key == ctrl_key("q"):
            if not self.quit_editor():
                return
        else:
            self.handle_input(key)
        self.quit_times = self.max_quit_times

    def read_key(self) -> int:
        return self.terminal.read_key()

    def refresh_screen(self) -> None:
        self.drawer.draw()

    def handle_resize(self) -> bool:
        """Re-queries the terminal size and clamps the cursor into the document."""
        rows, cols = self.terminal.get_window_size()
        self.screenrows = max(1, rows - 2)
        self.screencols = max(1, cols)
        doc = self.document
        if self.cy > doc.row_count:
            self.cy = doc.row_count
        rowlen = doc.rows[self.cy].size if self.cy < doc.row_count else 0
        if self.cx > rowlen:
            self.cx = rowlen
        logger.debug("Window size %dx%d, %d text rows", cols, rows, self.screenrows)
        return True

    def handle_sigwinch(self, signum: int, frame: Any) -> None:
        self.handle_resize()
        self.refresh_screen()

    def run(self) -> None:
        """Main loop: draw a frame, handle one key, until the session ends."""
        self.set_status_message(HELP_MESSAGE)
        while self.running:
            self.refresh_screen()
            self.process_keypress()
