# tilde/ui/KeyBinder.py
"""KeyBinder.py
==================

Translates key presses into editor actions.

Two pieces live here:

- ``KeyReader`` turns the raw byte stream of a terminal in raw mode into
  logical key codes: plain bytes pass through unchanged, recognised escape
  sequences become members of ``Key``, and anything unrecognised collapses
  into a bare Escape.
- ``KeyBinder`` dispatches a logical key to the editor. Some keys act in every
  mode (save, find, movement); the rest depend on the current ``Mode``: in
  NORMAL mode ``h/j/k/l`` move and ``i`` switches to INSERT, in INSERT mode
  keys edit the document and Ctrl-J switches back.

Key bindings are fixed; there is no user configuration for them.
"""

import enum
import logging
import os
from typing import TYPE_CHECKING, Callable, Optional

from tilde.utils.logging_config import KEY_LOGGER

if TYPE_CHECKING:
    from tilde.core.Editor import Editor


def ctrl_key(letter: str) -> int:
    """Code produced by Ctrl+*letter* in raw mode."""
    return ord(letter) & 0x1F


class Key(enum.IntEnum):
    """Logical key codes. Values above 255 never collide with a byte."""

    CTRL_H = 8
    ENTER = 13
    ESCAPE = 27
    BACKSPACE = 127
    ARROW_LEFT = 1000
    ARROW_RIGHT = 1001
    ARROW_UP = 1002
    ARROW_DOWN = 1003
    DELETE = 1004
    HOME = 1005
    END = 1006
    PAGE_UP = 1007
    PAGE_DOWN = 1008


class Mode(enum.Enum):
    """Editing mode; the value is the name shown in the status bar."""

    NORMAL = "normal"
    INSERT = "insert"


# Normalized escape sequences map. Keys do NOT include the leading ESC (0x1B).
ESCAPE_SEQUENCE_MAP: dict[bytes, Key] = {
    # Arrows
    b"[A": Key.ARROW_UP, b"[B": Key.ARROW_DOWN,
    b"[C": Key.ARROW_RIGHT, b"[D": Key.ARROW_LEFT,
    # Home/End (CSI/SS3 and tilde variants)
    b"[H": Key.HOME, b"[F": Key.END, b"OH": Key.HOME, b"OF": Key.END,
    b"[1~": Key.HOME, b"[7~": Key.HOME, b"[4~": Key.END, b"[8~": Key.END,
    # Delete/PageUp/PageDown
    b"[3~": Key.DELETE, b"[5~": Key.PAGE_UP, b"[6~": Key.PAGE_DOWN,
}


## ==================== KeyReader Class ====================
class KeyReader:
    """Decodes keys from a file descriptor in raw mode.

    The descriptor is expected to have a short read timeout (VMIN=0,
    VTIME=1), so a read that returns nothing means "no byte yet". The first
    byte of a key is waited for indefinitely; the bytes of an escape sequence
    are not, so a lone ESC press is reported as ``Key.ESCAPE``.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd

    def _read_byte_once(self) -> Optional[int]:
        try:
            data = os.read(self.fd, 1)
        except InterruptedError:
            return None
        if not data:
            return None
        return data[0]

    def _read_byte_blocking(self) -> int:
        while True:
            c = self._read_byte_once()
            if c is not None:
                return c

    def read_key(self) -> int:
        """Blocks until one complete key has been read and returns its code."""
        c = self._read_byte_blocking()
        if c != Key.ESCAPE:
            KEY_LOGGER.debug("key byte %d", c)
            return c

        seq = bytearray()
        for _ in range(2):
            nxt = self._read_byte_once()
            if nxt is None:
                return Key.ESCAPE
            seq.append(nxt)

        if seq[0] == ord("[") and ord("0") <= seq[1] <= ord("9"):
            nxt = self._read_byte_once()
            if nxt is None:
                return Key.ESCAPE
            seq.append(nxt)

        key = ESCAPE_SEQUENCE_MAP.get(bytes(seq), Key.ESCAPE)
        KEY_LOGGER.debug("escape sequence %r -> %s", bytes(seq), key.name)
        return key


## ==================== KeyBinder Class ====================
class KeyBinder:
    """Maps logical keys to editor actions.

    Attributes:
        editor (Editor): The session the actions operate on.
        action_map (dict): Keys handled identically in every mode.
        normal_map (dict): Keys handled in NORMAL mode.
        insert_map (dict): Keys handled in INSERT mode; any other key below
            256 is inserted into the document.
    """

    def __init__(self, editor: "Editor") -> None:
        logging.debug("KeyBinder initialized with editor: %s", editor)
        self.editor = editor
        self.action_map = self._setup_action_map()
        self.normal_map = self._setup_normal_map()
        self.insert_map = self._setup_insert_map()

    def _setup_action_map(self) -> dict[int, Callable[[], object]]:
        ed = self.editor
        return {
            ctrl_key("s"): ed.save_file,
            ctrl_key("f"): ed.find,
            Key.HOME: ed.handle_home,
            Key.END: ed.handle_end,
            Key.PAGE_UP: ed.handle_page_up,
            ctrl_key("y"): ed.handle_page_up,
            Key.PAGE_DOWN: ed.handle_page_down,
            ctrl_key("e"): ed.handle_page_down,
            Key.ARROW_UP: lambda: ed.move_cursor(Key.ARROW_UP),
            Key.ARROW_DOWN: lambda: ed.move_cursor(Key.ARROW_DOWN),
            Key.ARROW_LEFT: lambda: ed.move_cursor(Key.ARROW_LEFT),
            Key.ARROW_RIGHT: lambda: ed.move_cursor(Key.ARROW_RIGHT),
            ctrl_key("l"): lambda: None,
            Key.ESCAPE: lambda: None,
        }

    def _setup_normal_map(self) -> dict[int, Callable[[], object]]:
        ed = self.editor
        return {
            ord("h"): lambda: ed.move_cursor(Key.ARROW_LEFT),
            ord("j"): lambda: ed.move_cursor(Key.ARROW_DOWN),
            ord("k"): lambda: ed.move_cursor(Key.ARROW_UP),
            ord("l"): lambda: ed.move_cursor(Key.ARROW_RIGHT),
            ord("i"): lambda: ed.set_mode(Mode.INSERT),
        }

    def _setup_insert_map(self) -> dict[int, Callable[[], object]]:
        ed = self.editor
        return {
            Key.ENTER: ed.insert_newline,
            Key.BACKSPACE: ed.delete_char,
            Key.CTRL_H: ed.delete_char,
            Key.DELETE: ed.delete_forward,
            ctrl_key("j"): lambda: ed.set_mode(Mode.NORMAL),
        }

    def handle_input(self, key: int) -> bool:
        """Dispatches *key*.

        Returns:
            bool: True if the key triggered an action, False if it was ignored.
        """
        KEY_LOGGER.debug("dispatch key=%d mode=%s", key, self.editor.mode.value)

        action = self.action_map.get(key)
        if action is not None:
            action()
            return True

        if self.editor.mode is Mode.INSERT:
            action = self.insert_map.get(key)
            if action is not None:
                action()
                return True
            if 0 <= key < 256:
                self.editor.insert_char(key)
                return True
            return False

        action = self.normal_map.get(key)
        if action is not None:
            action()
            return True
        return False
