# src/tilde/ui/TerminalAppMode.py
from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import struct
import sys
import termios
from typing import Optional

from tilde.ui.KeyBinder import KeyReader

CLEAR_SCREEN = b"\x1b[2J\x1b[H"
_CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)R")


class TerminalError(OSError):
    """Raw mode or window size could not be established. Always fatal."""


class TerminalAppMode:
    """
    Put the terminal into the raw state the editor draws on:

    - input: no break-to-SIGINT, no CR->NL, no parity check, no 8th-bit strip,
      no XON/XOFF flow control;
    - output: no post-processing (``\\n`` is not turned into ``\\r\\n``);
    - 8-bit characters;
    - local: no echo, no canonical line buffering, no signal keys, no ^V;
    - reads return after at most 100 ms even when no byte arrived.

    Usable as a context manager, or pair `enter()` with `exit()` in try/finally.
    The instance is also the editor's output and key source.
    """

    def __init__(self, fd_in: Optional[int] = None, fd_out: Optional[int] = None) -> None:
        self.fd_in = sys.stdin.fileno() if fd_in is None else fd_in
        self.fd_out = sys.stdout.fileno() if fd_out is None else fd_out
        self._orig_attrs: Optional[list] = None
        self._reader = KeyReader(self.fd_in)

    def __enter__(self) -> "TerminalAppMode":
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exit()

    def enter(self) -> None:
        if not os.isatty(self.fd_in):
            raise TerminalError(errno.ENOTTY, "standard input is not a terminal")
        try:
            self._orig_attrs = termios.tcgetattr(self.fd_in)
            raw = termios.tcgetattr(self.fd_in)
            raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
            raw[1] &= ~termios.OPOST
            raw[2] |= termios.CS8
            raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
            raw[6][termios.VMIN] = 0
            raw[6][termios.VTIME] = 1
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, raw)
        except termios.error as e:
            self._orig_attrs = None
            raise TerminalError(errno.EIO, f"cannot enable raw mode: {e}") from e
        logging.debug("TerminalAppMode: entered raw mode on fd %d.", self.fd_in)

    def exit(self) -> None:
        if self._orig_attrs is None:
            return
        try:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, self._orig_attrs)
        except termios.error as e:
            logging.error("TerminalAppMode: cannot restore terminal: %r", e)
        self._orig_attrs = None
        logging.debug("TerminalAppMode: exited (restored terminal modes).")

    # ── output ───────────────────────────────────────────────────────────────

    def write(self, data: bytes) -> None:
        """Writes all of *data*, looping over short writes."""
        view = memoryview(data)
        while view:
            try:
                n = os.write(self.fd_out, view)
            except InterruptedError:
                continue
            view = view[n:]

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)

    # ── input ────────────────────────────────────────────────────────────────

    def read_key(self) -> int:
        return self._reader.read_key()

    # ── geometry ─────────────────────────────────────────────────────────────

    def get_window_size(self) -> tuple[int, int]:
        """Returns ``(rows, cols)``.

        Asks the kernel first; if that fails or reports zero columns, pushes
        the cursor to the bottom-right corner and reads back its position.

        Raises:
            TerminalError: Neither method produced a size.
        """
        try:
            packed = fcntl.ioctl(self.fd_out, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
            rows, cols, _, _ = struct.unpack("HHHH", packed)
            if cols:
                return rows, cols
        except OSError as e:
            logging.debug("TIOCGWINSZ failed: %r; falling back to cursor query", e)

        self.write(b"\x1b[999C\x1b[999B")
        return self._get_cursor_position()

    def _get_cursor_position(self) -> tuple[int, int]:
        self.write(b"\x1b[6n")
        buf = bytearray()
        while len(buf) < 31:
            try:
                data = os.read(self.fd_in, 1)
            except InterruptedError:
                continue
            if not data:
                break
            buf += data
            if data == b"R":
                break
        match = _CURSOR_REPORT.match(bytes(buf))
        if not match:
            raise TerminalError(errno.EIO, "cannot determine window size")
        return int(match.group(1)), int(match.group(2))
