# tests/ui/test_terminal_app_mode.py
"""Unit tests for `TerminalAppMode`.
========================================

Raw mode itself needs a real terminal, so these tests cover what can be
exercised with pipes: refusing a non-terminal, the full-write loop, and both
ways of determining the window size.
"""

import errno
import os
import struct

import pytest

from tilde.ui import TerminalAppMode as terminal_module
from tilde.ui.TerminalAppMode import CLEAR_SCREEN, TerminalAppMode, TerminalError


@pytest.fixture
def pipes():
    """Two pipes: (input read end, input write end, output read end, output write end)."""
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    yield in_r, in_w, out_r, out_w
    for fd in (in_r, in_w, out_r, out_w):
        try:
            os.close(fd)
        except OSError:
            pass


def test_enter_refuses_non_terminal(pipes):
    in_r, _, _, out_w = pipes
    terminal = TerminalAppMode(fd_in=in_r, fd_out=out_w)
    with pytest.raises(TerminalError) as excinfo:
        terminal.enter()
    assert excinfo.value.errno == errno.ENOTTY
    assert isinstance(excinfo.value, OSError)


def test_exit_without_enter_is_noop(pipes):
    in_r, _, _, out_w = pipes
    TerminalAppMode(fd_in=in_r, fd_out=out_w).exit()


def test_write_and_clear_screen(pipes):
    in_r, _, out_r, out_w = pipes
    terminal = TerminalAppMode(fd_in=in_r, fd_out=out_w)
    terminal.write(b"hello")
    terminal.clear_screen()
    assert os.read(out_r, 64) == b"hello" + CLEAR_SCREEN


def test_write_loops_over_short_writes(pipes, monkeypatch):
    in_r, _, _, out_w = pipes
    chunks = []

    def short_write(fd, data):
        chunk = bytes(data[:2])
        chunks.append(chunk)
        return len(chunk)

    monkeypatch.setattr(terminal_module.os, "write", short_write)
    TerminalAppMode(fd_in=in_r, fd_out=out_w).write(b"abcde")
    assert chunks == [b"ab", b"cd", b"e"]


def test_window_size_from_ioctl(pipes, monkeypatch):
    in_r, _, _, out_w = pipes
    monkeypatch.setattr(
        terminal_module.fcntl, "ioctl", lambda fd, req, buf: struct.pack("HHHH", 30, 100, 0, 0)
    )
    assert TerminalAppMode(fd_in=in_r, fd_out=out_w).get_window_size() == (30, 100)


def _failing_ioctl(fd, req, buf):
    raise OSError(errno.ENOTTY, "not a tty")


def test_window_size_falls_back_to_cursor_report(pipes, monkeypatch):
    in_r, in_w, out_r, out_w = pipes
    monkeypatch.setattr(terminal_module.fcntl, "ioctl", _failing_ioctl)
    os.write(in_w, b"\x1b[24;80R")
    terminal = TerminalAppMode(fd_in=in_r, fd_out=out_w)
    assert terminal.get_window_size() == (24, 80)
    assert os.read(out_r, 64) == b"\x1b[999C\x1b[999B\x1b[6n"


def test_window_size_with_garbled_report_is_fatal(pipes, monkeypatch):
    in_r, in_w, _, out_w = pipes
    monkeypatch.setattr(terminal_module.fcntl, "ioctl", _failing_ioctl)
    os.write(in_w, b"garbage")
    os.close(in_w)
    with pytest.raises(TerminalError):
        TerminalAppMode(fd_in=in_r, fd_out=out_w).get_window_size()
