# tilde/core/DisplayMapper.py
"""Conversion between raw byte columns and tab-expanded display columns.

A row's ``raw`` bytes are what the user typed; its ``render`` bytes are what
the terminal shows, with every tab expanded to the next multiple of the tab
stop. The cursor lives in byte columns (``cx``) while the screen needs display
columns (``rx``); the functions here map between the two and are pure.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tilde.core.Document import Row

DEFAULT_TAB_STOP = 2
TAB = 0x09


def render_tabs(raw: bytes, tab_stop: int = DEFAULT_TAB_STOP) -> bytes:
    """Returns *raw* with each tab replaced by 1..tab_stop spaces up to the next stop."""
    if TAB not in raw:
        return bytes(raw)
    out = bytearray()
    for byte in raw:
        if byte == TAB:
            out.append(0x20)
            while len(out) % tab_stop != 0:
                out.append(0x20)
        else:
            out.append(byte)
    return bytes(out)


def byte_col_to_display_col(row: "Row", byte_col: int, tab_stop: int = DEFAULT_TAB_STOP) -> int:
    """Maps byte column *byte_col* of *row* to its display column."""
    rx = 0
    for byte in row.raw[:byte_col]:
        if byte == TAB:
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


def display_col_to_byte_col(row: "Row", display_col: int, tab_stop: int = DEFAULT_TAB_STOP) -> int:
    """Maps display column *display_col* of *row* back to a byte column.

    Returns the first byte column whose cumulative display width exceeds
    *display_col*, or the row length when the target lies past the end.
    """
    cur_rx = 0
    for cx, byte in enumerate(row.raw):
        if byte == TAB:
            cur_rx += (tab_stop - 1) - (cur_rx % tab_stop)
        cur_rx += 1
        if cur_rx > display_col:
            return cx
    return len(row.raw)
