# tilde/core/Highlighter.py
"""tilde.core.Highlighter
========================

Incremental lexical highlighter.

Each row is scanned on its own, from column 0 of its ``render`` buffer, and
produces one ``Highlight`` tag per byte. The only state that crosses a line
boundary is whether the row ends inside an unterminated block comment
(``Row.comment_open``). When a re-scan changes that flag, the following row
has to be re-scanned too, and so on down the document; this cascade is an
explicit loop so a pathological file cannot exhaust the call stack.

Scanning rules, in priority order at each position:

1. Single-line comment marker (outside strings and block comments): the rest
   of the row is ``COMMENT``.
2. Block comments (outside strings): open on the start marker, stay open
   byte by byte, close on the end marker.
3. Strings (when enabled): ``"`` or ``'`` opens, a backslash escapes the
   next byte, the matching quote closes.
4. Numbers (when enabled): a digit at a separator boundary, or a digit or
   ``.`` continuing a number.
5. Keywords at a separator boundary followed by a separator; longest first.
6. Anything else is ``NORMAL``.
"""

import enum
import logging
from typing import TYPE_CHECKING, Optional, Sequence

from tilde.core.Syntax import SyntaxFlags, SyntaxProfile

if TYPE_CHECKING:
    from tilde.core.Document import Row

logger = logging.getLogger("tilde")

SEPARATORS = frozenset(b",.()+-/*=~%<>[];")
WHITESPACE = frozenset(b" \t\n\v\f\r")
BACKSLASH = ord("\\")
QUOTES = frozenset(b"\"'")
DOT = ord(".")


class Highlight(enum.IntEnum):
    """Per-byte classification of a rendered row."""

    NORMAL = 0
    COMMENT = 1
    BLOCK_COMMENT = 2
    KEYWORD1 = 3
    KEYWORD2 = 4
    STRING = 5
    NUMBER = 6
    MATCH = 7


def is_separator(byte: int) -> bool:
    """True for whitespace, NUL and the punctuation that delimits words."""
    return byte == 0 or byte in WHITESPACE or byte in SEPARATORS


def _is_digit(byte: int) -> bool:
    return 0x30 <= byte <= 0x39


## ==================== Highlighter Class ====================
class Highlighter:
    """Stateful highlighter bound to one syntax profile (or none).

    Attributes:
        profile (Optional[SyntaxProfile]): Active profile; ``None`` disables
            highlighting entirely.
    """

    def __init__(self, profile: Optional[SyntaxProfile] = None) -> None:
        self.profile: Optional[SyntaxProfile] = None
        self._keywords: list[tuple[bytes, Highlight]] = []
        self._scs = b""
        self._mcs = b""
        self._mce = b""
        self.set_profile(profile)

    def set_profile(self, profile: Optional[SyntaxProfile]) -> None:
        """Swaps the active profile and pre-encodes its markers and keywords."""
        self.profile = profile
        if profile is None:
            self._keywords = []
            self._scs = self._mcs = self._mce = b""
            return

        keywords = []
        for word in profile.keywords:
            if word.endswith("|"):
                keywords.append((word[:-1].encode(), Highlight.KEYWORD2))
            else:
                keywords.append((word.encode(), Highlight.KEYWORD1))
        # Longest match first; ties keep the table order.
        keywords.sort(key=lambda item: len(item[0]), reverse=True)
        self._keywords = [kw for kw in keywords if kw[0]]

        self._scs = profile.singleline_comment_start.encode()
        self._mcs = profile.multiline_comment_start.encode()
        self._mce = profile.multiline_comment_end.encode()

    # --- public API ---

    def update(self, rows: Sequence["Row"], index: int) -> int:
        """Re-highlights ``rows[index]`` and every following row whose input
        state changed as a consequence.

        Returns:
            int: The number of rows that were scanned.
        """
        scanned = 0
        while 0 <= index < len(rows):
            row = rows[index]
            prev_open = rows[index - 1].comment_open if index > 0 else False
            new_open = self.scan(row, prev_open)
            scanned += 1
            changed = row.comment_open != new_open
            row.comment_open = new_open
            if not changed:
                break
            index += 1
        if scanned > 1:
            logger.debug("Highlight cascade re-scanned %d rows", scanned)
        return scanned

    def scan(self, row: "Row", in_comment: bool) -> bool:
        """Fills ``row.highlight`` from ``row.render``.

        Args:
            row: The row to classify.
            in_comment: Whether the previous row ended inside a block comment.

        Returns:
            bool: Whether this row ends inside a block comment.
        """
        render = row.render
        size = len(render)
        hl = bytearray(size)
        row.highlight = hl

        profile = self.profile
        if profile is None:
            return False

        scs, mcs, mce = self._scs, self._mcs, self._mce
        strings = bool(profile.flags & SyntaxFlags.HIGHLIGHT_STRINGS)
        numbers = bool(profile.flags & SyntaxFlags.HIGHLIGHT_NUMBERS)

        prev_sep = True
        in_string = 0

        i = 0
        while i < size:
            c = render[i]
            prev_hl = hl[i - 1] if i > 0 else Highlight.NORMAL

            if scs and not in_string and not in_comment and render.startswith(scs, i):
                hl[i:] = bytes([Highlight.COMMENT]) * (size - i)
                break

            if mcs and mce and not in_string:
                if in_comment:
                    hl[i] = Highlight.BLOCK_COMMENT
                    if render.startswith(mce, i):
                        end = min(i + len(mce), size)
                        hl[i:end] = bytes([Highlight.BLOCK_COMMENT]) * (end - i)
                        i = end
                        in_comment = False
                        prev_sep = True
                        continue
                    i += 1
                    continue
                if render.startswith(mcs, i):
                    end = min(i + len(mcs), size)
                    hl[i:end] = bytes([Highlight.BLOCK_COMMENT]) * (end - i)
                    i = end
                    in_comment = True
                    continue

            if strings:
                if in_string:
                    hl[i] = Highlight.STRING
                    if c == BACKSLASH and i + 1 < size:
                        hl[i + 1] = Highlight.STRING
                        i += 2
                        continue
                    if c == in_string:
                        in_string = 0
                    i += 1
                    prev_sep = True
                    continue
                if c in QUOTES:
                    in_string = c
                    hl[i] = Highlight.STRING
                    i += 1
                    continue

            if numbers:
                if (_is_digit(c) and (prev_sep or prev_hl == Highlight.NUMBER)) or (
                    c == DOT and prev_hl == Highlight.NUMBER
                ):
                    hl[i] = Highlight.NUMBER
                    i += 1
                    prev_sep = False
                    continue

            if prev_sep:
                matched = self._match_keyword(render, i)
                if matched is not None:
                    token_len, tag = matched
                    hl[i:i + token_len] = bytes([tag]) * token_len
                    i += token_len
                    prev_sep = False
                    continue

            prev_sep = is_separator(c)
            i += 1

        return in_comment

    # --- helpers ---

    def _match_keyword(self, render: bytes, i: int) -> Optional[tuple[int, Highlight]]:
        size = len(render)
        for token, tag in self._keywords:
            end = i + len(token)
            if end > size or not render.startswith(token, i):
                continue
            follower = render[end] if end < size else 0
            if is_separator(follower):
                return len(token), tag
        return None
