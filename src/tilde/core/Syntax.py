# tilde/core/Syntax.py
"""Syntax profiles and their selection by filename.

A profile is a small declarative table: which files it applies to, which
keywords to colour, how comments start and end, and whether numbers and
strings are highlighted. Profiles come from the ``[[syntax]]`` list of the
configuration (the built-in default ships a C profile).
"""

import enum
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterable, Optional

logger = logging.getLogger("tilde")


class SyntaxFlags(enum.IntFlag):
    NONE = 0
    HIGHLIGHT_NUMBERS = 1 << 0
    HIGHLIGHT_STRINGS = 1 << 1


@dataclass(frozen=True)
class SyntaxProfile:
    """Immutable description of how to classify one file type.

    Keywords ending in ``|`` belong to the secondary class.
    """

    filetype: str
    filematch: tuple[str, ...]
    keywords: tuple[str, ...] = ()
    singleline_comment_start: str = ""
    multiline_comment_start: str = ""
    multiline_comment_end: str = ""
    flags: SyntaxFlags = SyntaxFlags.NONE

    def matches(self, filename: str) -> bool:
        """Extension patterns (leading ``.``) compare against everything from
        the last ``.`` of the base name, so ``.c`` itself counts as C; any
        other pattern matches as a substring of the name."""
        base = os.path.basename(filename)
        dot = base.rfind(".")
        ext = base[dot:] if dot != -1 else ""
        for pattern in self.filematch:
            if pattern.startswith("."):
                if ext and ext == pattern:
                    return True
            elif pattern in filename:
                return True
        return False


def profile_from_dict(entry: dict[str, Any]) -> SyntaxProfile:
    """Builds a profile from one ``[[syntax]]`` table of the configuration."""
    flags = SyntaxFlags.NONE
    if entry.get("highlight_numbers", False):
        flags |= SyntaxFlags.HIGHLIGHT_NUMBERS
    if entry.get("highlight_strings", False):
        flags |= SyntaxFlags.HIGHLIGHT_STRINGS
    return SyntaxProfile(
        filetype=str(entry.get("filetype", "")),
        filematch=tuple(str(p) for p in entry.get("filematch", ())),
        keywords=tuple(str(k) for k in entry.get("keywords", ())),
        singleline_comment_start=str(entry.get("singleline_comment", "")),
        multiline_comment_start=str(entry.get("multiline_comment_start", "")),
        multiline_comment_end=str(entry.get("multiline_comment_end", "")),
        flags=flags,
    )


def profiles_from_config(config: dict[str, Any]) -> tuple[SyntaxProfile, ...]:
    """Returns the ordered profile table; malformed entries are skipped."""
    profiles = []
    for entry in config.get("syntax", []):
        if not isinstance(entry, dict) or not entry.get("filematch"):
            logger.warning("Ignoring malformed [[syntax]] entry: %r", entry)
            continue
        profiles.append(profile_from_dict(entry))
    return tuple(profiles)


def select_syntax(
    filename: Optional[str], profiles: Iterable[SyntaxProfile]
) -> Optional[SyntaxProfile]:
    """First profile matching *filename* wins; no filename or no match gives None."""
    if not filename:
        return None
    for profile in profiles:
        if profile.matches(filename):
            logger.debug("Selected syntax '%s' for %s", profile.filetype, filename)
            return profile
    return None
