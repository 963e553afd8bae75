# tests/conftest.py
"""Pytest configuration with shared fixtures for the tilde editor tests.

The editor never touches a real terminal here: every test gets a
`MagicMock` standing in for `TerminalAppMode`, reporting a 24x80 window and
recording every frame written to it.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, Optional
from unittest.mock import MagicMock

import pytest

from tilde.core.Document import Document
from tilde.core.Editor import Editor
from tilde.core.Syntax import SyntaxProfile, profiles_from_config
from tilde.utils.utils import DEFAULT_CONFIG


# --- Terminal and configuration ---
@pytest.fixture
def fake_terminal() -> MagicMock:
    """Create a mock terminal with a 24x80 window.

    Tests that need key input set `fake_terminal.read_key.side_effect`.

    Returns:
        MagicMock: The mocked terminal.
    """
    terminal = MagicMock()
    terminal.get_window_size.return_value = (24, 80)
    return terminal


@pytest.fixture
def config() -> dict[str, Any]:
    """Provide a private copy of the built-in configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def c_profile(config: dict[str, Any]) -> SyntaxProfile:
    """The built-in C syntax profile."""
    return profiles_from_config(config)[0]


# --- Documents ---
@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Factory building a loaded `Document`.

    Returns:
        Callable: ``make_document(lines, profile=None, tab_stop=2)``.
    """

    def _make(
        lines: Iterable[bytes],
        profile: Optional[SyntaxProfile] = None,
        tab_stop: int = 2,
    ) -> Document:
        doc = Document(tab_stop=tab_stop, syntax=profile)
        doc.load(lines)
        return doc

    return _make


# --- Editor ---
@pytest.fixture
def editor(fake_terminal: MagicMock, config: dict[str, Any]) -> Editor:
    """Create a real `Editor` on the mocked terminal with an empty document."""
    return Editor(fake_terminal, config)


@pytest.fixture
def load_editor(editor: Editor) -> Callable[..., Editor]:
    """Factory loading *lines* into the `editor` fixture.

    Returns:
        Callable: ``load_editor(lines, profile=None)`` returning the editor.
    """

    def _load(lines: Iterable[bytes], profile: Optional[SyntaxProfile] = None) -> Editor:
        editor.document.set_syntax(profile)
        editor.document.load(lines)
        return editor

    return _load
