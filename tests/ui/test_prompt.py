# tests/ui/test_prompt.py
"""Unit tests for `LinePrompt`, the message-bar line editor."""

from unittest.mock import MagicMock, call

import pytest

from tilde.ui.KeyBinder import Key, ctrl_key
from tilde.ui.Prompt import LinePrompt


@pytest.fixture
def mock_editor() -> MagicMock:
    return MagicMock()


def test_printable_keys_append_and_notify(mock_editor):
    observer = MagicMock()
    prompt = LinePrompt(mock_editor, "Q: %s", observer)
    assert prompt.handle_key(ord("a")) is False
    assert prompt.handle_key(ord("b")) is False
    assert prompt.buffer == bytearray(b"ab")
    observer.on_prompt_key.assert_has_calls([call(b"a", ord("a")), call(b"ab", ord("b"))])


@pytest.mark.parametrize("key", [Key.BACKSPACE, Key.DELETE, ctrl_key("h")])
def test_delete_keys_remove_last_byte(mock_editor, key):
    prompt = LinePrompt(mock_editor, "Q: %s")
    prompt.handle_key(ord("a"))
    prompt.handle_key(ord("b"))
    prompt.handle_key(key)
    assert prompt.buffer == bytearray(b"a")


def test_delete_on_empty_buffer_is_harmless(mock_editor):
    prompt = LinePrompt(mock_editor, "Q: %s")
    prompt.handle_key(Key.BACKSPACE)
    assert prompt.buffer == bytearray()


def test_control_and_non_ascii_keys_are_not_appended(mock_editor):
    prompt = LinePrompt(mock_editor, "Q: %s")
    prompt.handle_key(1)
    prompt.handle_key(200)
    prompt.handle_key(Key.ARROW_UP)
    assert prompt.buffer == bytearray()


def test_enter_on_empty_buffer_keeps_prompting(mock_editor):
    observer = MagicMock()
    prompt = LinePrompt(mock_editor, "Q: %s", observer)
    assert prompt.handle_key(Key.ENTER) is False
    assert prompt.done is False
    observer.on_prompt_key.assert_not_called()


def test_enter_accepts_buffer(mock_editor):
    observer = MagicMock()
    prompt = LinePrompt(mock_editor, "Q: %s", observer)
    prompt.handle_key(ord("x"))
    assert prompt.handle_key(Key.ENTER) is True
    assert prompt.result == b"x"
    mock_editor.set_status_message.assert_called_with("")
    observer.on_prompt_key.assert_called_with(b"x", Key.ENTER)


def test_escape_cancels(mock_editor):
    observer = MagicMock()
    prompt = LinePrompt(mock_editor, "Q: %s", observer)
    prompt.handle_key(ord("x"))
    assert prompt.handle_key(Key.ESCAPE) is True
    assert prompt.result is None
    observer.on_prompt_key.assert_called_with(b"x", Key.ESCAPE)


def test_run_refreshes_every_keystroke(mock_editor):
    mock_editor.read_key.side_effect = [ord("h"), ord("i"), Key.ENTER]
    prompt = LinePrompt(mock_editor, "Name: %s")
    assert prompt.run() == b"hi"
    assert mock_editor.refresh_screen.call_count == 3
    mock_editor.set_status_message.assert_any_call("Name: %s", "h")
    mock_editor.set_status_message.assert_any_call("Name: %s", "hi")
