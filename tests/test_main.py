# tests/test_main.py
"""Tests for the `tilde.main` entry point.

The terminal is replaced by the `fake_terminal` mock, so a whole session can
run from a scripted list of keys without a tty.
"""

from unittest.mock import MagicMock

import pytest

from tilde import main
from tilde.ui.KeyBinder import ctrl_key


@pytest.fixture
def mock_signal(monkeypatch) -> MagicMock:
    fake = MagicMock()
    monkeypatch.setattr(main.signal, "signal", fake)
    return fake


def test_run_session_opens_file_and_quits(tmp_path, fake_terminal, config, mock_signal):
    path = tmp_path / "hello.c"
    path.write_bytes(b"int main;\nreturn 0;\n")
    fake_terminal.read_key.side_effect = [ctrl_key("q")]

    editor = main.run_session(fake_terminal, config, str(path))

    assert editor.running is False
    assert editor.document.row_count == 2
    assert editor.document.syntax.filetype == "c"
    mock_signal.assert_called_once_with(main.signal.SIGWINCH, editor.handle_sigwinch)
    fake_terminal.clear_screen.assert_called()


def test_run_session_without_file(fake_terminal, config, mock_signal):
    fake_terminal.read_key.side_effect = [ctrl_key("q")]
    editor = main.run_session(fake_terminal, config, None)
    assert editor.filename is None
    assert editor.document.row_count == 0


class TestStart:
    """Fatal-error handling of `start`."""

    @pytest.fixture
    def patched(self, monkeypatch, fake_terminal, config, mock_signal) -> MagicMock:
        monkeypatch.setattr(main, "TerminalAppMode", lambda: fake_terminal)
        monkeypatch.setattr(main, "load_config", lambda: config)
        monkeypatch.setattr(main, "setup_logging", lambda cfg: None)
        return fake_terminal

    def test_missing_file_exits_with_status_one(self, patched, tmp_path, capsys):
        missing = tmp_path / "nope.c"
        with pytest.raises(SystemExit) as excinfo:
            main.start(["tilde", str(missing)])
        assert excinfo.value.code == 1
        assert "tilde:" in capsys.readouterr().err
        patched.clear_screen.assert_called()
        patched.__exit__.assert_called_once()

    def test_terminal_setup_failure_exits(self, patched, capsys):
        patched.__enter__.side_effect = OSError(25, "Inappropriate ioctl for device")
        with pytest.raises(SystemExit) as excinfo:
            main.start(["tilde"])
        assert excinfo.value.code == 1
        assert "Inappropriate ioctl" in capsys.readouterr().err

    def test_clean_quit_returns(self, patched, mock_signal):
        patched.read_key.side_effect = [ctrl_key("q")]
        main.start(["tilde"])
        mock_signal.assert_called_with(main.signal.SIGWINCH, main.signal.SIG_DFL)

    def test_config_failure_is_fatal(self, monkeypatch, capsys):
        def broken():
            raise RuntimeError("boom")

        monkeypatch.setattr(main, "load_config", broken)
        with pytest.raises(SystemExit) as excinfo:
            main.start(["tilde"])
        assert excinfo.value.code == 1
        assert "FATAL" in capsys.readouterr().err
