# tilde/main.py
"""
tilde Main Entry Point
======================

Entry point of the ``tilde`` console script. It performs:
1) Configuration & Logging: loads config and initializes logging first.
2) Terminal Setup: switches the terminal to raw mode for the session.
3) Application Run: creates the Editor, opens the optional file argument,
   installs the SIGWINCH handler and runs the main loop.
4) Fatal Errors: terminal and load failures clear the screen, restore the
   terminal, get logged and end the process with exit status 1.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

from tilde.core.Editor import Editor
from tilde.ui.TerminalAppMode import TerminalAppMode
from tilde.utils.logging_config import setup_logging
from tilde.utils.utils import load_config

logger = logging.getLogger("tilde")


def run_session(terminal: Any, config: dict[str, Any], file_to_open: Optional[str]) -> Editor:
    """Builds an editor on *terminal*, loads *file_to_open* and runs it to completion."""
    editor = Editor(terminal, config)
    if file_to_open:
        editor.open_file(file_to_open)

    if hasattr(signal, "SIGWINCH"):
        signal.signal(signal.SIGWINCH, editor.handle_sigwinch)

    editor.run()
    return editor


def start(argv: Optional[list[str]] = None) -> None:
    """Runs the editor; exits with status 1 on any fatal terminal or I/O error."""
    argv = sys.argv if argv is None else argv
    try:
        config = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("tilde editor starting up...")
    file_to_open = argv[1] if len(argv) > 1 else None

    terminal = TerminalAppMode()
    try:
        with terminal:
            run_session(terminal, config, file_to_open)
    except OSError as e:
        try:
            terminal.clear_screen()
        except OSError:
            logger.debug("Could not clear screen after fatal error", exc_info=True)
        logger.critical("Fatal error: %s", e, exc_info=True)
        print(f"tilde: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        if hasattr(signal, "SIGWINCH"):
            signal.signal(signal.SIGWINCH, signal.SIG_DFL)

    logger.info("tilde editor shut down gracefully.")


if __name__ == "__main__":
    start()
