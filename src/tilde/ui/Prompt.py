# tilde/ui/Prompt.py
"""Single-line prompt shown in the message bar.

The prompt owns a byte buffer and edits it key by key. Callers that need to
react while the user types (incremental search) pass an observer; it is told
about every keystroke, including the ones that accept or cancel the prompt.
"""

import logging
from typing import TYPE_CHECKING, Optional, Protocol

from tilde.ui.KeyBinder import Key, ctrl_key

if TYPE_CHECKING:
    from tilde.core.Editor import Editor


class PromptObserver(Protocol):
    def on_prompt_key(self, query: bytes, key: int) -> None: ...


class LinePrompt:
    """Reads one line of input through the editor's key source.

    Attributes:
        template (str): ``%``-format string with one ``%s`` for the buffer.
        buffer (bytearray): The text typed so far.
        done (bool): Set once the prompt was accepted or cancelled.
        result (Optional[bytes]): The accepted text, or None when cancelled.
    """

    def __init__(
        self,
        editor: "Editor",
        template: str,
        observer: Optional[PromptObserver] = None,
    ) -> None:
        self.editor = editor
        self.template = template
        self.observer = observer
        self.buffer = bytearray()
        self.done = False
        self.result: Optional[bytes] = None

    def show(self) -> None:
        text = self.buffer.decode("latin-1")
        self.editor.set_status_message(self.template, text)

    def handle_key(self, key: int) -> bool:
        """Applies one key to the buffer and notifies the observer.

        Returns:
            bool: True when the prompt is finished.
        """
        if key in (Key.DELETE, Key.BACKSPACE, ctrl_key("h")):
            if self.buffer:
                del self.buffer[-1]
        elif key == Key.ESCAPE:
            self.editor.set_status_message("")
            self.done = True
            self.result = None
        elif key == Key.ENTER:
            if self.buffer:
                self.editor.set_status_message("")
                self.done = True
                self.result = bytes(self.buffer)
            else:
                # Nothing to accept yet; keep prompting.
                return False
        elif 32 <= key < 127:
            self.buffer.append(key)

        if self.observer is not None:
            self.observer.on_prompt_key(bytes(self.buffer), key)
        return self.done

    def run(self) -> Optional[bytes]:
        """Loops until Enter (with a non-empty buffer) or Escape."""
        logging.debug("Prompt opened: %r", self.template)
        while not self.done:
            self.show()
            self.editor.refresh_screen()
            self.handle_key(self.editor.read_key())
        logging.debug("Prompt closed, accepted=%s", self.result is not None)
        return self.result
