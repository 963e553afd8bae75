# src/tilde/core/__init__.py
"""Public facade for tilde.core: re-export the document model classes.

Only modules that do not depend on ``tilde.ui`` are re-exported here, so the
UI modules can import the model without a cycle. Import the session from
``tilde.core.Editor`` and search from ``tilde.core.Search`` directly.
"""

from .Document import Document, Row  # noqa: F401
from .Highlighter import Highlight, Highlighter  # noqa: F401
from .Syntax import SyntaxFlags, SyntaxProfile  # noqa: F401


__all__ = [
    "Document",
    "Row",
    "Highlight",
    "Highlighter",
    "SyntaxFlags",
    "SyntaxProfile",
]
