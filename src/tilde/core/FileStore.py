# tilde/core/FileStore.py
"""Reading and writing documents on disk.

Content is handled as bytes end to end; no decoding takes place. Both
functions let ``OSError`` propagate: the editor treats a failed load as fatal
and a failed save as a status-bar message.
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger("tilde")

PathLike = Union[str, Path]


def load_lines(path: PathLike) -> list[bytes]:
    """Returns the lines of *path* with all trailing ``\\r``/``\\n`` bytes removed."""
    with open(path, "rb") as f:
        lines = [line.rstrip(b"\r\n") for line in f]
    logger.info("Read %d lines from %s", len(lines), path)
    return lines


def save_bytes(path: PathLike, data: bytes) -> int:
    """Writes *data* to *path* (created with mode 0644 if missing).

    The file is truncated to the new length first, then written in full.

    Returns:
        int: The number of bytes written.
    """
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        os.ftruncate(fd, len(data))
        view = memoryview(data)
        written = 0
        while written < len(data):
            written += os.write(fd, view[written:])
    finally:
        os.close(fd)
    logger.info("Wrote %d bytes to %s", written, path)
    return written
