"""
Module: publishing.file_locking

Purpose:
    Cross-platform locked file writes for job staging. Several submissions
    can be staged from one host at once; an exclusive lock keeps a reader
    (the job runner) from seeing a half-written exam.md.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_write_text: Replace a text file's contents under a lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - publishing.staging: Writing input/exam.md
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, TextIO

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator[TextIO, None, None]:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'w', 'a', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path, 'a') as f:
        ...     f.write('data')
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Ensure file exists for read modes
    if 'r' in mode and not path.exists():
        path.touch()

    with open(path, mode, encoding='utf-8', newline='') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_write_text(path: Path, content: str) -> None:
    """
    Write ``content`` to ``path`` under an exclusive lock.

    The file is opened without truncation, locked, then truncated and
    written, so a concurrent reader never observes an empty file before
    the lock is taken. Line endings are written exactly as given.
    """
    with locked_file(path, 'r+', portalocker.LOCK_EX) as f:
        f.seek(0)
        f.truncate()
        f.write(content)

    logger.debug(f"Wrote {len(content)} chars to {path.name}")
