"""Infrastructure: reading contract binaries from disk.

The whole file is buffered in memory; there is no size pre-check.
"""

from __future__ import annotations

from pathlib import Path

from cw_check.exceptions import FileReadError


def read_contract(path: str) -> bytes:
    """Return the raw bytes of the file at *path*.

    Raises
    ------
    FileReadError
        When the file is missing, unreadable, or a directory.
    """
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise FileReadError(f"Error reading {path}: {reason}") from exc
