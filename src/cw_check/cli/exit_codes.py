"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Every contract passed its checks."""

CHECKS_FAILED: int = 1
"""At least one contract failed validation or compilation."""

GENERAL_ERROR: int = 1
"""A known CwCheckError aborted the run. User-facing message was displayed."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""

USAGE_ERROR: int = 2
"""The command line was rejected (e.g. conflicting flags, ``--jobs 0``)."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
