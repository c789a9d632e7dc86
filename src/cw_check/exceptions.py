"""Custom exception hierarchy for cw-check.

All exceptions that cross layer boundaries must inherit from
:class:`CwCheckError`.  Raw third-party exceptions (wasmtime, msgpack,
``OSError``) must NEVER propagate beyond the infrastructure layer — they
must be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
CwCheckError
├── FileReadError
├── ConfigDecodeError
├── ValidationError
├── CompileError
├── UsageError
└── EnvironmentError
"""

from __future__ import annotations


class CwCheckError(Exception):
    """Base exception for all cw-check errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary (and the per-file reporter)
    can render a clean message without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- File access -----------------------------------------------------------

class FileReadError(CwCheckError):
    """Raised when a contract or config file cannot be opened or read."""


# --- Configuration ---------------------------------------------------------

class ConfigDecodeError(CwCheckError):
    """Raised when a chain config blob is not a valid encoding of the schema."""


# --- Contract checks -------------------------------------------------------

class ValidationError(CwCheckError):
    """Raised when static Wasm validation rejects a contract."""

    def __init__(self, reason: str, *, hint: str | None = None) -> None:
        super().__init__(f"Error during static Wasm validation: {reason}", hint=hint)
        self.reason: str = reason


class CompileError(CwCheckError):
    """Raised when a statically valid contract fails to compile."""

    def __init__(self, reason: str, *, hint: str | None = None) -> None:
        super().__init__(f"Error compiling Wasm: {reason}", hint=hint)
        self.reason: str = reason


# --- Invocation / environment ----------------------------------------------

class UsageError(CwCheckError):
    """Raised when the command line is malformed or self-contradictory."""


class EnvironmentError(CwCheckError):
    """Raised when a required runtime dependency is not available."""
