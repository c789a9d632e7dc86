"""Diagnostic logging sink handed to the validation engine.

The engine never decides where (or whether) its diagnostic lines go —
the caller passes either an enabled :class:`Logger` bound to a stream
and a line prefix, or a disabled one that discards everything.  Either
way validation semantics are unchanged.
"""

from __future__ import annotations

import enum
import sys
from typing import TextIO


class LogOutput(enum.Enum):
    """Destination selector for an enabled logger."""

    STDOUT = "stdout"
    STDERR = "stderr"

    def stream(self) -> TextIO:
        # Resolved on every write so redirected streams are honoured.
        return sys.stdout if self is LogOutput.STDOUT else sys.stderr


class Logger:
    """Line-oriented diagnostic sink.

    Use :meth:`on` or :meth:`off` rather than the constructor::

        logs = Logger.on("    hackatom.wasm: ", LogOutput.STDERR)
        logs.add("Imports (3): env.abort, env.db_read, env.debug")
    """

    __slots__ = ("_enabled", "_prefix", "_output")

    def __init__(
        self,
        enabled: bool,
        prefix: str = "",
        output: LogOutput = LogOutput.STDERR,
    ) -> None:
        self._enabled = enabled
        self._prefix = prefix
        self._output = output

    @classmethod
    def on(cls, prefix: str = "", output: LogOutput = LogOutput.STDERR) -> Logger:
        return cls(True, prefix, output)

    @classmethod
    def off(cls) -> Logger:
        return cls(False)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def prefix(self) -> str:
        return self._prefix

    def add(self, message: str) -> None:
        """Write *message* as one prefixed line, or drop it when disabled."""
        if not self._enabled:
            return
        stream = self._output.stream()
        stream.write(f"{self._prefix}{message}\n")
        stream.flush()
