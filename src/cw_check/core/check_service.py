"""Core check service — drives the validate-then-compile pipeline for one file.

This service delegates file access and all Wasm analysis to collaborators
injected at construction time.  It is responsible for:

* Reading the contract bytes through the injected reader.
* Building the per-file diagnostic :class:`~cw_check.core.logger.Logger`.
* Running static validation first, then compiling with a fresh engine.
* Ensuring only :class:`~cw_check.exceptions.CwCheckError` subclasses
  escape :meth:`CheckService.check`.

Per file the pipeline moves ``Unchecked → Validating → Compiling →
Passed | Failed``.  Any failure is terminal for that file only.
"""

from __future__ import annotations

from collections.abc import Set
from pathlib import PurePath

from cw_check.core.logger import LogOutput, Logger
from cw_check.core.models import CheckOutcome, ResolvedPolicy, WasmLimits
from cw_check.core.protocols import ContractEngine, ContractReader
from cw_check.exceptions import CompileError, CwCheckError, ValidationError


class CheckService:
    """Stateless per-file checker.

    Parameters
    ----------
    engine:
        Any object satisfying the :class:`ContractEngine` protocol.
    reader:
        Callable returning the raw bytes of a contract file.
    """

    def __init__(self, engine: ContractEngine, reader: ContractReader) -> None:
        self._engine: ContractEngine = engine
        self._reader: ContractReader = reader

    # ------------------------------------------------------------------
    # Diagnostics helpers (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def display_identifier(path: str) -> str:
        """Short name used to prefix diagnostics: the file name, else *path*."""
        name = PurePath(path).name
        if not name or name == "..":
            return path
        return name

    @classmethod
    def build_logger(cls, path: str, verbose: bool) -> Logger:
        if not verbose:
            return Logger.off()
        return Logger.on(f"    {cls.display_identifier(path)}: ", LogOutput.STDERR)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(
        self,
        path: str,
        capabilities: Set[str],
        verbose: bool,
        limits: WasmLimits,
    ) -> None:
        """Validate and compile the contract at *path*.

        Raises
        ------
        FileReadError
            When the file cannot be read.
        ValidationError
            When static validation rejects the module.
        CompileError
            When the module validates but does not compile.
        """
        wasm = self._reader(path)
        logger = self.build_logger(path, verbose)

        try:
            self._engine.validate(wasm, capabilities, limits, logger)
        except CwCheckError:
            raise
        except Exception as exc:
            raise ValidationError(f"Unexpected validation error: {exc}") from exc

        try:
            compiler = self._engine.new_compiler_engine()
            self._engine.compile(compiler, wasm)
        except CwCheckError:
            raise
        except Exception as exc:
            raise CompileError(f"Unexpected compilation error: {exc}") from exc

    def outcome(self, path: str, policy: ResolvedPolicy, verbose: bool) -> CheckOutcome:
        """Run :meth:`check` and capture the result instead of raising."""
        try:
            self.check(path, policy.capabilities, verbose, policy.limits)
        except CwCheckError as exc:
            return CheckOutcome(path=path, error=str(exc), hint=exc.hint)
        return CheckOutcome(path=path)
