"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Set
from typing import Any, Protocol

from cw_check.core.logger import Logger
from cw_check.core.models import ChainConfig, WasmLimits


class ContractEngine(Protocol):
    """Contract for the external validation/compilation engine.

    Any object that implements these methods with the correct signatures
    satisfies this protocol structurally (no explicit inheritance
    required).  Implementations must map all backend-specific exceptions
    to :class:`~cw_check.exceptions.CwCheckError` subclasses.
    """

    def validate(
        self,
        wasm: bytes,
        capabilities: Set[str],
        limits: WasmLimits,
        logger: Logger,
    ) -> None:
        """Statically validate *wasm* against the capabilities and limits.

        Checks memories, imports, exports, required capabilities, limits,
        and non-deterministic constructs.  Diagnostic lines go to *logger*.

        Raises
        ------
        ValidationError
            On any violation.  The message is owned by the engine.
        """
        ...  # pragma: no cover

    def new_compiler_engine(self) -> Any:
        """Return a fresh compilation engine; never shared between files."""
        ...  # pragma: no cover

    def compile(self, engine: Any, wasm: bytes) -> Any:
        """Compile *wasm* with *engine* and return the compiled module.

        Raises
        ------
        CompileError
            When the compiler rejects the module.
        """
        ...  # pragma: no cover


class ContractReader(Protocol):
    """Callable that returns the full contents of a file as bytes.

    Raises
    ------
    FileReadError
        When the file cannot be opened or read.
    """

    def __call__(self, path: str) -> bytes:
        ...  # pragma: no cover


class ConfigLoader(Protocol):
    """Callable that loads and decodes a serialized chain config.

    Raises
    ------
    FileReadError
        When the file cannot be opened.
    ConfigDecodeError
        When the bytes are not a valid encoding of the schema.
    """

    def __call__(self, path: str) -> ChainConfig:
        ...  # pragma: no cover
