"""Domain models for cw-check.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and simple derivations.  They carry zero
I/O and zero dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Union


# ---------------------------------------------------------------------------
# Resource limits
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WasmLimits:
    """Structural ceilings a contract module must respect.

    Every field is optional; ``None`` means the engine applies its own
    default (see the ``DEFAULT_*`` constants below).  The field order is
    the wire order of the compact config encoding.
    """

    initial_memory_limit_pages: int | None = None
    """Maximum number of initial 64 KiB linear memory pages."""

    table_size_limit_elements: int | None = None
    """Maximum initial size of any table."""

    max_imports: int | None = None
    """Maximum number of imports a module may declare."""

    max_functions: int | None = None
    """Maximum number of functions in a module."""

    max_function_params: int | None = None
    """Maximum number of parameters of any single function."""

    max_total_function_params: int | None = None
    """Maximum sum of parameters across all functions."""

    max_function_results: int | None = None
    """Maximum number of results of any single function."""

    def effective(self, name: str) -> int:
        """Return the configured value of *name*, or its default."""
        value = getattr(self, name)
        return DEFAULT_LIMITS[name] if value is None else value


DEFAULT_LIMITS: dict[str, int] = {
    "initial_memory_limit_pages": 512,
    "table_size_limit_elements": 2500,
    "max_imports": 100,
    "max_functions": 20_000,
    "max_function_params": 100,
    "max_total_function_params": 10_000,
    "max_function_results": 1,
}

WASM_LIMIT_FIELDS: tuple[str, ...] = tuple(DEFAULT_LIMITS)


# ---------------------------------------------------------------------------
# Chain configuration (decoded from the on-disk blob)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CacheOptions:
    """Cache section of a chain config; carries the capability set."""

    base_dir: str
    available_capabilities: frozenset[str]
    memory_cache_size_bytes: int
    instance_memory_limit_bytes: int


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """A chain's full Wasm configuration as queried from the chain."""

    wasm_limits: WasmLimits
    cache: CacheOptions


# ---------------------------------------------------------------------------
# Policy source (mutually exclusive CLI inputs)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExplicitCapabilities:
    """Capabilities given on the command line as a CSV string."""

    csv: str


@dataclass(frozen=True, slots=True)
class ConfigFile:
    """Capabilities and limits taken from a serialized chain config."""

    path: str


@dataclass(frozen=True, slots=True)
class DefaultPolicy:
    """Neither flag given — built-in capabilities and default limits."""


PolicySource = Union[ExplicitCapabilities, ConfigFile, DefaultPolicy]


@dataclass(frozen=True, slots=True)
class ResolvedPolicy:
    """The single policy applied uniformly to every file in a run."""

    limits: WasmLimits
    capabilities: frozenset[str]


# ---------------------------------------------------------------------------
# Check results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """Result of checking one contract file.

    ``error`` is ``None`` on success, else the human-readable diagnostic.
    ``hint`` carries any actionable guidance attached to that diagnostic.
    """

    path: str
    error: str | None = None
    hint: str | None = None

    @property
    def passed(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Pass/failure counts derived from a sequence of outcomes."""

    passes: int
    failures: int
    outcomes: tuple[CheckOutcome, ...] = field(default=(), compare=False)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[CheckOutcome]) -> RunSummary:
        collected = tuple(outcomes)
        passes = sum(1 for outcome in collected if outcome.passed)
        return cls(
            passes=passes,
            failures=len(collected) - passes,
            outcomes=collected,
        )

    @property
    def total(self) -> int:
        return self.passes + self.failures

    @property
    def all_passed(self) -> bool:
        return self.failures == 0
