"""Core / service layer — policy resolution and check orchestration.

Rules
-----
* No ``print()`` calls.
* No direct filesystem access — readers and loaders are injected.
* No imports from ``cli`` or ``infra``.
* No wasmtime or msgpack imports.
"""

from cw_check.core.batch_service import BatchRunner
from cw_check.core.check_service import CheckService
from cw_check.core.logger import LogOutput, Logger
from cw_check.core.models import (
    CacheOptions,
    ChainConfig,
    CheckOutcome,
    ConfigFile,
    DefaultPolicy,
    ExplicitCapabilities,
    PolicySource,
    ResolvedPolicy,
    RunSummary,
    WasmLimits,
)
from cw_check.core.policy import (
    DEFAULT_AVAILABLE_CAPABILITIES,
    capabilities_from_csv,
    resolve_policy,
)
from cw_check.core.protocols import ConfigLoader, ContractEngine, ContractReader

__all__: list[str] = [
    "DEFAULT_AVAILABLE_CAPABILITIES",
    "BatchRunner",
    "CacheOptions",
    "ChainConfig",
    "CheckOutcome",
    "CheckService",
    "ConfigFile",
    "ConfigLoader",
    "ContractEngine",
    "ContractReader",
    "DefaultPolicy",
    "ExplicitCapabilities",
    "LogOutput",
    "Logger",
    "PolicySource",
    "ResolvedPolicy",
    "RunSummary",
    "WasmLimits",
    "capabilities_from_csv",
    "resolve_policy",
]
