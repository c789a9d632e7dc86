"""Policy resolution — turns the CLI policy source into one concrete policy.

The resolved :class:`~cw_check.core.models.ResolvedPolicy` is computed
once per run, before any contract is checked, and is then applied
uniformly to every file.

Guarantees
----------
* No filesystem access of its own — config loading is injected.
* Deterministic: the same source always resolves to the same policy.
"""

from __future__ import annotations

from cw_check.core.models import (
    ConfigFile,
    DefaultPolicy,
    ExplicitCapabilities,
    PolicySource,
    ResolvedPolicy,
    WasmLimits,
)
from cw_check.core.protocols import ConfigLoader

DEFAULT_AVAILABLE_CAPABILITIES: str = (
    "iterator,staking,stargate,"
    "cosmwasm_1_1,cosmwasm_1_2,cosmwasm_1_3,cosmwasm_1_4,"
    "cosmwasm_2_0,cosmwasm_2_1"
)
"""Baseline feature set plus versioned extension capabilities."""


def capabilities_from_csv(csv: str) -> frozenset[str]:
    """Parse a comma-separated capability list into a set of names.

    Surrounding whitespace is stripped and empty tokens are ignored, so
    ``"iterator, staking,,iterator"`` yields ``{"iterator", "staking"}``.
    """
    return frozenset(
        token.strip() for token in csv.split(",") if token.strip()
    )


def resolve_policy(source: PolicySource, *, load_config: ConfigLoader) -> ResolvedPolicy:
    """Resolve *source* into limits and available capabilities.

    Parameters
    ----------
    source:
        Where the policy comes from — explicit capabilities, a chain
        config file, or the built-in defaults.
    load_config:
        Loader used only for :class:`ConfigFile` sources.

    Raises
    ------
    FileReadError, ConfigDecodeError
        Propagated from *load_config*; a run cannot proceed without a
        policy.
    """
    if isinstance(source, ConfigFile):
        config = load_config(source.path)
        return ResolvedPolicy(
            limits=config.wasm_limits,
            capabilities=frozenset(config.cache.available_capabilities),
        )
    if isinstance(source, ExplicitCapabilities):
        return ResolvedPolicy(
            limits=WasmLimits(),
            capabilities=capabilities_from_csv(source.csv),
        )
    if isinstance(source, DefaultPolicy):
        return ResolvedPolicy(
            limits=WasmLimits(),
            capabilities=capabilities_from_csv(DEFAULT_AVAILABLE_CAPABILITIES),
        )
    raise TypeError(f"Unsupported policy source: {source!r}")
