"""wasmtime-backed implementation of :class:`~cw_check.core.protocols.ContractEngine`.

This module is the **only** place in the codebase that invokes wasmtime.
All wasmtime exceptions are caught here and re-raised as
:class:`~cw_check.exceptions.ValidationError` or
:class:`~cw_check.exceptions.CompileError`.

Static validation runs on an engine with every non-deterministic or
unsupported Wasm proposal switched off, then inspects the module's
imports and exports.  Only imported and exported items are visible
through wasmtime's reflection, so function and table limits are
enforced on those.
"""

from __future__ import annotations

from collections.abc import Iterable, Set
from typing import Any

from cw_check.core.logger import Logger
from cw_check.core.models import WasmLimits
from cw_check.exceptions import CompileError, EnvironmentError, ValidationError

WASM_MAGIC: bytes = b"\x00asm"

REQUIRED_EXPORTS: tuple[str, ...] = ("allocate", "deallocate")

INTERFACE_VERSION_PREFIX: str = "interface_version_"
SUPPORTED_INTERFACE_VERSIONS: tuple[str, ...] = ("interface_version_8",)

CAPABILITY_EXPORT_PREFIX: str = "requires_"

SUPPORTED_IMPORTS: frozenset[str] = frozenset(
    {
        "env.abort",
        "env.db_read",
        "env.db_write",
        "env.db_remove",
        "env.addr_validate",
        "env.addr_canonicalize",
        "env.addr_humanize",
        "env.bls12_381_aggregate_g1",
        "env.bls12_381_aggregate_g2",
        "env.bls12_381_pairing_equality",
        "env.bls12_381_hash_to_g1",
        "env.bls12_381_hash_to_g2",
        "env.secp256k1_verify",
        "env.secp256k1_recover_pubkey",
        "env.secp256r1_verify",
        "env.secp256r1_recover_pubkey",
        "env.ed25519_verify",
        "env.ed25519_batch_verify",
        "env.debug",
        "env.query_chain",
        "env.db_scan",
        "env.db_next",
        "env.db_next_key",
        "env.db_next_value",
    }
)


def _format_set(names: Iterable[str]) -> str:
    return "{" + ", ".join(f'"{name}"' for name in sorted(names)) + "}"


def _import_wasmtime() -> Any:
    """Import wasmtime lazily so ``--help``/``--version`` work without it."""
    try:
        import wasmtime
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "wasmtime is not installed. Install with: pip install wasmtime",
        ) from exc
    return wasmtime


class WasmtimeEngine:
    """Concrete :class:`ContractEngine` backed by the wasmtime Python API.

    Raises
    ------
    EnvironmentError
        At construction when wasmtime cannot be imported.
    """

    def __init__(self) -> None:
        self._wt: Any = _import_wasmtime()

    # ------------------------------------------------------------------
    # Engine construction
    # ------------------------------------------------------------------

    def _validation_engine(self) -> Any:
        config = self._wt.Config()
        config.wasm_threads = False
        config.wasm_relaxed_simd = False
        config.wasm_simd = False
        config.wasm_multi_memory = False
        config.wasm_memory64 = False
        return self._wt.Engine(config)

    def new_compiler_engine(self) -> Any:
        config = self._wt.Config()
        config.cranelift_nan_canonicalization = True
        config.consume_fuel = True
        return self._wt.Engine(config)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def validate(
        self,
        wasm: bytes,
        capabilities: Set[str],
        limits: WasmLimits,
        logger: Logger,
    ) -> None:
        """Statically validate *wasm*.

        Raises
        ------
        ValidationError
            On malformed bytecode, disallowed proposals, or any policy
            violation.
        """
        if not wasm.startswith(WASM_MAGIC):
            raise ValidationError(
                "Wasm bytecode could not be deserialized: missing Wasm magic header",
            )

        engine = self._validation_engine()
        try:
            self._wt.Module.validate(engine, wasm)
            module = self._wt.Module(engine, wasm)
        except self._wt.WasmtimeError as exc:
            raise ValidationError(
                f"Wasm bytecode could not be deserialized. Deserialization error: {exc}",
            ) from exc

        imports = list(module.imports)
        exports = list(module.exports)
        logger.add(
            f"Imports ({len(imports)}): "
            + ", ".join(f"{imp.module}.{imp.name}" for imp in imports),
        )
        logger.add(f"Exports ({len(exports)}): " + ", ".join(exp.name for exp in exports))

        self._check_memories(imports, exports, limits)
        self._check_interface_version(exports)
        self._check_required_exports(exports)
        self._check_imports(imports, limits)
        self._check_functions(imports, exports, limits)
        self._check_tables(imports, exports, limits)
        self._check_capabilities(exports, capabilities, logger)

    def compile(self, engine: Any, wasm: bytes) -> Any:
        try:
            return self._wt.Module(engine, wasm)
        except self._wt.WasmtimeError as exc:
            raise CompileError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _check_memories(
        self, imports: list[Any], exports: list[Any], limits: WasmLimits,
    ) -> None:
        if any(isinstance(imp.type, self._wt.MemoryType) for imp in imports):
            raise ValidationError("Wasm contract must not import memory")

        memories = [exp for exp in exports if isinstance(exp.type, self._wt.MemoryType)]
        if len(memories) != 1:
            raise ValidationError(
                f"Wasm contract must export exactly one memory, found {len(memories)}",
            )

        memory_limits = memories[0].type.limits
        if memory_limits.max is not None:
            raise ValidationError(
                "Wasm contract memory's maximum must be unset. "
                "The host will set it for you.",
            )
        page_limit = limits.effective("initial_memory_limit_pages")
        if memory_limits.min > page_limit:
            raise ValidationError(
                f"Wasm contract memory's minimum must not exceed {page_limit} pages.",
            )

    @staticmethod
    def _check_interface_version(exports: list[Any]) -> None:
        markers = [exp.name for exp in exports if exp.name.startswith(INTERFACE_VERSION_PREFIX)]
        if not markers:
            raise ValidationError(
                f"Wasm contract missing a required marker export: {INTERFACE_VERSION_PREFIX}*",
            )
        if len(markers) > 1:
            raise ValidationError(
                f"Wasm contract contains more than one marker export: {INTERFACE_VERSION_PREFIX}*",
            )
        if markers[0] not in SUPPORTED_INTERFACE_VERSIONS:
            raise ValidationError(
                f"Wasm contract has unknown {markers[0]} marker export",
                hint="Contracts built for CosmWasm 0.x/1.x must be rebuilt "
                "against a supported cosmwasm-std.",
            )

    @staticmethod
    def _check_required_exports(exports: list[Any]) -> None:
        names = {exp.name for exp in exports}
        for required in REQUIRED_EXPORTS:
            if required not in names:
                raise ValidationError(
                    f'Wasm contract doesn\'t have required export: "{required}". '
                    f"Exports required by VM: {list(REQUIRED_EXPORTS)}.",
                )

    def _check_imports(self, imports: list[Any], limits: WasmLimits) -> None:
        max_imports = limits.effective("max_imports")
        if len(imports) > max_imports:
            raise ValidationError(
                f"Import count exceeds limit. Imports: {len(imports)}. Limit: {max_imports}.",
            )

        required = [f"{imp.module}.{imp.name}" for imp in imports]
        for imp, full_name in zip(imports, required):
            if full_name not in SUPPORTED_IMPORTS:
                raise ValidationError(
                    f'Wasm contract requires unsupported import: "{full_name}". '
                    f"Required imports: {_format_set(required)}. "
                    f"Available imports: {_format_set(SUPPORTED_IMPORTS)}.",
                )
            if not isinstance(imp.type, self._wt.FuncType):
                raise ValidationError(
                    f'Wasm contract requires non-function import: "{full_name}"',
                )

    def _check_functions(
        self, imports: list[Any], exports: list[Any], limits: WasmLimits,
    ) -> None:
        signatures = [
            item.type
            for item in [*imports, *exports]
            if isinstance(item.type, self._wt.FuncType)
        ]

        max_functions = limits.effective("max_functions")
        if len(signatures) > max_functions:
            raise ValidationError(
                f"Wasm contract contains more than {max_functions} functions",
            )

        max_params = limits.effective("max_function_params")
        max_results = limits.effective("max_function_results")
        total_params = 0
        for signature in signatures:
            params = len(signature.params)
            total_params += params
            if params > max_params:
                raise ValidationError(
                    f"Wasm contract contains function with more than {max_params} parameters",
                )
            if len(signature.results) > max_results:
                raise ValidationError(
                    f"Wasm contract contains function with more than {max_results} results",
                )

        max_total = limits.effective("max_total_function_params")
        if total_params > max_total:
            raise ValidationError(
                f"Wasm contract contains more than {max_total} function parameters in total",
            )

    def _check_tables(
        self, imports: list[Any], exports: list[Any], limits: WasmLimits,
    ) -> None:
        table_limit = limits.effective("table_size_limit_elements")
        for item in [*imports, *exports]:
            if isinstance(item.type, self._wt.TableType) and item.type.limits.min > table_limit:
                raise ValidationError(
                    f"Wasm contract exceeds limit of {table_limit} table elements.",
                )

    @staticmethod
    def _check_capabilities(
        exports: list[Any], capabilities: Set[str], logger: Logger,
    ) -> None:
        required = {
            exp.name[len(CAPABILITY_EXPORT_PREFIX):]
            for exp in exports
            if exp.name.startswith(CAPABILITY_EXPORT_PREFIX)
        }
        logger.add(f"Required capabilities: {_format_set(required)}")
        logger.add(f"Available capabilities: {_format_set(capabilities)}")

        missing = required - set(capabilities)
        if missing:
            raise ValidationError(
                f"Wasm contract requires unavailable capabilities: {_format_set(missing)}",
            )
