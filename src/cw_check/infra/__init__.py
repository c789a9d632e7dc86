"""Infrastructure layer — external system integration.

This layer wraps all interaction with wasmtime, msgpack, and the
filesystem.  Every raw third-party exception must be caught here and
re-raised as a :class:`~cw_check.exceptions.CwCheckError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from cw_check.infra.config_loader import (
    decode_chain_config,
    encode_chain_config,
    load_chain_config,
)
from cw_check.infra.contract_reader import read_contract
from cw_check.infra.wasmtime_engine import WasmtimeEngine

__all__: list[str] = [
    "WasmtimeEngine",
    "decode_chain_config",
    "encode_chain_config",
    "load_chain_config",
    "read_contract",
]
