"""cw-check — batch pre-flight checker for CosmWasm contract binaries.

Resolves the chain policy (capabilities and Wasm limits) once, then
statically validates and compiles every given contract.
"""

from cw_check.version import __version__

__all__: list[str] = ["__version__"]
