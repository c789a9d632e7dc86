"""Infrastructure: MessagePack chain-config decoding.

This module is the **only** place in the codebase that touches msgpack.
A chain config is the ``WasmConfig`` query response a node returns,
serialized as MessagePack.  Structs may be encoded compactly as arrays
(fields in declaration order) or as maps keyed by field name; both are
accepted.  Decoding is all-or-nothing — any schema mismatch fails the
whole load with :class:`~cw_check.exceptions.ConfigDecodeError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import msgpack

from cw_check.core.models import WASM_LIMIT_FIELDS, CacheOptions, ChainConfig, WasmLimits
from cw_check.exceptions import ConfigDecodeError, FileReadError

_CONFIG_FIELDS: tuple[str, ...] = ("wasm_limits", "cache")
_CACHE_FIELDS: tuple[str, ...] = (
    "base_dir",
    "available_capabilities",
    "memory_cache_size_bytes",
    "instance_memory_limit_bytes",
)


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------

def _struct_fields(
    raw: Any,
    names: Sequence[str],
    struct: str,
    *,
    optional: frozenset[str] = frozenset(),
) -> dict[str, Any]:
    """Map an array- or map-encoded struct onto its field names."""
    if isinstance(raw, (list, tuple)):
        if len(raw) != len(names):
            raise ConfigDecodeError(
                f"invalid length {len(raw)}, expected struct {struct} "
                f"with {len(names)} elements",
            )
        return dict(zip(names, raw))
    if isinstance(raw, dict):
        fields: dict[str, Any] = {}
        for name in names:
            if name in raw:
                fields[name] = raw[name]
            elif name in optional:
                fields[name] = None
            else:
                raise ConfigDecodeError(f"missing field `{name}` in {struct}")
        return fields
    raise ConfigDecodeError(
        f"invalid type: {type(raw).__name__}, expected struct {struct}",
    )


def _unsigned(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigDecodeError(
            f"invalid value for `{field}`: {value!r}, expected an unsigned integer",
        )
    return value


def _optional_unsigned(value: Any, field: str) -> int | None:
    if value is None:
        return None
    return _unsigned(value, field)


def _decode_limits(raw: Any) -> WasmLimits:
    fields = _struct_fields(
        raw, WASM_LIMIT_FIELDS, "WasmLimits", optional=frozenset(WASM_LIMIT_FIELDS),
    )
    return WasmLimits(
        **{name: _optional_unsigned(value, name) for name, value in fields.items()},
    )


def _decode_cache(raw: Any) -> CacheOptions:
    fields = _struct_fields(raw, _CACHE_FIELDS, "CacheOptions")

    base_dir = fields["base_dir"]
    if not isinstance(base_dir, str):
        raise ConfigDecodeError(
            f"invalid value for `base_dir`: {base_dir!r}, expected a path string",
        )

    capabilities = fields["available_capabilities"]
    if not isinstance(capabilities, (list, tuple)) or not all(
        isinstance(name, str) for name in capabilities
    ):
        raise ConfigDecodeError(
            "invalid value for `available_capabilities`: expected a sequence of strings",
        )

    return CacheOptions(
        base_dir=base_dir,
        available_capabilities=frozenset(capabilities),
        memory_cache_size_bytes=_unsigned(
            fields["memory_cache_size_bytes"], "memory_cache_size_bytes",
        ),
        instance_memory_limit_bytes=_unsigned(
            fields["instance_memory_limit_bytes"], "instance_memory_limit_bytes",
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def decode_chain_config(data: bytes) -> ChainConfig:
    """Decode a MessagePack blob into a :class:`ChainConfig`.

    Raises
    ------
    ConfigDecodeError
        For truncated data, trailing bytes, wrong field types, or missing
        required fields.
    """
    try:
        raw = msgpack.unpackb(data, raw=False)
    except (msgpack.exceptions.UnpackException, ValueError, TypeError) as exc:
        raise ConfigDecodeError(f"error parsing config file: {exc}") from exc

    try:
        fields = _struct_fields(raw, _CONFIG_FIELDS, "Config")
        return ChainConfig(
            wasm_limits=_decode_limits(fields["wasm_limits"]),
            cache=_decode_cache(fields["cache"]),
        )
    except ConfigDecodeError as exc:
        raise ConfigDecodeError(f"error parsing config file: {exc}") from exc


def encode_chain_config(config: ChainConfig) -> bytes:
    """Serialize *config* in the compact (array) MessagePack layout."""
    limits = config.wasm_limits
    cache = config.cache
    payload = [
        [getattr(limits, name) for name in WASM_LIMIT_FIELDS],
        [
            cache.base_dir,
            sorted(cache.available_capabilities),
            cache.memory_cache_size_bytes,
            cache.instance_memory_limit_bytes,
        ],
    ]
    return msgpack.packb(payload, use_bin_type=True)


def load_chain_config(path: str) -> ChainConfig:
    """Read and decode the chain config file at *path*.

    Raises
    ------
    FileReadError
        When the file cannot be opened or read.
    ConfigDecodeError
        When its contents do not decode.
    """
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise FileReadError(
            f"error opening config file: {path}: {reason}",
            hint="Query the chain's Wasm config and save the raw response to a file.",
        ) from exc
    return decode_chain_config(data)
