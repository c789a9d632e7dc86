"""Shared pytest fixtures and configuration for the cw-check test suite.

Guidelines
----------
* wasmtime is replaced by :class:`FakeEngine` everywhere except the
  engine adapter tests, which skip when wasmtime is not installed.
* Contract "binaries" for the fake engine are small text manifests::

      requires=staking,iterator
      compile=fail
      hint=shown below a capability failure

* Tests must not depend on OS state; files live under ``tmp_path``.
"""

from __future__ import annotations

from collections.abc import Set
from pathlib import Path
from typing import Any

import pytest

from cw_check.core.logger import Logger
from cw_check.core.models import WasmLimits
from cw_check.exceptions import CompileError, ValidationError


class FakeEngine:
    """In-memory stand-in for :class:`~cw_check.infra.wasmtime_engine.WasmtimeEngine`."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, bytes]] = []
        self.compiler_engines: list[object] = []

    @staticmethod
    def _manifest(wasm: bytes) -> dict[str, str]:
        entries: dict[str, str] = {}
        for line in wasm.decode().splitlines():
            key, _, value = line.partition("=")
            entries[key.strip()] = value.strip()
        return entries

    def validate(
        self,
        wasm: bytes,
        capabilities: Set[str],
        limits: WasmLimits,
        logger: Logger,
    ) -> None:
        self.calls.append(("validate", wasm))
        manifest = self._manifest(wasm)
        required = {name for name in manifest.get("requires", "").split(",") if name}
        logger.add(f"Required capabilities: {sorted(required)}")
        missing = required - set(capabilities)
        if missing:
            raise ValidationError(
                f"Wasm contract requires unavailable capabilities: {sorted(missing)}",
                hint=manifest.get("hint"),
            )

    def new_compiler_engine(self) -> object:
        engine = object()
        self.compiler_engines.append(engine)
        return engine

    def compile(self, engine: Any, wasm: bytes) -> object:
        self.calls.append(("compile", wasm))
        if self._manifest(wasm).get("compile") == "fail":
            raise CompileError("unsupported instruction in function 3")
        return object()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def patched_engine(monkeypatch: pytest.MonkeyPatch, fake_engine: FakeEngine) -> FakeEngine:
    """Make the CLI build ``fake_engine`` instead of a wasmtime engine."""
    from cw_check.infra import wasmtime_engine

    monkeypatch.setattr(wasmtime_engine, "WasmtimeEngine", lambda: fake_engine)
    return fake_engine


@pytest.fixture
def write_contract(tmp_path: Path):
    """Factory writing a fake-engine manifest and returning its path."""

    def _write(name: str, manifest: str = "") -> str:
        path = tmp_path / name
        path.write_bytes(manifest.encode())
        return str(path)

    return _write
