"""End-to-end CLI tests (cli/app.py) with the engine replaced by a fake.

Coverage:
* Streaming per-file lines and the two summary forms.
* Exit codes for all-pass, mixed, and setup failures.
* Mutually exclusive policy flags and the legacy flag aliases.
* Config files feeding the policy, and decode failures aborting early.
* ``--verbose`` diagnostics on stderr.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from cw_check.cli import exit_codes
from cw_check.cli.app import cli, main
from cw_check.core.models import CacheOptions, ChainConfig, WasmLimits
from cw_check.exceptions import ConfigDecodeError, FileReadError, UsageError
from cw_check.infra.config_loader import encode_chain_config


def _write_config(tmp_path: Path, capabilities: set[str]) -> str:
    config = ChainConfig(
        wasm_limits=WasmLimits(max_imports=20),
        cache=CacheOptions(
            base_dir="/data/wasm",
            available_capabilities=frozenset(capabilities),
            memory_cache_size_bytes=0,
            instance_memory_limit_bytes=0,
        ),
    )
    path = tmp_path / "chain-config.msgpack"
    path.write_bytes(encode_chain_config(config))
    return str(path)


# ---------------------------------------------------------------------------
# Reporting and exit codes
# ---------------------------------------------------------------------------

class TestReport:
    def test_all_pass(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        paths = [write_contract(f"c{i}.wasm", "requires=iterator") for i in range(3)]

        code = main(paths)

        out = capsys.readouterr().out
        assert code == exit_codes.SUCCESS
        for path in paths:
            assert f"{path}: pass" in out
        assert "All contracts (3) passed checks!" in out

    def test_mixed_results(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        good = write_contract("good.wasm", "requires=staking")
        bad = write_contract("bad.wasm", "requires=ibc2")

        code = main([good, bad])

        out = capsys.readouterr().out
        assert code == exit_codes.CHECKS_FAILED
        assert f"{good}: pass" in out
        assert f"{bad}: failure" in out
        assert "Wasm contract requires unavailable capabilities" in out
        assert "Passes: 1, failures: 1" in out
        assert out.index(f"{good}: pass") < out.index(f"{bad}: failure")

    def test_failure_hint_follows_diagnostic(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = write_contract("bad.wasm", "requires=ibc2\nhint=Deploy to a chain with ibc2.")

        main([path])

        out = capsys.readouterr().out
        assert "Hint: Deploy to a chain with ibc2." in out
        assert out.index("unavailable capabilities") < out.index("Hint:")

    def test_passing_run_prints_no_hint(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main([write_contract("ok.wasm")])
        assert "Hint:" not in capsys.readouterr().out

    def test_compile_failure_is_attributed_to_compiler(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = write_contract("weird.wasm", "compile=fail")

        code = main([path])

        out = capsys.readouterr().out
        assert code == exit_codes.CHECKS_FAILED
        assert "Error compiling Wasm: unsupported instruction" in out
        assert "static Wasm validation" not in out

    def test_missing_contract_is_a_file_failure(
        self, patched_engine, write_contract, tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        good = write_contract("good.wasm")
        missing = str(tmp_path / "missing.wasm")

        code = main([missing, good])

        out = capsys.readouterr().out
        assert code == exit_codes.CHECKS_FAILED
        assert f"{missing}: failure" in out
        assert f"{good}: pass" in out

    def test_capabilities_banner_is_printed_first(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = write_contract("a.wasm")
        main(["--available-capabilities", "staking,iterator", path])

        out = capsys.readouterr().out
        assert out.startswith('Available capabilities: {"iterator", "staking"}\n')

    def test_markup_in_paths_is_printed_verbatim(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = write_contract("[bold]odd.wasm")
        main([path])
        assert f"{path}: pass" in capsys.readouterr().out

    def test_reruns_are_identical(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        paths = [write_contract("a.wasm"), write_contract("b.wasm", "requires=ibc2")]

        first_code = main(paths)
        first = capsys.readouterr().out
        second_code = main(paths)
        second = capsys.readouterr().out

        assert first_code == second_code == exit_codes.CHECKS_FAILED
        assert first == second

    def test_parallel_jobs_keep_order(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        paths = [write_contract(f"c{i}.wasm") for i in range(6)]

        code = main(["--jobs", "3", *paths])

        out = capsys.readouterr().out
        assert code == exit_codes.SUCCESS
        positions = [out.index(f"{path}: pass") for path in paths]
        assert positions == sorted(positions)
        assert len(patched_engine.compiler_engines) == 6

    def test_non_positive_jobs_is_usage_error(self, patched_engine, write_contract) -> None:
        with pytest.raises(UsageError, match="--jobs"):
            main(["--jobs", "0", write_contract("a.wasm")])
        assert patched_engine.calls == []


# ---------------------------------------------------------------------------
# Policy flags
# ---------------------------------------------------------------------------

class TestPolicyFlags:
    @pytest.mark.parametrize(
        "flag", ["--available-capabilities", "--FEATURES", "--supported-features"],
    )
    def test_capability_flag_and_aliases(
        self, flag: str, patched_engine, write_contract,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = write_contract("ibc.wasm", "requires=ibc2")

        code = main([flag, "ibc2", path])

        assert code == exit_codes.SUCCESS
        assert 'Available capabilities: {"ibc2"}' in capsys.readouterr().out

    def test_default_capabilities_reject_unknown(
        self, patched_engine, write_contract,
    ) -> None:
        assert main([write_contract("ibc.wasm", "requires=ibc2")]) == exit_codes.CHECKS_FAILED

    def test_flags_are_mutually_exclusive(
        self, monkeypatch: pytest.MonkeyPatch, patched_engine, tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        from cw_check.infra import config_loader, contract_reader

        def _forbidden(path: str) -> bytes:
            raise AssertionError(f"unexpected file access: {path}")

        monkeypatch.setattr(contract_reader, "read_contract", _forbidden)
        monkeypatch.setattr(config_loader, "load_chain_config", _forbidden)

        with pytest.raises(UsageError, match="not allowed with argument"):
            main([
                "--available-capabilities", "iterator",
                "--wasm-config", str(tmp_path / "chain.msgpack"),
                str(tmp_path / "a.wasm"),
            ])

        assert capsys.readouterr().out == ""
        assert patched_engine.calls == []

    def test_config_file_supplies_capabilities(
        self, patched_engine, write_contract, tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config_path = _write_config(tmp_path, {"iterator", "ibc2"})
        path = write_contract("ibc.wasm", "requires=ibc2")

        code = main(["--wasm-config", config_path, path])

        assert code == exit_codes.SUCCESS
        assert 'Available capabilities: {"ibc2", "iterator"}' in capsys.readouterr().out

    def test_undecodable_config_aborts_before_checks(
        self, patched_engine, write_contract, tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        config_path = tmp_path / "broken.msgpack"
        config_path.write_bytes(b"\x93\x01")
        path = write_contract("a.wasm")

        with pytest.raises(ConfigDecodeError):
            main(["--wasm-config", str(config_path), path])

        assert patched_engine.calls == []
        assert ": pass" not in capsys.readouterr().out

    def test_missing_config_aborts(self, patched_engine, write_contract, tmp_path: Path) -> None:
        with pytest.raises(FileReadError):
            main(["--wasm-config", str(tmp_path / "nope.msgpack"), write_contract("a.wasm")])
        assert patched_engine.calls == []


# ---------------------------------------------------------------------------
# Verbose output
# ---------------------------------------------------------------------------

class TestVerbose:
    def test_verbose_prefixes_each_file(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        first = write_contract("first.wasm", "requires=staking")
        second = write_contract("second.wasm", "requires=ibc2")

        code = main(["--verbose", first, second])

        captured = capsys.readouterr()
        assert code == exit_codes.CHECKS_FAILED
        assert "    first.wasm: Required capabilities: ['staking']" in captured.err
        assert "    second.wasm: Required capabilities: ['ibc2']" in captured.err

    def test_quiet_run_has_no_diagnostics(
        self, patched_engine, write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        main([write_contract("a.wasm", "requires=staking")])
        assert capsys.readouterr().err == ""


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def test_all_pass_exits_zero(
        self, monkeypatch: pytest.MonkeyPatch, patched_engine, write_contract,
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["cw-check", write_contract("a.wasm")])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.SUCCESS

    def test_failed_check_exits_one(
        self, monkeypatch: pytest.MonkeyPatch, patched_engine, write_contract,
    ) -> None:
        monkeypatch.setattr(
            sys, "argv", ["cw-check", write_contract("a.wasm", "compile=fail")],
        )
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.CHECKS_FAILED

    def test_setup_error_is_rendered(
        self, monkeypatch: pytest.MonkeyPatch, patched_engine, write_contract,
        tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        config_path = tmp_path / "broken.msgpack"
        config_path.write_bytes(b"garbage")
        monkeypatch.setattr(
            sys,
            "argv",
            ["cw-check", "--wasm-config", str(config_path), write_contract("a.wasm")],
        )

        with pytest.raises(SystemExit) as exc_info:
            cli()

        assert exc_info.value.code == exit_codes.GENERAL_ERROR
        assert "Error: error parsing config file" in capsys.readouterr().err
        assert patched_engine.calls == []

    def test_unexpected_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str],
    ) -> None:
        from cw_check.cli import app as app_module

        def _boom(argv: list[str] | None = None) -> int:
            raise RuntimeError("kaput")

        monkeypatch.setattr(app_module, "main", _boom)
        with pytest.raises(SystemExit) as exc_info:
            cli()

        assert exc_info.value.code == exit_codes.UNEXPECTED_ERROR
        assert "RuntimeError: kaput" in capsys.readouterr().err

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from cw_check.cli import app as app_module

        def _interrupt(argv: list[str] | None = None) -> int:
            raise KeyboardInterrupt

        monkeypatch.setattr(app_module, "main", _interrupt)
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.KEYBOARD_INTERRUPT

    @pytest.mark.parametrize(
        "flags",
        [
            ["--jobs", "0"],
            ["--available-capabilities", "iterator", "--wasm-config", "chain.msgpack"],
        ],
    )
    def test_usage_errors_exit_two(
        self, flags: list[str], monkeypatch: pytest.MonkeyPatch, patched_engine,
        write_contract, capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["cw-check", *flags, write_contract("a.wasm")])

        with pytest.raises(SystemExit) as exc_info:
            cli()

        assert exc_info.value.code == exit_codes.USAGE_ERROR
        captured = capsys.readouterr()
        assert "Usage error:" in captured.err
        assert captured.out == ""
        assert patched_engine.calls == []
