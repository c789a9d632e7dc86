"""CLI application entry point for cw-check.

This module is the **sole error boundary** for the entire application.
It catches :class:`~cw_check.exceptions.CwCheckError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — policy resolution and the check
  pipeline are delegated to the core and infrastructure layers.
* ``print()`` is forbidden; the Rich consoles are used exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import functools
import sys
from typing import NoReturn

from rich.markup import escape

from cw_check.cli import exit_codes
from cw_check.cli.console import err_console
from cw_check.core.models import (
    ConfigFile,
    DefaultPolicy,
    ExplicitCapabilities,
    PolicySource,
)
from cw_check.exceptions import CwCheckError, UsageError
from cw_check.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

class _ArgumentParser(argparse.ArgumentParser):
    """Parser that raises :class:`UsageError` instead of exiting.

    ``--help`` and ``--version`` still exit 0 through argparse itself.
    """

    def error(self, message: str) -> NoReturn:
        raise UsageError(message, hint=f"Run '{self.prog} --help' for usage.")


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    ``--available-capabilities`` and ``--wasm-config`` share a mutually
    exclusive group, so the combination is rejected as a
    :class:`UsageError` before any file is touched.
    """
    parser = _ArgumentParser(
        prog="cw-check",
        description=(
            "Checks the given wasm file (memories, exports, imports, "
            "available capabilities, and non-determinism)."
        ),
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    policy = parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--available-capabilities",
        "--FEATURES",
        "--supported-features",
        dest="capabilities",
        metavar="CAPABILITIES",
        default=None,
        help="Sets the available capabilities that the desired target chain has",
    )
    policy.add_argument(
        "--wasm-config",
        dest="config",
        metavar="CONFIG_FILE",
        default=None,
        help=(
            "Provide a file with the chain's Wasmd configuration. You can query "
            "this configuration from the chain, using the WasmConfig query. If "
            "this is not provided, the default values are used. This conflicts "
            "with --available-capabilities because the config also contains those."
        ),
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Prints additional information on stderr",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        metavar="N",
        help="Number of contracts to check in parallel (default: 1)",
    )
    parser.add_argument(
        "wasm",
        nargs="+",
        metavar="WASM",
        help="Wasm file to read and compile",
    )
    return parser


def _policy_source(args: argparse.Namespace) -> PolicySource:
    if args.config is not None:
        return ConfigFile(args.config)
    if args.capabilities is not None:
        return ExplicitCapabilities(args.capabilities)
    return DefaultPolicy()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the cw-check CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when every contract passes,
        :data:`exit_codes.CHECKS_FAILED` otherwise.

    Raises
    ------
    CwCheckError
        For setup failures (unreadable or malformed config, missing
        wasmtime); these abort before any contract is checked.
    """
    from cw_check.cli.report import print_capabilities, print_outcome, print_summary
    from cw_check.core.batch_service import BatchRunner
    from cw_check.core.check_service import CheckService
    from cw_check.core.policy import resolve_policy
    from cw_check.infra.config_loader import load_chain_config
    from cw_check.infra.contract_reader import read_contract
    from cw_check.infra.wasmtime_engine import WasmtimeEngine

    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.jobs < 1:
        parser.error(f"argument -j/--jobs: must be at least 1, got {args.jobs}")

    policy = resolve_policy(_policy_source(args), load_config=load_chain_config)
    service = CheckService(WasmtimeEngine(), read_contract)
    print_capabilities(policy.capabilities)

    runner = BatchRunner(
        functools.partial(service.outcome, policy=policy, verbose=args.verbose),
        jobs=args.jobs,
    )
    summary = runner.run(args.wasm, on_outcome=print_outcome)
    print_summary(summary)

    return exit_codes.SUCCESS if summary.all_passed else exit_codes.CHECKS_FAILED


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except UsageError as exc:
        err_console.print(f"[bold red]Usage error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.USAGE_ERROR)
    except CwCheckError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
