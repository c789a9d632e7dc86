"""Streaming report rendering for a batch run.

Every outcome is printed as soon as it is known; the summary comes
after the last file.  All dynamic text is escaped so file paths and
engine diagnostics are never interpreted as Rich markup.
"""

from __future__ import annotations

from collections.abc import Set

from rich.markup import escape

from cw_check.cli.console import console
from cw_check.core.models import CheckOutcome, RunSummary


def format_capabilities(capabilities: Set[str]) -> str:
    """Render a capability set deterministically: ``{"a", "b"}``."""
    return "{" + ", ".join(f'"{name}"' for name in sorted(capabilities)) + "}"


def print_capabilities(capabilities: Set[str]) -> None:
    console.print(f"Available capabilities: {escape(format_capabilities(capabilities))}")
    console.print()


def print_outcome(outcome: CheckOutcome) -> None:
    """Print ``<path>: pass`` or ``<path>: failure`` plus the diagnostic and hint."""
    path = escape(outcome.path)
    if outcome.passed:
        console.print(f"{path}: [green]pass[/green]")
        return
    console.print(f"{path}: [red]failure[/red]")
    console.print(escape(outcome.error or ""))
    if outcome.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(outcome.hint)}")


def print_summary(summary: RunSummary) -> None:
    console.print()
    if summary.all_passed:
        console.print(f"All contracts ({summary.passes}) [green]passed[/green] checks!")
    else:
        console.print(
            f"[green]Passes[/green]: {summary.passes}, "
            f"[red]failures[/red]: {summary.failures}"
        )
