"""Allow ``python -m cw_check`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m cw_check`` behaves identically to the ``cw-check``
console script.
"""

from __future__ import annotations

from cw_check.cli.app import cli

if __name__ == "__main__":
    cli()
