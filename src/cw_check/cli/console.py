"""Rich consoles shared by the CLI layer.

``console`` renders the report on stdout; ``err_console`` renders the
error boundary on stderr.  Both resolve their stream at print time, so
redirection (and pytest's ``capsys``) is honoured.  Soft wrapping keeps
long paths and engine messages on one line.
"""

from __future__ import annotations

from rich.console import Console

console = Console(soft_wrap=True, highlight=False, emoji=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)
