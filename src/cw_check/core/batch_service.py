"""Core batch runner — checks many contracts and aggregates the results.

Files are independent: each check reads its own bytes and builds its own
compile engine, and the resolved policy is immutable.  With ``jobs > 1``
the checks run on a thread pool, but outcomes are still delivered in
input order.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing

from cw_check.core.models import CheckOutcome, RunSummary


class BatchRunner:
    """Run a per-file check over a sequence of paths.

    Parameters
    ----------
    check_one:
        Callable turning a path into a :class:`CheckOutcome`.  It must
        capture per-file errors itself; anything it raises aborts the run.
    jobs:
        Number of worker threads.  ``1`` checks files sequentially.
    """

    def __init__(self, check_one: Callable[[str], CheckOutcome], *, jobs: int = 1) -> None:
        if jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {jobs}")
        self._check_one = check_one
        self._jobs = jobs

    def _outcomes(self, paths: Sequence[str]) -> Generator[CheckOutcome, None, None]:
        if self._jobs == 1 or len(paths) < 2:
            for path in paths:
                yield self._check_one(path)
            return
        pool = ThreadPoolExecutor(max_workers=self._jobs)
        try:
            yield from pool.map(self._check_one, paths)
        finally:
            # Queued checks are dropped when the run is interrupted.
            pool.shutdown(wait=True, cancel_futures=True)

    def run(
        self,
        paths: Sequence[str],
        *,
        on_outcome: Callable[[CheckOutcome], None] | None = None,
    ) -> RunSummary:
        """Check every path, streaming each outcome to *on_outcome*."""
        collected: list[CheckOutcome] = []
        with closing(self._outcomes(paths)) as outcomes:
            for outcome in outcomes:
                if on_outcome is not None:
                    on_outcome(outcome)
                collected.append(outcome)
        return RunSummary.from_outcomes(collected)
