"""Fork-join helpers over independent work units with joblib."""

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from joblib import Parallel, delayed
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .utils.logging import console

logger = logging.getLogger(__name__)

BACKENDS = ("loky", "threading", "multiprocessing")


class ParallelProcessor:
    """Ordered parallel map over pure, blocking work units."""

    def __init__(
        self,
        n_jobs: int = 1,
        backend: str = "loky",
        pre_dispatch: str = "2 * n_jobs",
    ):
        """
        Initialize parallel processor.

        Args:
            n_jobs: Number of parallel jobs (-1 for all CPUs, 1 runs inline)
            backend: joblib backend ('loky', 'threading', 'multiprocessing')
            pre_dispatch: How many units joblib materializes ahead of the
                workers; keeps lazily produced units bounded in memory
        """
        if backend not in BACKENDS:
            raise ValueError(f"Unknown parallel backend '{backend}', expected one of {BACKENDS}")
        self.n_jobs = n_jobs if n_jobs > 0 else (os.cpu_count() or 1)
        self.backend = backend
        self.pre_dispatch = pre_dispatch

    def imap(self, func: Callable, items: Iterable[Any]) -> Iterator[Any]:
        """
        Apply ``func`` to every item, yielding results in input order.

        Items may be a lazy iterator; results are yielded as they complete
        so callers can fold them without holding all of them.
        """
        if self.n_jobs == 1:
            for item in items:
                yield func(item)
            return

        logger.debug("Dispatching work to %d %s workers", self.n_jobs, self.backend)
        parallel = Parallel(
            n_jobs=self.n_jobs,
            backend=self.backend,
            pre_dispatch=self.pre_dispatch,
            return_as="generator",
        )
        yield from parallel(delayed(func)(item) for item in items)

    def map(
        self,
        func: Callable,
        items: Iterable[Any],
        description: str = "Processing",
        show_progress: bool = False,
        total: int | None = None,
    ) -> list[Any]:
        """
        Map function over items in parallel.

        Args:
            func: Function to apply
            items: Items to process
            description: Description for progress bar
            show_progress: Whether to show progress bar
            total: Number of items, when known, for the progress bar

        Returns:
            List of results
        """
        if not show_progress:
            return list(self.imap(func, items))

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(f"[cyan]{description}...", total=total)
            results = []
            for result in self.imap(func, items):
                results.append(result)
                progress.update(task, advance=1)
            return results


def parallel_reduce(
    func: Callable,
    items: Iterable[Any],
    combine: Callable[[Any, Any], Any],
    initial: Any,
    n_jobs: int = 1,
    backend: str = "loky",
) -> Any:
    """
    Map ``func`` over ``items`` and fold the results with ``combine``.

    ``combine`` must be associative for the result to be independent of how
    the work was split; results are folded in input order as they arrive.
    """
    processor = ParallelProcessor(n_jobs=n_jobs, backend=backend)
    acc = initial
    for result in processor.imap(func, items):
        acc = combine(acc, result)
    return acc
