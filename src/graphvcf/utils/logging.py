"""
Logging utilities for graphvcf.

Log records and progress displays go to a shared stderr console, since a
rewritten VCF may be streamed to stdout by callers.
"""

import logging
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "Timer",
    "console",
    "format_counts",
    "log_call",
    "setup_logging",
    "timed",
]

console = Console(stderr=True)

# Third-party loggers that are chatty at DEBUG.
_QUIET_LOGGERS = ("joblib", "loky", "pysam")


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Configure logging for a graphvcf run.

    Args:
        verbose: DEBUG level (with source paths) instead of INFO.
        log_file: Optional path that also receives plain-text records.
    """
    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def format_counts(counts: Mapping[str, int]) -> str:
    """``{"replaced": 3, "skipped": 1}`` -> ``"replaced=3 skipped=1"``."""
    return " ".join(f"{k}={v}" for k, v in counts.items())


@dataclass
class Timer:
    operation: str
    elapsed: float = 0.0


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None) -> Iterator[Timer]:
    """
    Time a block and log it at DEBUG.

    The yielded :class:`Timer` carries the elapsed seconds once the block
    exits, for run summaries.

    Example:
        with timed("Loading alignment table", logger) as t:
            store, report = read_alignment_table(path)
        console.print(f"loaded in {t.elapsed:.1f}s")
    """
    log = logger or logging.getLogger(__name__)
    timer = Timer(operation)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield timer
    finally:
        timer.elapsed = time.perf_counter() - start
        log.debug("Completed: %s (%.3fs)", operation, timer.elapsed)


def _describe_input(args: tuple) -> str:
    if args and isinstance(args[0], (str, Path)):
        return Path(args[0]).name
    return ""


def log_call(logger: logging.Logger | None = None) -> Callable:
    """
    Decorator for file-level operations: logs the input file name and timing.

    Failures are logged with the input name and re-raised unchanged.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = logger or logging.getLogger(func.__module__)
            target = _describe_input(args)
            log.debug("%s(%s)", func.__name__, target)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.error("%s(%s) failed: %s", func.__name__, target, e)
                raise
            log.debug("%s(%s) done in %.3fs", func.__name__, target, time.perf_counter() - start)
            return result

        return wrapper

    return decorator
