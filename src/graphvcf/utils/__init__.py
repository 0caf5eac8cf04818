"""
Shared utilities for graphvcf: rich console, logging setup and timing helpers.
"""

from .logging import Timer, console, format_counts, log_call, setup_logging, timed

__all__ = [
    "Timer",
    "console",
    "format_counts",
    "log_call",
    "setup_logging",
    "timed",
]
