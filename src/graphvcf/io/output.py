"""
Output Writers: atomic finalization and shared sinks.

Every file graphvcf produces is first written to a temporary file next to the
destination and moved into place only after the whole pass succeeded, so an
aborted run never leaves a partial file under the final name.
"""

import logging
import os
import tempfile
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from ..core.naming import IgnoreLevel, normalize_chrom
from ..core.resolver import SequenceAccessor
from ..parallel import ParallelProcessor

logger = logging.getLogger(__name__)

__all__ = [
    "GraphPath",
    "LockedSink",
    "REFERENCE_TABLE_HEADER",
    "atomic_output",
    "write_reference_table",
]

REFERENCE_TABLE_HEADER = "node\tstart\tend\tseq\tlength\tpath"


@contextmanager
def atomic_output(path: Path) -> Iterator[TextIO]:
    """
    Open ``path`` for writing through a temporary sibling file.

    The temporary file is renamed over ``path`` when the block exits
    normally and removed when it raises.
    """
    path = Path(path)
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise OSError(f"Cannot write output {path}: {e}") from e

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", newline="\n") as handle:
            yield handle
        os.replace(tmp_path, path)
        logger.debug("Finalized %s", path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class LockedSink:
    """
    Text sink shared between workers.

    Workers render whole units into local buffers and append them with a
    single locked write, keeping the lock hold time short.
    """

    def __init__(self, handle: TextIO):
        self.handle = handle
        self._lock = threading.Lock()
        self.writes = 0

    def write(self, text: str) -> None:
        if not text:
            return
        with self._lock:
            self.handle.write(text)
            self.writes += 1


@dataclass(frozen=True)
class GraphPath:
    """An ordered traversal of graph segments, as delivered by a graph parser."""

    name: str
    nodes: tuple[int, ...] = field(default_factory=tuple)


def _render_path(
    path: GraphPath, name: str, sequence_accessor: SequenceAccessor
) -> str:
    lines = []
    start = 0
    for node_id in path.nodes:
        seq = sequence_accessor(node_id) or ""
        end = start + len(seq)
        lines.append(f"{node_id}\t{start}\t{end}\t{seq}\t{len(seq)}\t{name}\n")
        start = end
    return "".join(lines)


def write_reference_table(
    paths: Iterable[GraphPath],
    output: Path,
    sequence_accessor: SequenceAccessor,
    ignore_level: int = IgnoreLevel.KEEP_ALL,
    n_jobs: int = 1,
) -> int:
    """
    Write the 6-column reference table for a set of graph paths.

    Each path is rendered independently (cumulative start/end offsets from
    its node sequences) and appended to the shared output under a lock.
    Path names are normalized under ``ignore_level``; rejected paths are left
    out entirely. Rows of one path are contiguous, but paths appear in
    completion order.

    Returns:
        Number of paths written.
    """
    with atomic_output(output) as handle:
        handle.write(REFERENCE_TABLE_HEADER + "\n")
        sink = LockedSink(handle)

        def emit(path: GraphPath) -> bool:
            name = normalize_chrom(path.name, ignore_level)
            if name is None:
                logger.debug("Path %s rejected at ignore level %d", path.name, ignore_level)
                return False
            sink.write(_render_path(path, name, sequence_accessor))
            return True

        processor = ParallelProcessor(n_jobs=n_jobs, backend="threading")
        written = sum(processor.map(emit, paths, description="Writing paths"))

    logger.info("Reference table %s: %d paths written", output, written)
    return written
