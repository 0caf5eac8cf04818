"""
Input Adapters: reference/alignment tables and node sequences.

This module builds the read-only mapping stores from the tab-separated tables
produced upstream of graphvcf, and exposes node sequences stored in an
indexed FASTA (one record per graph segment, named by node id).

Malformed rows never fail a load: they are skipped and counted in the
returned :class:`~graphvcf.core.mapping.LoadReport`.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pysam

from ..core.mapping import (
    AlignmentRecord,
    AlignmentStore,
    LoadReport,
    PathRecord,
    ReferenceStore,
)
from ..utils.logging import log_call

logger = logging.getLogger(__name__)

__all__ = [
    "FastaSequenceAccessor",
    "iter_table_rows",
    "read_alignment_table",
    "read_reference_table",
]

# Column aliases recognized in an alignment table header (lowercased).
NODE_COLUMNS = ("node", "id", "segment", "seg")
PATH_COLUMNS = ("path", "chrom", "name")
DISTANCE_COLUMNS = ("distance", "dist", "offset")
POSITION_COLUMNS = ("position", "pos")


def iter_table_rows(path: Path) -> Iterator[list[str]]:
    """Yield non-empty, non-comment rows of a TSV file as trimmed fields."""
    with open(path) as f:
        for line in f:
            line = line.rstrip("\r\n")
            if not line.strip() or line.startswith("#"):
                continue
            yield [field.strip() for field in line.split("\t")]


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_node_id(value: str) -> int | None:
    node_id = _parse_int(value)
    if node_id is None or node_id < 0:
        return None
    return node_id


@log_call()
def read_reference_table(path: Path) -> tuple[ReferenceStore, LoadReport]:
    """
    Load the reference extraction table.

    Accepted layouts (path is always the last column)::

        node  start  end  path
        node  start  end  seq  length  path

    An optional header row is recognized by a first column of ``node``.
    Rows with a non-numeric node/start/end or an empty path are skipped.
    Duplicate node ids keep the last row. The maximum ``end`` seen per path
    is recorded as the path length.
    """
    records: dict[int, PathRecord] = {}
    lengths: dict[str, int] = {}
    report = LoadReport()

    for i, fields in enumerate(iter_table_rows(path)):
        if i == 0 and fields[0] == "node":
            report.header = True
            continue
        report.rows += 1

        if len(fields) < 4:
            report.malformed += 1
            continue

        node_id = _parse_node_id(fields[0])
        start = _parse_int(fields[1])
        end = _parse_int(fields[2])
        path_name = fields[-1]
        if node_id is None or start is None or end is None or not path_name:
            report.malformed += 1
            continue

        sequence = fields[3] if len(fields) >= 6 and fields[3] else None

        if node_id in records:
            report.duplicates += 1
        records[node_id] = PathRecord(path_name, start, sequence)
        if end > lengths.get(path_name, 0):
            lengths[path_name] = end
        else:
            lengths.setdefault(path_name, 0)
        report.loaded += 1

    logger.info(
        "Reference table %s: %d nodes on %d paths (%d malformed rows skipped)",
        path,
        len(records),
        len(lengths),
        report.malformed,
    )
    return ReferenceStore(records, lengths), report


def _is_alignment_header(fields: list[str]) -> bool:
    first = fields[0].lower()
    return "node" in first or "id" in first


def _find_column(names: list[str], aliases: tuple[str, ...]) -> int | None:
    for idx, name in enumerate(names):
        if name in aliases:
            return idx
    return None


class _AlignmentColumns:
    """Column indices for an alignment table, from its header or the defaults."""

    def __init__(self, header: list[str] | None = None):
        if header is None:
            self.node: int | None = 0
            self.distance: int | None = 1
            self.position: int | None = 2
            self.path: int | None = None
            self.from_header = False
            return

        names = [h.lower() for h in header]
        self.node = _find_column(names, NODE_COLUMNS)
        if self.node is None:
            self.node = 0
        self.path = _find_column(names, PATH_COLUMNS)
        self.distance = _find_column(names, DISTANCE_COLUMNS)
        self.position = _find_column(names, POSITION_COLUMNS)
        self.from_header = True

    def path_index(self, n_fields: int) -> int | None:
        if self.from_header:
            return self.path
        # Headerless tables: the 5-column aligner layout keeps the path in column 4,
        # a 4-column table keeps it last.
        if n_fields >= 5:
            return 4
        if n_fields == 4:
            return 3
        return None

    def required(self) -> int:
        used = [c for c in (self.node, self.distance, self.position) if c is not None]
        return max(used) + 1


@log_call()
def read_alignment_table(path: Path) -> tuple[AlignmentStore, LoadReport]:
    """
    Load the alignment table (node -> path, signed distance, position).

    The first non-empty row is a header if its first token contains "node" or
    "id"; header names are matched case-insensitively against the known
    aliases. Without a header, columns default to node=0, distance=1,
    position=2 and the path in column 4 (or the last of 4 columns).
    Duplicate node ids keep the last row.
    """
    records: dict[int, AlignmentRecord] = {}
    report = LoadReport()
    columns: _AlignmentColumns | None = None

    for fields in iter_table_rows(path):
        if columns is None:
            if _is_alignment_header(fields):
                columns = _AlignmentColumns(fields)
                report.header = True
                logger.debug("Alignment header detected: %s", fields)
                continue
            columns = _AlignmentColumns()
        report.rows += 1

        if len(fields) < columns.required():
            report.malformed += 1
            continue

        node_id = _parse_node_id(fields[columns.node])
        if node_id is None:
            report.malformed += 1
            continue

        distance = position = None
        if columns.distance is not None:
            distance = _parse_int(fields[columns.distance])
            if distance is None:
                report.malformed += 1
                continue
        if columns.position is not None:
            position = _parse_int(fields[columns.position])
            if position is None:
                report.malformed += 1
                continue

        path_idx = columns.path_index(len(fields))
        path_name = None
        if path_idx is not None and path_idx < len(fields):
            path_name = fields[path_idx] or None

        if node_id in records:
            report.duplicates += 1
        records[node_id] = AlignmentRecord(path_name, distance, position)
        report.loaded += 1

    logger.info(
        "Alignment table %s: %d nodes (%d malformed, %d duplicate rows)",
        path,
        len(records),
        report.malformed,
        report.duplicates,
    )
    return AlignmentStore(records), report


class FastaSequenceAccessor:
    """
    Node sequence lookup backed by an indexed FASTA.

    Each FASTA record holds one graph segment and is named by its node id,
    as written by ``gfatools gfa2fa``. Instances are callables mapping a
    node id to its sequence, or None when the node is absent.
    """

    def __init__(self, path: Path):
        self.path = path
        self.fasta = pysam.FastaFile(str(path))
        self._names = set(self.fasta.references)

    def __call__(self, node_id: int) -> str | None:
        name = str(node_id)
        if name not in self._names:
            return None
        return self.fasta.fetch(name)

    def close(self):
        self.fasta.close()

    def __enter__(self) -> "FastaSequenceAccessor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
