"""
Trim duplicated sample columns from a VCF.

Some graph genotypers append a second copy of the sample columns. The copy is
found by comparing every sample column with its left neighbour over the first
``same`` data lines: the earliest column that matched on all of them starts
the duplicated block, and everything from it onwards is cut.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from .io.output import atomic_output

logger = logging.getLogger(__name__)

__all__ = ["detect_cut_index", "trim_duplicate_samples", "trim_file"]

FIXED_COLUMNS = 9
FIRST_SAMPLE = FIXED_COLUMNS


def detect_cut_index(lines: Iterable[str], same: int) -> int | None:
    """
    0-based column index where duplicated sample content begins.

    Returns:
        ``FIXED_COLUMNS`` when the ``#CHROM`` line has no sample columns,
        the cut index when a duplicated column is found, otherwise None.
    """
    sample_count = 0
    counts: list[int] = []
    active = False
    seen = 0

    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("#"):
            if line.startswith("#CHROM"):
                header = line.split("\t")
                if len(header) <= FIXED_COLUMNS:
                    return FIXED_COLUMNS
                sample_count = len(header) - FIXED_COLUMNS
                counts = [0] * max(sample_count - 1, 0)
                active = True
            continue
        if not active:
            continue
        if seen >= same:
            break

        fields = line.split("\t")
        seen += 1
        if len(fields) <= FIXED_COLUMNS:
            continue
        # counts[k - 1] tracks sample k against sample k - 1
        n = min(sample_count, len(fields) - FIXED_COLUMNS)
        for k in range(1, n):
            if fields[FIRST_SAMPLE + k] == fields[FIRST_SAMPLE + k - 1]:
                counts[k - 1] += 1

    for j, c in enumerate(counts):
        if c >= same:
            return FIRST_SAMPLE + 1 + j
    return None


def _cut(fields: list[str], cut: int) -> list[str]:
    if cut <= FIRST_SAMPLE + 1:
        return fields[:FIXED_COLUMNS]
    return fields[: min(cut, len(fields))]


def trim_duplicate_samples(lines: Iterable[str], sink: TextIO, cut: int | None) -> int:
    """
    Re-emit a VCF without the columns from ``cut`` onwards.

    A cut at or before the second sample keeps only the fixed columns.

    Returns:
        Number of data lines written.

    Raises:
        ValueError: a data line precedes ``#CHROM``, or a line has fewer than
            the fixed columns while a cut is in effect.
    """
    chrom_seen = False
    written = 0

    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("#"):
            if line.startswith("#CHROM"):
                chrom_seen = True
                fields = line.split("\t")
                if len(fields) < FIXED_COLUMNS:
                    raise ValueError("#CHROM header has fewer than 9 columns")
                if cut is not None:
                    line = "\t".join(_cut(fields, cut))
            sink.write(line + "\n")
            continue

        if not chrom_seen:
            raise ValueError("Encountered variant line before #CHROM header")
        if cut is not None:
            fields = line.split("\t")
            if len(fields) < FIXED_COLUMNS:
                raise ValueError("Variant line has fewer than 9 fields")
            line = "\t".join(_cut(fields, cut))
        sink.write(line + "\n")
        written += 1

    return written


def trim_file(vcf: Path, output: Path, same: int) -> int | None:
    """
    Detect and trim duplicated sample columns of ``vcf`` into ``output``.

    ``same == 0`` copies the file unchanged.

    Returns:
        The cut index that was applied, or None.
    """
    cut = None
    if same > 0:
        with open(vcf) as f:
            cut = detect_cut_index(f, same)

    with open(vcf) as src, atomic_output(output) as dst:
        if same > 0:
            written = trim_duplicate_samples(src, dst, cut)
        else:
            written = 0
            for line in src:
                dst.write(line)

    if cut is None:
        logger.info("No duplicated sample columns found in %s; all columns kept", vcf)
    else:
        logger.info("Cut %s at column %d (%d data lines written)", vcf, cut + 1, written)
    return cut
