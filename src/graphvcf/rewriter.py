"""
Streaming Rewriter: one forward pass over a graph VCF.

Header lines are copied verbatim; every data line goes through the
:class:`~graphvcf.core.resolver.CoordinateResolver` and is either written
once (replaced or unmapped) or dropped once (skipped). Output order follows
input order; sorting is left to a downstream tool.
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

from .core.resolver import (
    CoordinateResolver,
    Outcome,
    PathSource,
    PositionSource,
    Resolution,
    SequenceSource,
    SkipReason,
)
from .io.output import atomic_output
from .utils.logging import format_counts

logger = logging.getLogger(__name__)

__all__ = ["RewriteStats", "rewrite_file", "rewrite_stream"]


@dataclass
class RewriteStats:
    """Per-outcome accounting for a rewrite pass."""

    total: int = 0
    replaced: int = 0
    unmapped: int = 0
    skipped: int = 0

    # Breakdown of skipped
    skipped_keyword: int = 0
    skipped_ignore: int = 0
    malformed: int = 0

    # Per-field accounting for replaced records
    path_from_alignment: int = 0
    path_from_reference: int = 0
    id_replaced: int = 0
    ref_from_graph: int = 0
    ref_from_reference: int = 0
    ref_missing: int = 0
    pos_from_alignment: int = 0
    pos_from_reference: int = 0
    pos_missing: int = 0

    header_lines: int = 0

    def record(self, resolution: Resolution, n_fields: int) -> None:
        self.total += 1
        if resolution.outcome is Outcome.SKIPPED:
            self.skipped += 1
            if resolution.skip_reason is SkipReason.KEYWORD:
                self.skipped_keyword += 1
            elif resolution.skip_reason is SkipReason.MALFORMED:
                self.malformed += 1
            else:
                self.skipped_ignore += 1
            return

        if resolution.outcome is Outcome.UNMAPPED:
            self.unmapped += 1
            return

        self.replaced += 1
        if resolution.path_source is PathSource.ALIGNMENT:
            self.path_from_alignment += 1
        else:
            self.path_from_reference += 1
        if n_fields > 2:
            self.id_replaced += 1
        if resolution.sequence_source is SequenceSource.GRAPH:
            self.ref_from_graph += 1
        elif resolution.sequence_source is SequenceSource.REFERENCE:
            self.ref_from_reference += 1
        elif n_fields > 3:
            self.ref_missing += 1
        if resolution.position_source is PositionSource.ALIGNMENT:
            self.pos_from_alignment += 1
        elif resolution.position_source is PositionSource.REFERENCE:
            self.pos_from_reference += 1
        else:
            self.pos_missing += 1

    def outcome_counts(self) -> dict[str, int]:
        return {
            "total": self.total,
            "replaced": self.replaced,
            "unmapped": self.unmapped,
            "skipped": self.skipped,
        }

    @property
    def reconciles(self) -> bool:
        return self.total == self.replaced + self.unmapped + self.skipped

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def rewrite_stream(
    lines: Iterable[str], sink: TextIO, resolver: CoordinateResolver
) -> RewriteStats:
    """
    Rewrite a VCF line stream into ``sink``.

    Args:
        lines: Input lines (trailing newlines are tolerated).
        sink: Text sink receiving the output lines.
        resolver: Configured coordinate resolver.

    Returns:
        Final counters; ``total == replaced + unmapped + skipped``.
    """
    stats = RewriteStats()

    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("#"):
            sink.write(line + "\n")
            stats.header_lines += 1
            continue
        if not line.strip():
            continue

        fields = line.split("\t")
        resolution = resolver.resolve(fields)
        stats.record(resolution, len(fields))
        if resolution.emitted:
            sink.write("\t".join(resolution.fields) + "\n")

    return stats


def rewrite_file(vcf: Path, output: Path, resolver: CoordinateResolver) -> RewriteStats:
    """Rewrite ``vcf`` into ``output``, publishing it only if the pass succeeds."""
    with open(vcf) as src, atomic_output(output) as dst:
        stats = rewrite_stream(src, dst, resolver)

    logger.info("Rewrote %s: %s", vcf, format_counts(stats.outcome_counts()))
    if stats.skipped:
        logger.info(
            "Skipped breakdown: keyword=%d ignore-level=%d malformed=%d",
            stats.skipped_keyword,
            stats.skipped_ignore,
            stats.malformed,
        )
    if stats.ref_missing or stats.pos_missing:
        logger.warning(
            "%d replaced records kept their REF (no sequence), %d kept their POS (no start)",
            stats.ref_missing,
            stats.pos_missing,
        )
    return stats
