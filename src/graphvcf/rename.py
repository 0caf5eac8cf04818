"""
Rename variant identifiers in QTL result tables.

QTL mappers report the variant in the second column, either with the VCF ID
the genotypes were called with (graph callers use numeric ids) or with a
``chr:pos:ref:alt`` key. Both are rewritten to the canonical
``chrom:pos:ref:alt`` key of the matching VCF record, using a map built from
the VCF for this run only.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TextIO

from .core.naming import canonical_chrom_key
from .io.output import atomic_output

logger = logging.getLogger(__name__)

__all__ = [
    "MapMode",
    "RenameStats",
    "build_variant_map",
    "make_variant_key",
    "rename_qtl",
    "rename_qtl_file",
]

HEADER_SECOND_COLUMNS = ("snp", "variant", "node")


class MapMode(str, Enum):
    IDS_ONLY = "ids-only"
    ALL = "all"


@dataclass
class RenameStats:
    rows: int = 0
    replaced: int = 0
    unchanged: int = 0
    header: bool = False


def make_variant_key(chrom: str, pos: str, ref: str, alt: str) -> str | None:
    """``chrom:pos:ref:alt`` with a canonical chromosome, or None off the standard set."""
    canonical = canonical_chrom_key(chrom)
    if canonical is None:
        return None
    return f"{canonical}:{pos}:{ref}:{alt}"


def normalize_variant_token(token: str) -> str | None:
    """Re-key tokens shaped like ``(chr)10:12910:G:A``; rsIDs and others give None."""
    parts = token.strip().split(":")
    if len(parts) < 4:
        return None
    return make_variant_key(parts[0], parts[1], parts[2], parts[3])


def build_variant_map(lines: Iterable[str], mode: MapMode = MapMode.IDS_ONLY) -> dict[str, str]:
    """
    Map VCF identifiers to canonical variant keys.

    ``ids-only`` keeps numeric IDs only. ``all`` also maps every key to
    itself, any non-missing ID, and POS when that POS names a single key.
    The first record wins for a repeated ID.
    """
    mapping: dict[str, str] = {}
    by_pos: dict[str, str] = {}
    ambiguous_pos: set[str] = set()

    for line in lines:
        if line.startswith("#"):
            continue
        line = line.rstrip("\r\n")
        fields = line.split("\t")
        if len(fields) < 5:
            continue
        pos = fields[1].strip()
        vid = fields[2]
        alt = fields[4].split(",")[0]
        key = make_variant_key(fields[0], pos, fields[3], alt)
        if key is None:
            continue

        has_id = bool(vid) and vid != "."
        if mode is MapMode.IDS_ONLY:
            if has_id and vid.isascii() and vid.isdigit():
                mapping.setdefault(vid, key)
            continue

        mapping.setdefault(key, key)
        if has_id:
            mapping.setdefault(vid, key)
        if pos in ambiguous_pos:
            continue
        previous = by_pos.get(pos)
        if previous is None:
            by_pos[pos] = key
        elif previous != key:
            del by_pos[pos]
            ambiguous_pos.add(pos)

    for pos, key in by_pos.items():
        mapping.setdefault(pos, key)

    logger.info(
        "Variant map (%s): %d entries, %d ambiguous positions dropped",
        mode.value,
        len(mapping),
        len(ambiguous_pos),
    )
    return mapping


def _is_header(line: str) -> bool:
    cols = line.split("\t")
    return len(cols) >= 2 and cols[1].lower() in HEADER_SECOND_COLUMNS


def _replace_second_column(line: str, mapping: dict[str, str]) -> str | None:
    cols = line.split("\t")
    if len(cols) < 2:
        return None
    token = cols[1].strip()
    new = mapping.get(token)
    if new is None:
        normalized = normalize_variant_token(token)
        if normalized is not None:
            new = mapping.get(normalized)
    if new is None:
        return None
    cols[1] = new
    return "\t".join(cols)


def rename_qtl(lines: Iterable[str], sink: TextIO, mapping: dict[str, str]) -> RenameStats:
    """Rewrite the second column of a QTL table; blank lines are dropped."""
    stats = RenameStats()
    first = True
    for line in lines:
        line = line.rstrip("\r\n")
        if first:
            first = False
            if _is_header(line):
                stats.header = True
                sink.write(line + "\n")
                continue
        if not line.strip():
            continue
        stats.rows += 1
        renamed = _replace_second_column(line, mapping)
        if renamed is None:
            stats.unchanged += 1
            sink.write(line + "\n")
        else:
            stats.replaced += 1
            sink.write(renamed + "\n")
    return stats


def rename_qtl_file(
    vcf: Path, qtl: Path, output: Path | None = None, mode: MapMode = MapMode.IDS_ONLY
) -> RenameStats:
    """Rename ``qtl`` against ``vcf``; output defaults to ``<qtl>.renamed.tsv``."""
    output = output or qtl.with_name(qtl.name + ".renamed.tsv")
    with open(vcf) as f:
        mapping = build_variant_map(f, mode)

    with open(qtl) as src, atomic_output(output) as dst:
        stats = rename_qtl(src, dst, mapping)

    logger.info(
        "QTL renamed: rows=%d replaced=%d unchanged=%d header=%s -> %s",
        stats.rows,
        stats.replaced,
        stats.unchanged,
        stats.header,
        output,
    )
    return stats
