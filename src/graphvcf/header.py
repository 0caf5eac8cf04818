"""
Header Inference Engine.

Graph callers often emit VCF bodies whose header lacks INFO/FORMAT
declarations and contig lines. This module infers them from the body:

* the body is cut into fixed-size blocks tagged with their first line index;
* each block is summarized independently (:func:`summarize_block`);
* block summaries are folded with :meth:`BlockSummary.merge`, which is
  associative and commutative with :meth:`BlockSummary.empty` as identity, so
  a sequential fold and any parallel partitioning give the same answer;
* declarations are synthesized from the merged statistics, and contig lines
  from the path lengths of the reference table.
"""

import logging
import re
import shutil
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from itertools import islice
from pathlib import Path

from .core.naming import IgnoreLevel, normalize_chrom
from .io.output import atomic_output
from .parallel import parallel_reduce
from .utils.logging import log_call

logger = logging.getLogger(__name__)

__all__ = [
    "BlockSummary",
    "DEFAULT_BLOCK_SIZE",
    "DEFAULT_COLUMN_HEADER",
    "FieldStats",
    "FormatStats",
    "ValueKind",
    "build_header",
    "classify_value",
    "contig_lines",
    "format_definition",
    "infer_body",
    "info_definition",
    "iter_blocks",
    "read_header",
    "summarize_block",
    "synthesize_header",
]

DEFAULT_BLOCK_SIZE = 100_000
DEFAULT_FILEFORMAT = "##fileformat=VCFv4.2"
SOURCE_LINE = "##source=graphvcf/header"
DEFAULT_COLUMN_HEADER = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT"
INFO_DESCRIPTION = "Inferred from body"
FORMAT_DESCRIPTION = "Inferred from FORMAT column"

_INT_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_DECLARED_ID_RE = re.compile(r"^##(INFO|FORMAT)=<ID=([^,>]+)")


class ValueKind(str, Enum):
    INTEGER = "Integer"
    FLOAT = "Float"
    STRING = "String"


def classify_value(token: str) -> ValueKind:
    """Classify a single INFO/FORMAT value."""
    if _INT_RE.fullmatch(token):
        return ValueKind.INTEGER
    if _FLOAT_RE.fullmatch(token):
        return ValueKind.FLOAT
    return ValueKind.STRING


@dataclass
class FieldStats:
    """Statistics for one INFO key. ``FieldStats()`` is the merge identity."""

    seen_as_flag: bool = False
    all_integer: bool = True
    any_float: bool = False
    all_singleton: bool = True
    alt_count_matches: int = 0
    alt_plus_one_matches: int = 0
    sample_count: int = 0

    def observe_flag(self) -> None:
        self.sample_count += 1
        self.seen_as_flag = True

    def observe_values(self, value: str, alt_count: int) -> None:
        self.sample_count += 1
        if not value:
            return
        values = value.split(",")
        self.all_singleton &= len(values) == 1
        if len(values) == alt_count:
            self.alt_count_matches += 1
        if len(values) == alt_count + 1:
            self.alt_plus_one_matches += 1
        for v in values:
            kind = classify_value(v)
            if kind is ValueKind.FLOAT:
                self.any_float = True
                self.all_integer = False
            elif kind is ValueKind.STRING:
                self.all_integer = False

    def merge(self, other: "FieldStats") -> "FieldStats":
        return FieldStats(
            seen_as_flag=self.seen_as_flag or other.seen_as_flag,
            all_integer=self.all_integer and other.all_integer,
            any_float=self.any_float or other.any_float,
            all_singleton=self.all_singleton and other.all_singleton,
            alt_count_matches=self.alt_count_matches + other.alt_count_matches,
            alt_plus_one_matches=self.alt_plus_one_matches + other.alt_plus_one_matches,
            sample_count=self.sample_count + other.sample_count,
        )

    @property
    def value_type(self) -> str:
        if self.seen_as_flag:
            return "Flag"
        if self.all_integer and not self.any_float:
            return ValueKind.INTEGER.value
        if self.any_float:
            return ValueKind.FLOAT.value
        return ValueKind.STRING.value

    @property
    def number(self) -> str:
        if self.seen_as_flag:
            return "0"
        if self.sample_count > 0 and self.alt_count_matches * 2 >= self.sample_count:
            return "A"
        if self.sample_count > 0 and self.alt_plus_one_matches * 2 >= self.sample_count:
            return "R"
        if self.all_singleton:
            return "1"
        return "."


@dataclass(frozen=True)
class FormatStats:
    """Kind and cardinality of a FORMAT key at its earliest appearance."""

    kind: ValueKind
    cardinality: int
    first_line: int

    def merge(self, other: "FormatStats") -> "FormatStats":
        # earliest line wins regardless of merge order
        if (other.first_line, other.kind.value, other.cardinality) < (
            self.first_line,
            self.kind.value,
            self.cardinality,
        ):
            return other
        return self

    @property
    def number(self) -> str:
        # an empty first-sample value (cardinality 0) is declared ".", never Number=0
        return "1" if self.cardinality == 1 else "."


@dataclass
class BlockSummary:
    """Merged statistics of one or more body blocks."""

    info: dict[str, FieldStats] = field(default_factory=dict)
    formats: dict[str, FormatStats] = field(default_factory=dict)
    first_data: tuple[int, str] | None = None
    lines: int = 0

    @classmethod
    def empty(cls) -> "BlockSummary":
        return cls()

    def merge(self, other: "BlockSummary") -> "BlockSummary":
        info = dict(self.info)
        for key, stats in other.info.items():
            info[key] = info[key].merge(stats) if key in info else stats
        formats = dict(self.formats)
        for key, stats in other.formats.items():
            formats[key] = formats[key].merge(stats) if key in formats else stats
        candidates = [fd for fd in (self.first_data, other.first_data) if fd is not None]
        return BlockSummary(
            info=info,
            formats=formats,
            first_data=min(candidates) if candidates else None,
            lines=self.lines + other.lines,
        )


def _observe_format(summary: BlockSummary, fields: list[str], line_no: int) -> None:
    keys = fields[8].split(":")
    sample = fields[9].split(":")
    for pos, key in enumerate(keys):
        if not key or key in summary.formats:
            continue
        token = sample[pos] if pos < len(sample) else ""
        values = [v for v in token.split(",") if v]
        kind = classify_value(values[0]) if values else ValueKind.STRING
        summary.formats[key] = FormatStats(kind, len(values), line_no)


def summarize_block(block: tuple[int, list[str]]) -> BlockSummary:
    """
    Compute INFO/FORMAT statistics for one block of body lines.

    Args:
        block: ``(index of the first line, lines)``.
    """
    start, lines = block
    summary = BlockSummary(lines=len(lines))

    for offset, line in enumerate(lines):
        line = line.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue
        line_no = start + offset
        if summary.first_data is None:
            summary.first_data = (line_no, line)

        fields = line.split("\t")
        if len(fields) < 8:
            continue
        alt_count = sum(1 for a in fields[4].split(",") if a)

        for item in fields[7].split(";"):
            if not item:
                continue
            key, sep, value = item.partition("=")
            if not key:
                continue
            stats = summary.info.setdefault(key, FieldStats())
            if sep:
                stats.observe_values(value, alt_count)
            else:
                stats.observe_flag()

        if len(fields) >= 10:
            _observe_format(summary, fields, line_no)

    return summary


def iter_blocks(
    lines: Iterable[str], block_size: int = DEFAULT_BLOCK_SIZE, start: int = 0
) -> Iterator[tuple[int, list[str]]]:
    """Cut a line stream into ``(first line index, lines)`` blocks."""
    if block_size < 1:
        raise ValueError("block_size must be at least 1")
    it = iter(lines)
    while True:
        block = list(islice(it, block_size))
        if not block:
            return
        yield start, block
        start += len(block)


def infer_body(
    lines: Iterable[str],
    block_size: int = DEFAULT_BLOCK_SIZE,
    n_jobs: int = 1,
    backend: str = "loky",
) -> BlockSummary:
    """Summarize a VCF body, block-parallel."""
    return parallel_reduce(
        summarize_block,
        iter_blocks(lines, block_size),
        BlockSummary.merge,
        BlockSummary.empty(),
        n_jobs=n_jobs,
        backend=backend,
    )


def info_definition(key: str, stats: FieldStats) -> str:
    desc = INFO_DESCRIPTION if stats.sample_count > 0 else ""
    return (
        f"##INFO=<ID={key},Number={stats.number},Type={stats.value_type},"
        f'Description="{desc}">'
    )


def format_definition(key: str, stats: FormatStats) -> str:
    return (
        f"##FORMAT=<ID={key},Number={stats.number},Type={stats.kind.value},"
        f'Description="{FORMAT_DESCRIPTION}">'
    )


def contig_lines(path_lengths: Mapping[str, int], ignore_level: int = IgnoreLevel.KEEP_ALL) -> list[str]:
    """
    ``##contig`` lines for the given paths.

    Paths are grouped by their normalized name; the longest length wins.
    Paths rejected by the ignore level are left out.
    """
    lengths: dict[str, int] = {}
    for raw, length in path_lengths.items():
        contig = normalize_chrom(raw, ignore_level)
        if contig is None:
            continue
        lengths[contig] = max(length, lengths.get(contig, 0))

    out = []
    for contig in sorted(lengths):
        length = lengths[contig]
        if length > 0:
            out.append(f"##contig=<ID={contig},length={length}>")
        else:
            out.append(f"##contig=<ID={contig}>")
    return out


def build_header(
    pre_header: list[str],
    column_header: str | None,
    summary: BlockSummary,
    path_lengths: Mapping[str, int] | None = None,
    ignore_level: int = IgnoreLevel.KEEP_ALL,
) -> list[str]:
    """
    Assemble the synthesized header.

    Order: fileformat, source, contigs, the input's own INFO/FORMAT/FILTER
    declarations, inferred INFO then FORMAT declarations for undeclared
    keys, and the column header line.
    """
    declared: dict[str, set[str]] = {"INFO": set(), "FORMAT": set()}
    kept = []
    for line in pre_header:
        m = _DECLARED_ID_RE.match(line)
        if m:
            declared[m.group(1)].add(m.group(2))
        if line.startswith(("##INFO=<ID=", "##FORMAT=<ID=", "##FILTER=<")):
            kept.append(line)

    fileformat = next((l for l in pre_header if l.startswith("##fileformat=")), DEFAULT_FILEFORMAT)
    header = [fileformat, SOURCE_LINE]

    contigs = contig_lines(path_lengths or {}, ignore_level)
    if path_lengths is not None and not contigs:
        logger.warning("Reference table produced no contigs; header has no contig lines")
    header.extend(contigs)
    header.extend(kept)

    for key in sorted(summary.info):
        if key not in declared["INFO"]:
            header.append(info_definition(key, summary.info[key]))
    for key in sorted(summary.formats):
        if key not in declared["FORMAT"]:
            header.append(format_definition(key, summary.formats[key]))

    if column_header is not None:
        header.append(column_header)
    else:
        header.append(DEFAULT_COLUMN_HEADER)
        if summary.first_data is None:
            logger.warning("No column header and no data lines; downstream tools may reject the output")
    return header


def read_header(lines: Iterable[str]) -> tuple[list[str], str | None, int]:
    """
    Split leading header lines off a VCF line stream.

    Returns:
        ``(## lines, #CHROM line or None, number of header lines consumed)``.
        Consumption stops at the ``#CHROM`` line or the first data line.
    """
    pre_header: list[str] = []
    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("##"):
            pre_header.append(line)
        elif line.startswith(("#CHROM\t", "#CHROM ")):
            return pre_header, line, len(pre_header) + 1
        else:
            break
    return pre_header, None, len(pre_header)


def _body_lines(vcf: Path, skip: int) -> Iterator[str]:
    with open(vcf) as f:
        for line in islice(f, skip, None):
            if not line.endswith("\n"):
                line += "\n"
            yield line


@log_call()
def synthesize_header(
    vcf: Path,
    output: Path,
    path_lengths: Mapping[str, int] | None = None,
    ignore_level: int = IgnoreLevel.KEEP_ALL,
    block_size: int = DEFAULT_BLOCK_SIZE,
    n_jobs: int = 1,
    backend: str = "loky",
) -> BlockSummary:
    """
    Write ``vcf`` to ``output`` behind a synthesized header.

    The input is read twice: once for the header and statistics, once to copy
    the body unchanged behind the new header.
    """
    with open(vcf) as f:
        pre_header, column_header, n_header = read_header(f)

    summary = infer_body(_body_lines(vcf, n_header), block_size, n_jobs, backend)
    header = build_header(pre_header, column_header, summary, path_lengths, ignore_level)
    logger.info(
        "Inferred %d INFO and %d FORMAT keys from %d body lines",
        len(summary.info),
        len(summary.formats),
        summary.lines,
    )

    with atomic_output(output) as out:
        out.write("\n".join(header) + "\n")
        with open(vcf) as src:
            for _ in islice(src, n_header):
                pass
            shutil.copyfileobj(src, out)
    return summary
