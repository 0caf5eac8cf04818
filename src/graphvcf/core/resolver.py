"""
Coordinate Resolver: graph-local variant records to linear coordinates.

Each data record is decided independently:

1. derive a node id from CHROM (pure integer, else its last digit run),
   falling back to POS;
2. drop it if the raw CHROM contains a skip keyword;
3. look up its path (alignment table first, then reference table); records
   without a path keep their CHROM, subject to the ignore level;
4. normalize the path under the ignore level and use it as CHROM;
5. move the graph-local POS into ID;
6. take REF from the segment sequence (graph FASTA, then reference table);
7. set POS to the linear coordinate (alignment position, then reference
   start offset).

Every lookup in steps 3, 6 and 7 is an ordered chain of pure
``node_id -> value | None`` resolvers; the first hit wins and the index of the
winning source is reported so callers can account for it.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from .mapping import MappingContext
from .naming import IgnoreLevel, normalize_chrom

__all__ = [
    "CoordinateResolver",
    "Outcome",
    "PathSource",
    "PositionSource",
    "Resolution",
    "SequenceAccessor",
    "SequenceSource",
    "SkipReason",
    "first_hit",
    "parse_node_id",
]

SequenceAccessor = Callable[[int], str | None]
NodeLookup = Callable[[int], object | None]


class Outcome(str, Enum):
    """Disjoint fate of one data record."""

    REPLACED = "replaced"
    UNMAPPED = "unmapped"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    KEYWORD = "keyword"
    IGNORE = "ignore"
    MALFORMED = "malformed"


class PathSource(str, Enum):
    ALIGNMENT = "alignment"
    REFERENCE = "reference"


class SequenceSource(str, Enum):
    GRAPH = "graph"
    REFERENCE = "reference"


class PositionSource(str, Enum):
    ALIGNMENT = "alignment"
    REFERENCE = "reference"


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a single record."""

    outcome: Outcome
    fields: list[str] | None = None
    node_id: int | None = None
    skip_reason: SkipReason | None = None
    path_source: PathSource | None = None
    sequence_source: SequenceSource | None = None
    position_source: PositionSource | None = None

    @property
    def emitted(self) -> bool:
        return self.fields is not None


def _last_digit_run(text: str) -> str | None:
    end = len(text)
    while end > 0 and not text[end - 1].isdigit():
        end -= 1
    if end == 0:
        return None
    start = end
    while start > 0 and text[start - 1].isdigit():
        start -= 1
    return text[start:end]


def _as_node_id(text: str) -> int | None:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    try:
        return int(text)
    except ValueError:
        # beyond the interpreter's int conversion limit; no such node
        return None


def parse_node_id(chrom: str, pos: str | None = None) -> int | None:
    """
    Node id encoded by a graph VCF record.

    CHROM as a plain integer ("1234"), else the last run of digits in CHROM
    ("node_1234"). Callers that use a placeholder CHROM such as "graph"
    encode the node in POS, which is used as the fallback.
    """
    node_id = _as_node_id(chrom)
    if node_id is not None:
        return node_id
    digits = _last_digit_run(chrom) if chrom.isascii() else None
    if digits is not None:
        return _as_node_id(digits)
    if pos is not None:
        return _as_node_id(pos)
    return None


def first_hit(chain: Sequence[NodeLookup], node_id: int) -> tuple[object | None, int | None]:
    """Evaluate lookups in order; return the first non-None value and its index."""
    for idx, lookup in enumerate(chain):
        value = lookup(node_id)
        if value is not None:
            return value, idx
    return None, None


class CoordinateResolver:
    """
    Per-record decision procedure combining the mapping stores.

    Args:
        context: Loaded mapping stores.
        skip: Substrings that drop a record when found in its raw CHROM
            (case-sensitive, evaluated before any lookup).
        ignore_level: Chromosome-name policy applied to the output CHROM.
        sequence_accessor: Optional direct node-sequence lookup that takes
            priority over sequences stored in the reference table.
    """

    def __init__(
        self,
        context: MappingContext,
        skip: Iterable[str] = (),
        ignore_level: int = IgnoreLevel.KEEP_ALL,
        sequence_accessor: SequenceAccessor | None = None,
    ):
        self.context = context
        self.skip = frozenset(k for k in skip if k)
        self.ignore_level = int(ignore_level)

        self.path_chain: list[tuple[PathSource, NodeLookup]] = [
            (PathSource.ALIGNMENT, context.alignment.path_for),
            (PathSource.REFERENCE, context.reference.path_for),
        ]
        self.sequence_chain: list[tuple[SequenceSource, NodeLookup]] = []
        if sequence_accessor is not None:
            self.sequence_chain.append((SequenceSource.GRAPH, sequence_accessor))
        self.sequence_chain.append((SequenceSource.REFERENCE, context.reference.sequence_for))
        self.position_chain: list[tuple[PositionSource, NodeLookup]] = [
            (PositionSource.ALIGNMENT, context.alignment.position_for),
            (PositionSource.REFERENCE, context.reference.start_for),
        ]

    def should_skip(self, chrom: str) -> bool:
        return any(k in chrom for k in self.skip)

    @staticmethod
    def _lookup(chain, node_id):
        value, idx = first_hit([fn for _, fn in chain], node_id)
        return value, (chain[idx][0] if idx is not None else None)

    def resolve(self, fields: list[str]) -> Resolution:
        """Resolve one split data line. ``fields`` is not modified."""
        if len(fields) < 2:
            return Resolution(Outcome.SKIPPED, skip_reason=SkipReason.MALFORMED)

        raw_chrom = fields[0]
        node_id = parse_node_id(raw_chrom, fields[1])

        if self.should_skip(raw_chrom):
            return Resolution(Outcome.SKIPPED, node_id=node_id, skip_reason=SkipReason.KEYWORD)

        path, path_source = (None, None)
        if node_id is not None:
            path, path_source = self._lookup(self.path_chain, node_id)

        if path is None:
            chrom = normalize_chrom(raw_chrom, self.ignore_level)
            if chrom is None:
                return Resolution(Outcome.SKIPPED, node_id=node_id, skip_reason=SkipReason.IGNORE)
            out = list(fields)
            out[0] = chrom
            return Resolution(Outcome.UNMAPPED, fields=out, node_id=node_id)

        chrom = normalize_chrom(path, self.ignore_level)
        if chrom is None:
            return Resolution(
                Outcome.SKIPPED,
                node_id=node_id,
                skip_reason=SkipReason.IGNORE,
                path_source=path_source,
            )

        out = list(fields)
        out[0] = chrom
        graph_pos = fields[1]

        if len(out) > 2:
            out[2] = graph_pos

        sequence_source = None
        if len(out) > 3:
            sequence, sequence_source = self._lookup(self.sequence_chain, node_id)
            if sequence is not None:
                out[3] = sequence

        position, position_source = self._lookup(self.position_chain, node_id)
        if position is not None:
            out[1] = str(position)

        return Resolution(
            Outcome.REPLACED,
            fields=out,
            node_id=node_id,
            path_source=path_source,
            sequence_source=sequence_source,
            position_source=position_source,
        )
