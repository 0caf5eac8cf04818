"""Tests for the coordinate resolver."""

from graphvcf.core.mapping import (
    ALREADY_LINEAR_DISTANCE,
    AlignmentRecord,
    AlignmentStore,
    MappingContext,
    PathRecord,
    ReferenceStore,
)
from graphvcf.core.resolver import (
    CoordinateResolver,
    Outcome,
    PathSource,
    PositionSource,
    SequenceSource,
    SkipReason,
    first_hit,
    parse_node_id,
)


def _context(reference=None, alignment=None) -> MappingContext:
    return MappingContext(
        reference=ReferenceStore(reference or {}),
        alignment=AlignmentStore(alignment or {}),
    )


def _record(chrom: str, pos: str) -> list[str]:
    return [chrom, pos, ".", "A", ".", ".", ".", "."]


class TestParseNodeId:
    def test_pure_integer(self):
        assert parse_node_id("1234") == 1234

    def test_last_digit_run(self):
        assert parse_node_id("node_1234") == 1234
        assert parse_node_id("s12_34x") == 34

    def test_falls_back_to_pos(self):
        assert parse_node_id("graph", "77") == 77
        assert parse_node_id("graph", "x7") is None
        assert parse_node_id("graph") is None


def test_first_hit_reports_index():
    chain = [lambda n: None, lambda n: n * 2, lambda n: -1]
    assert first_hit(chain, 4) == (8, 1)
    assert first_hit([lambda n: None], 4) == (None, None)


def test_reference_only_replacement():
    ctx = _context(reference={10: PathRecord("sample#0#chr1", 0, "ACGTG")})
    resolver = CoordinateResolver(ctx, ignore_level=4)

    res = resolver.resolve(["10", "3", ".", "A", ".", ".", ".", "."])

    assert res.outcome is Outcome.REPLACED
    assert res.fields == ["chr1", "0", "3", "ACGTG", ".", ".", ".", "."]
    assert res.path_source is PathSource.REFERENCE
    assert res.sequence_source is SequenceSource.REFERENCE
    assert res.position_source is PositionSource.REFERENCE


def test_input_fields_not_modified():
    ctx = _context(reference={10: PathRecord("chr1", 0, "ACGTG")})
    fields = _record("10", "3")
    CoordinateResolver(ctx).resolve(fields)
    assert fields == _record("10", "3")


def test_skip_keyword_before_lookup():
    ctx = _context(reference={60: PathRecord("chr1", 0, "A")})
    resolver = CoordinateResolver(ctx, skip={"random"})

    res = resolver.resolve(_record("node_random_60", "1"))

    assert res.outcome is Outcome.SKIPPED
    assert res.skip_reason is SkipReason.KEYWORD
    assert not res.emitted
    assert resolver.resolve(_record("Random_60", "1")).outcome is Outcome.REPLACED


def test_alignment_takes_priority():
    ctx = _context(
        reference={11: PathRecord("ref#chr2", 5, "TTAA")},
        alignment={11: AlignmentRecord("aln#chr1", 3, 100)},
    )
    res = CoordinateResolver(ctx, ignore_level=4).resolve(_record("11", "2"))

    assert res.fields[0] == "chr1"
    assert res.fields[1] == "104"
    assert res.fields[3] == "TTAA"
    assert res.path_source is PathSource.ALIGNMENT
    assert res.position_source is PositionSource.ALIGNMENT


def test_alignment_without_path_falls_back_to_reference_path():
    ctx = _context(
        reference={11: PathRecord("chr2", 5)},
        alignment={11: AlignmentRecord(None, 0, 100)},
    )
    res = CoordinateResolver(ctx).resolve(_record("11", "2"))

    assert res.fields[0] == "chr2"
    assert res.fields[1] == "101"
    assert res.path_source is PathSource.REFERENCE


def test_sentinel_boundary():
    ctx = _context(
        alignment={
            1: AlignmentRecord("chr1", ALREADY_LINEAR_DISTANCE, 10),
            2: AlignmentRecord("chr1", ALREADY_LINEAR_DISTANCE + 1, 10),
        }
    )
    resolver = CoordinateResolver(ctx)

    assert resolver.resolve(_record("1", "0")).fields[1] == str(10 + ALREADY_LINEAR_DISTANCE + 1)
    assert resolver.resolve(_record("2", "0")).fields[1] == "10"


def test_distance_below_minus_one_adds_nothing():
    ctx = _context(alignment={1: AlignmentRecord("chr1", -7, 10)})
    assert CoordinateResolver(ctx).resolve(_record("1", "0")).fields[1] == "10"


def test_graph_sequence_wins_over_reference():
    ctx = _context(reference={10: PathRecord("chr1", 0, "ACGTG")})
    resolver = CoordinateResolver(ctx, sequence_accessor={10: "GGGGG"}.get)

    res = resolver.resolve(_record("10", "3"))

    assert res.fields[3] == "GGGGG"
    assert res.sequence_source is SequenceSource.GRAPH


def test_missing_sequence_and_position_keep_fields():
    ctx = _context(alignment={40: AlignmentRecord("chrX", None, None)})
    res = CoordinateResolver(ctx).resolve(_record("40", "5"))

    assert res.outcome is Outcome.REPLACED
    assert res.fields == ["chrX", "5", "5", "A", ".", ".", ".", "."]
    assert res.sequence_source is None
    assert res.position_source is None


def test_unmapped_passes_through_with_normalized_chrom():
    resolver = CoordinateResolver(_context(), ignore_level=4)

    res = resolver.resolve(_record("GRCh38.chr12_random", "9"))
    assert res.outcome is Outcome.UNMAPPED
    assert res.fields == _record("chr12", "9")

    rejected = resolver.resolve(_record("99", "8"))
    assert rejected.outcome is Outcome.SKIPPED
    assert rejected.skip_reason is SkipReason.IGNORE


def test_rejected_path_is_skipped():
    ctx = _context(reference={50: PathRecord("HG002#1#chrUn_KI270", 0, "A")})
    res = CoordinateResolver(ctx, ignore_level=4).resolve(_record("50", "1"))

    assert res.outcome is Outcome.SKIPPED
    assert res.skip_reason is SkipReason.IGNORE
    assert res.path_source is PathSource.REFERENCE


def test_short_records():
    ctx = _context(reference={10: PathRecord("chr1", 0, "ACGTG")})
    resolver = CoordinateResolver(ctx)

    malformed = resolver.resolve(["10"])
    assert malformed.outcome is Outcome.SKIPPED
    assert malformed.skip_reason is SkipReason.MALFORMED

    assert resolver.resolve(["10", "3"]).fields == ["chr1", "0"]
    assert resolver.resolve(["10", "3", "."]).fields == ["chr1", "0", "3"]


def test_node_id_from_pos_when_chrom_has_no_digits():
    ctx = _context(reference={77: PathRecord("chr3", 1000)})
    res = CoordinateResolver(ctx).resolve(_record("graph", "77"))

    assert res.node_id == 77
    assert res.fields[:3] == ["chr3", "1000", "77"]


def test_oversized_node_id_is_absent():
    huge = "9" * 5000
    assert parse_node_id(huge) is None
    assert parse_node_id("node_" + huge, "77") is None
    assert parse_node_id("graph", huge) is None
