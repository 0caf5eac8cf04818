"""Tests for output writers."""

import io
from pathlib import Path

import pytest

from graphvcf.io.output import (
    REFERENCE_TABLE_HEADER,
    GraphPath,
    LockedSink,
    atomic_output,
    write_reference_table,
)
from graphvcf.io.input import read_reference_table

SEQUENCES = {1: "ACGT", 2: "GG", 3: "TTTAA", 4: "C"}


def test_atomic_output_publishes_on_success(temp_dir: Path):
    target = temp_dir / "out.txt"
    with atomic_output(target) as handle:
        handle.write("hello\n")
        assert not target.exists()

    assert target.read_text() == "hello\n"
    assert list(temp_dir.iterdir()) == [target]


def test_atomic_output_leaves_nothing_on_failure(temp_dir: Path):
    target = temp_dir / "out.txt"
    target.write_text("previous\n")

    with pytest.raises(RuntimeError):
        with atomic_output(target) as handle:
            handle.write("partial")
            raise RuntimeError("boom")

    assert target.read_text() == "previous\n"
    assert list(temp_dir.iterdir()) == [target]


def test_atomic_output_unwritable_directory(temp_dir: Path):
    with pytest.raises(OSError, match="Cannot write output"):
        with atomic_output(temp_dir / "missing" / "out.txt"):
            pass


def test_locked_sink_counts_writes():
    buf = io.StringIO()
    sink = LockedSink(buf)
    sink.write("a\n")
    sink.write("")
    sink.write("b\n")

    assert sink.writes == 2
    assert buf.getvalue() == "a\nb\n"


def test_write_reference_table(temp_dir: Path):
    output = temp_dir / "reference.tsv"
    paths = [
        GraphPath("HG002#1#chr1", (1, 2)),
        GraphPath("HG002#1#chrUn_KI270", (4,)),
        GraphPath("HG002#1#chr2", (3, 9, 4)),
    ]

    written = write_reference_table(paths, output, SEQUENCES.get, ignore_level=4)

    assert written == 2
    lines = output.read_text().splitlines()
    assert lines[0] == REFERENCE_TABLE_HEADER
    assert sorted(lines[1:]) == sorted(
        [
            "1\t0\t4\tACGT\t4\tchr1",
            "2\t4\t6\tGG\t2\tchr1",
            "3\t0\t5\tTTTAA\t5\tchr2",
            "9\t5\t5\t\t0\tchr2",
            "4\t5\t6\tC\t1\tchr2",
        ]
    )


def test_reference_table_round_trips_through_loader(temp_dir: Path):
    output = temp_dir / "reference.tsv"
    paths = [GraphPath(f"sample#0#chr{i}", (i,)) for i in (1, 2, 3, 4)]

    write_reference_table(paths, output, SEQUENCES.get, n_jobs=2)
    store, report = read_reference_table(output)

    assert report.header
    assert report.loaded == 4
    assert store.sequence_for(3) == "TTTAA"
    assert store.path_lengths["sample#0#chr3"] == 5
