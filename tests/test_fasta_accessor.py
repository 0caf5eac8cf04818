"""Tests for the node FASTA sequence accessor."""

import tempfile
import unittest
from pathlib import Path

import pysam

from graphvcf.core.mapping import MappingContext, PathRecord, ReferenceStore
from graphvcf.core.resolver import CoordinateResolver, SequenceSource
from graphvcf.io.input import FastaSequenceAccessor


class TestFastaSequenceAccessor(unittest.TestCase):
    """Node sequences served from an indexed FASTA named by node id."""

    def setUp(self):
        self.test_dir = tempfile.TemporaryDirectory()
        self.base_path = Path(self.test_dir.name)

        self.fasta_path = self.base_path / "nodes.fa"
        with open(self.fasta_path, "w") as f:
            f.write(">10\nACGTGacgt\n")
            f.write(">11\nTTAA\n")
        pysam.faidx(str(self.fasta_path))

    def tearDown(self):
        self.test_dir.cleanup()

    def test_lookup(self):
        with FastaSequenceAccessor(self.fasta_path) as accessor:
            self.assertEqual(accessor(11), "TTAA")
            # case is preserved
            self.assertEqual(accessor(10), "ACGTGacgt")
            self.assertIsNone(accessor(12))

    def test_resolver_prefers_graph_sequence(self):
        ctx = MappingContext(reference=ReferenceStore({11: PathRecord("chr1", 5, "NNNN")}))
        with FastaSequenceAccessor(self.fasta_path) as accessor:
            resolver = CoordinateResolver(ctx, sequence_accessor=accessor)
            res = resolver.resolve(["11", "2", ".", "T", "C"])

        self.assertEqual(res.fields, ["chr1", "5", "2", "TTAA", "C"])
        self.assertIs(res.sequence_source, SequenceSource.GRAPH)


if __name__ == "__main__":
    unittest.main()
