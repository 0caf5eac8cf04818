"""
I/O module for graphvcf.

Provides loaders for the reference/alignment tables, the node FASTA accessor,
and atomic writers.
"""

from .input import FastaSequenceAccessor, read_alignment_table, read_reference_table
from .output import GraphPath, LockedSink, atomic_output, write_reference_table

__all__ = [
    "FastaSequenceAccessor",
    "GraphPath",
    "LockedSink",
    "atomic_output",
    "read_alignment_table",
    "read_reference_table",
    "write_reference_table",
]
