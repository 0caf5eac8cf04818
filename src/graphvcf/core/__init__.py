"""
Core module for graphvcf.

Provides chromosome-name normalization, the node mapping stores and the
coordinate resolver.
"""

from .mapping import (
    ALREADY_LINEAR_DISTANCE,
    AlignmentRecord,
    AlignmentStore,
    LoadReport,
    MappingContext,
    PathRecord,
    ReferenceStore,
)
from .naming import ChromToken, IgnoreLevel, canonical_chrom_key, normalize_chrom, parse_chrom_token
from .resolver import CoordinateResolver, Outcome, Resolution, parse_node_id

__all__ = [
    "ALREADY_LINEAR_DISTANCE",
    "AlignmentRecord",
    "AlignmentStore",
    "ChromToken",
    "CoordinateResolver",
    "IgnoreLevel",
    "LoadReport",
    "MappingContext",
    "Outcome",
    "PathRecord",
    "ReferenceStore",
    "Resolution",
    "canonical_chrom_key",
    "normalize_chrom",
    "parse_chrom_token",
    "parse_node_id",
]
