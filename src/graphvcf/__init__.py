"""
graphvcf - Translate graph-local variant calls into linear VCF coordinates.

This package provides a command-line interface and Python API for rewriting
pangenome-graph VCF records (node-keyed CHROM/POS) into reference-style
coordinates, normalizing chromosome names, and synthesizing missing header
metadata from the variant body.

Example usage:
    $ graphvcf combine --vcf calls.vcf --alignment nodes.tsv --reference ref.tsv --ignore 4
"""

__version__ = "0.3.0"

from .core.naming import IgnoreLevel, normalize_chrom
from .models.core import CombineConfig, HeaderConfig
from .pipeline import HeaderPipeline, Pipeline
from .rewriter import RewriteStats

__all__ = [
    "__version__",
    "CombineConfig",
    "HeaderConfig",
    "HeaderPipeline",
    "IgnoreLevel",
    "Pipeline",
    "RewriteStats",
    "normalize_chrom",
]
